"""freqle CLI: bump, view and delete entries in a frecency history file."""

from __future__ import annotations

import contextlib
import json
import logging
import sys
from pathlib import Path
from typing import Any

import typer
from pydantic import BaseModel, ValidationError
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from freqle.config import FreqleConfig, WeightsConfig, loadConfig
from freqle.errors import FreqleError, IOFailureError
from freqle.service import formatListing, svcBump, svcDelete, svcView
from freqle.version import __version__

logger = logging.getLogger("freqle")

_cli = typer.Typer(
    name="freqle",
    help="Keep a frecency-ranked history file: bump entries, view them by score.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
_config_cli = typer.Typer(help="Read/write [bold]~/.freqle/config.json[/bold].")
_cli.add_typer(_config_cli, name="config")

_console = Console()
_err_console = Console(stderr=True)


def _checkFormat(format: str) -> None:
    if format not in ("human", "json"):
        raise typer.BadParameter(f"Invalid format {format!r}; choose human or json")


def _fail(e: FreqleError, format: str = "human") -> typer.Exit:
    """Report e and build the Exit carrying its kind's code."""
    if format == "json":
        print(json.dumps({"ok": False, "kind": e.kind.value, "error": str(e)}))
    else:
        _err_console.print(f"[red]error:[/red] {escape(str(e))}", soft_wrap=True)
    return typer.Exit(e.exit_code)


def _checkKey(key: str | None) -> str | None:
    if key is None:
        return key
    if not key:
        raise typer.BadParameter("Key must not be empty")
    try:
        key.encode("utf-8")
    except UnicodeEncodeError as e:
        raise typer.BadParameter(f"Key is not valid UTF-8: {key!r}") from e
    return key


def _loadConfigOrExit(format: str = "human") -> FreqleConfig:
    from freqle.config import CONFIG_PATH

    try:
        return loadConfig()
    except (OSError, ValueError) as e:
        raise _configError(f"{CONFIG_PATH}: {e}", format, label="Invalid config") from e


def _readStdinKeys() -> list[str]:
    """Collect every non-empty stdin line before the table is touched.

    Keys are split on newlines only, with one trailing carriage return dropped,
    so form feeds and other Unicode line breaks stay part of the key.
    """
    try:
        text = sys.stdin.read()
    except (OSError, UnicodeDecodeError) as e:
        raise IOFailureError(f"Cannot read standard input: {e}") from e
    keys = []
    for line in text.split("\n"):
        if line.endswith("\r"):
            line = line[:-1]
        if line:
            keys.append(line)
    return keys


def _versionCallback(value: bool) -> None:
    if value:
        print(f"freqle {__version__}")
        raise typer.Exit()


@_cli.callback()
def _default(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr"),
    version: bool = typer.Option(
        False, "--version", callback=_versionCallback, is_eager=True, help="Show version"
    ),
) -> None:
    """Frecency history files: time-decayed usage scores for ranking keys."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s | %(message)s",
        force=True,
    )


@_cli.command()
def bump(
    path: Path = typer.Argument(help="History file path"),
    key: str | None = typer.Argument(
        None,
        callback=_checkKey,
        help="Entry to bump. If omitted, acts like a touch: scores are decayed and "
        "expired and the file is created, but nothing is bumped.",
    ),
    threshold: float | None = typer.Option(
        None,
        "--threshold",
        "-t",
        metavar="NUM",
        help="Entries whose monthly energy is at or below this are purged [default: 0.1]",
    ),
    strict: bool = typer.Option(
        False, "--strict", "-e", help="Fail if the file does not exist instead of creating it"
    ),
) -> None:
    """Bump an entry and update the history file."""
    cfg = _loadConfigOrExit()
    try:
        result = svcBump(
            path,
            key,
            threshold=cfg.threshold if threshold is None else threshold,
            strict=strict or cfg.strict,
        )
    except FreqleError as e:
        raise _fail(e) from e
    logger.debug("bump: %s", result)


@_cli.command()
def view(
    path: Path = typer.Argument(help="History file path"),
    augment: bool = typer.Option(
        False,
        "--augment",
        "-a",
        help="Add newline-separated entries read from stdin; new ones rank at the bottom",
    ),
    restrict: bool = typer.Option(
        False, "--restrict", "-r", help="Only show entries that are also read from stdin"
    ),
    hourly: float | None = typer.Option(
        None, "--hourly", "-u", metavar="NUM", help="Hourly energy weight [default: 400]"
    ),
    daily: float | None = typer.Option(
        None, "--daily", "-d", metavar="NUM", help="Daily energy weight [default: 20]"
    ),
    monthly: float | None = typer.Option(
        None, "--monthly", "-m", metavar="NUM", help="Monthly energy weight [default: 1]"
    ),
    scores: bool = typer.Option(False, "--scores", help="Dump every score and component"),
    strict: bool = typer.Option(
        False, "--strict", "-s", help="Fail if the file does not exist instead of creating it"
    ),
    format: str = typer.Option("human", "--format", "-f", help="Output format: human|json"),
) -> None:
    """View the history file, highest score first.

    Blocks on stdin if --augment and/or --restrict are passed.
    """
    _checkFormat(format)
    cfg = _loadConfigOrExit(format)
    overrides = {"hourly": hourly, "daily": daily, "monthly": monthly}
    weights = cfg.weights.model_copy(
        update={k: v for k, v in overrides.items() if v is not None}
    ).toVector()
    try:
        stdin_keys = _readStdinKeys() if augment or restrict else None
        rows = svcView(
            path,
            weights,
            strict=strict or cfg.strict,
            augment_keys=stdin_keys if augment else None,
            restrict_keys=stdin_keys if restrict else None,
            augment_overwrite=cfg.augment_overwrite,
        )
    except FreqleError as e:
        raise _fail(e, format) from e

    if format == "json":
        print(json.dumps([r.model_dump() for r in rows]))
        return
    for line in formatListing(rows, scores=scores):
        typer.echo(line)


@_cli.command()
def delete(
    path: Path = typer.Argument(help="History file path"),
    key: str = typer.Argument(help="Entry to delete", callback=_checkKey),
    strict: bool = typer.Option(
        False, "--strict", "-e", help="Fail if the file does not exist instead of creating it"
    ),
) -> None:
    """Delete an entry from the history file."""
    cfg = _loadConfigOrExit()
    try:
        result = svcDelete(path, key, strict=strict or cfg.strict)
    except FreqleError as e:
        raise _fail(e) from e
    logger.debug("delete: %s", result)


# ============================================================
# Config subcommands
# ============================================================


def _fmtVal(v: Any) -> str:
    if isinstance(v, bool):
        return "true" if v else "false"
    return str(v)


def _isModel(ann: Any) -> bool:
    return isinstance(ann, type) and issubclass(ann, BaseModel)


def _fieldType(dotpath: str) -> type | None:
    """Resolve "threshold" or "weights.hourly" to the field's type, None if unknown."""
    model: type[BaseModel] = FreqleConfig
    *parents, leaf = dotpath.split(".")
    for part in parents:
        f = model.model_fields.get(part)
        if f is None or not _isModel(f.annotation):
            return None
        model = f.annotation
    f = model.model_fields.get(leaf)
    if f is None or _isModel(f.annotation) or not isinstance(f.annotation, type):
        return None
    return f.annotation


def _coerce(value: str, ftype: type) -> Any:
    if ftype is bool:
        if value.lower() in ("true", "yes", "1"):
            return True
        if value.lower() in ("false", "no", "0"):
            return False
        raise ValueError(f"Expected bool, got {value!r}")
    return ftype(value)


def _configError(msg: str, format: str, label: str = "Invalid") -> typer.Exit:
    if format == "json":
        print(json.dumps({"ok": False, "error": msg}))
    else:
        _console.print(f"[red]{label}:[/red] {escape(msg)}")
    return typer.Exit(1)


def _renderSection(title: str, current: BaseModel, default: BaseModel, keys: list[str]) -> None:
    _console.print(f"\n[bold]{title}[/bold]")
    t = Table(show_header=False, box=box.SIMPLE, padding=(0, 1))
    t.add_column("key", style="dim")
    t.add_column("val")
    for key in keys:
        val = getattr(current, key)
        fmt = _fmtVal(val)
        # highlight overrides
        if val != getattr(default, key):
            fmt = f"[yellow]{fmt}[/yellow]"
        t.add_row(key, fmt)
    _console.print(t)


@_config_cli.command("list")
def config_list(
    format: str = typer.Option("human", "--format", "-f", help="Output format: human|json"),
) -> None:
    """Show the effective config (file + FREQLE_* env vars)."""
    _checkFormat(format)
    cfg = _loadConfigOrExit(format)
    if format == "json":
        print(json.dumps(cfg.model_dump()))
        return
    defaults = FreqleConfig()
    general = [k for k in FreqleConfig.model_fields if k != "weights"]
    _renderSection("General", cfg, defaults, general)
    _renderSection("Weights", cfg.weights, defaults.weights, list(WeightsConfig.model_fields))


@_config_cli.command("get")
def config_get(
    dotpath: str = typer.Argument(help="Dot-separated key, e.g. weights.hourly"),
    format: str = typer.Option("human", "--format", "-f", help="Output format: human|json"),
) -> None:
    """Get a single config value."""
    _checkFormat(format)
    ftype = _fieldType(dotpath)
    if ftype is None:
        raise _configError(f"Key not found: {dotpath}", format, label="Key not found")
    node: Any = _loadConfigOrExit(format)
    for part in dotpath.split("."):
        node = getattr(node, part)
    if format == "json":
        print(json.dumps({"key": dotpath, "value": node, "type": ftype.__name__}))
    else:
        _console.print(f"[bold]{dotpath}[/bold] = {_fmtVal(node)}  [dim]({ftype.__name__})[/dim]")


@_config_cli.command("set")
def config_set(
    dotpath: str = typer.Argument(help="Dot-separated key path"),
    value: str = typer.Argument(help="Value, converted to the key's type"),
    format: str = typer.Option("human", "--format", "-f", help="Output format: human|json"),
) -> None:
    """Set a config value in ~/.freqle/config.json."""
    _checkFormat(format)
    from freqle.config import CONFIG_PATH

    ftype = _fieldType(dotpath)
    if ftype is None:
        raise _configError(f"Unknown key: {dotpath}", format, label="Unknown key")
    try:
        coerced = _coerce(value, ftype)
    except ValueError as e:
        raise _configError(str(e), format) from e

    raw: dict = {}
    if CONFIG_PATH.exists():
        with contextlib.suppress(json.JSONDecodeError):
            raw = json.loads(CONFIG_PATH.read_text())
    *parents, leaf = dotpath.split(".")
    node = raw
    for part in parents:
        if not isinstance(node.get(part), dict):
            node[part] = {}
        node = node[part]
    node[leaf] = coerced

    try:
        FreqleConfig(**raw)
    except ValidationError as e:
        raise _configError(str(e), format, label="Invalid value") from e

    CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_PATH.write_text(json.dumps(raw, indent=2) + "\n")
    if format == "json":
        print(json.dumps({"ok": True, "key": dotpath, "value": coerced}))
    else:
        _console.print(f"[green]Set[/green] {dotpath} = {coerced!r}")


def main() -> None:
    _cli()


if __name__ == "__main__":
    main()
