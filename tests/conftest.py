"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

import pytest

from freqle.table import FrecencyTable
from freqle.vector import ScoreVector

T0 = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _isolate_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point CONFIG_DIR / CONFIG_PATH at tmp_path and drop FREQLE_* env overrides."""
    for name in ("FREQLE_THRESHOLD", "FREQLE_STRICT", "FREQLE_AUGMENT_OVERWRITE"):
        monkeypatch.delenv(name, raising=False)
    cfg_dir = tmp_path / ".freqle"
    cfg_dir.mkdir()
    with (
        patch("freqle.config.CONFIG_DIR", cfg_dir),
        patch("freqle.config.CONFIG_PATH", cfg_dir / "config.json"),
    ):
        yield


@pytest.fixture
def hist_path(tmp_path: Path) -> Path:
    return tmp_path / "history.bin"


@pytest.fixture
def table() -> FrecencyTable:
    """Small table stamped at T0."""
    return FrecencyTable(
        last_update=T0,
        energies={
            "a": ScoreVector(2.0, 2.0, 2.0),
            "b": ScoreVector(1.0, 1.0, 1.0),
            "c": ScoreVector(0.0, 0.5, 0.0625),
        },
    )
