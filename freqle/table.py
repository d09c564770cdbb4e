"""Frecency table: decay, mutation, ranking and on-disk persistence."""

from __future__ import annotations

import logging
import math
import os
import tempfile
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path

from freqle.codec import decodeTable, encodeTable
from freqle.errors import (
    DecodeFailureError,
    IOFailureError,
    MissingFileStrictError,
    NumericFailureError,
)
from freqle.models import RankedEntry
from freqle.vector import Energies, ScoreVector, Weights, decayFactors

logger = logging.getLogger("freqle")


def utcNow() -> datetime:
    return datetime.now(timezone.utc)


class FrecencyTable:
    """Key → energy mapping plus the time it was last decayed."""

    def __init__(
        self,
        last_update: datetime | None = None,
        energies: dict[str, Energies] | None = None,
    ):
        self.last_update = last_update or utcNow()
        self.energies: dict[str, Energies] = energies if energies is not None else {}

    def __len__(self) -> int:
        return len(self.energies)

    def __contains__(self, key: object) -> bool:
        return key in self.energies

    # ── mutation ──────────────────────────────────────────────

    def decay(self, now: datetime | None = None) -> None:
        """Decay every entry by the time elapsed since last_update, then advance it."""
        now = now or utcNow()
        delta_sec = (now - self.last_update).total_seconds()
        if delta_sec < 0:
            logger.warning("Clock moved backwards by %.3fs; scores will grow", -delta_sec)
        alpha = decayFactors(delta_sec)
        for erg in self.energies.values():
            erg *= alpha
        self.last_update = now
        logger.debug("Decayed %d entries over %.3fs", len(self.energies), delta_sec)

    def bump(self, key: str) -> None:
        if not key:
            raise ValueError("Cannot bump an empty key")
        erg = self.energies.get(key)
        if erg is None:
            self.energies[key] = ScoreVector.uniform(1.0)
        else:
            erg += 1.0

    def expire(self, threshold: float) -> int:
        """Drop entries whose monthly energy is <= threshold. Returns how many went."""
        dead = [k for k, erg in self.energies.items() if erg.monthly <= threshold]
        for k in dead:
            del self.energies[k]
        if dead:
            logger.debug("Expired %d entries (monthly <= %g)", len(dead), threshold)
        return len(dead)

    def augment(self, keys: Iterable[str], overwrite: bool = False) -> None:
        """Give every key a zero baseline.

        Existing entries keep their energy unless overwrite is set, in which
        case they are reset to zero as well.
        """
        for key in keys:
            if overwrite or key not in self.energies:
                self.energies[key] = ScoreVector.uniform(0.0)

    def restrict(self, keys: Iterable[str]) -> FrecencyTable:
        """Copy of this table holding only the given keys that are present."""
        subset: dict[str, Energies] = {}
        for key in keys:
            erg = self.energies.get(key)
            if erg is not None:
                subset[key] = erg.copy()
        return FrecencyTable(last_update=self.last_update, energies=subset)

    def delete(self, key: str) -> bool:
        return self.energies.pop(key, None) is not None

    # ── scoring ───────────────────────────────────────────────

    def rank(self, weights: Weights) -> list[RankedEntry]:
        """Score every entry by weights · energy, highest first, ties by key.

        Raises NumericFailureError before ranking anything if a score is NaN.
        """
        scored: list[tuple[str, float, Energies]] = []
        for key, erg in self.energies.items():
            score = weights.dot(erg)
            if math.isnan(score):
                raise NumericFailureError(key)
            scored.append((key, score, erg))
        scored.sort(key=lambda x: (-x[1], x[0]))
        return [
            RankedEntry(key=k, score=s, hourly=e.hourly, daily=e.daily, monthly=e.monthly)
            for k, s, e in scored
        ]

    # ── persistence ───────────────────────────────────────────

    @classmethod
    def load(cls, path: Path, strict: bool = False) -> FrecencyTable:
        """Read the table at path, or start a fresh one if it is missing and not strict."""
        path = Path(path)
        if not path.exists():
            if strict:
                raise MissingFileStrictError(path)
            logger.debug("No history at %s, starting empty", path)
            return cls()
        try:
            data = path.read_bytes()
        except OSError as e:
            raise IOFailureError(f"Cannot read {path}: {e}", path=path) from e
        try:
            last_update, energies = decodeTable(data)
        except DecodeFailureError as e:
            raise DecodeFailureError(str(e), path=path) from e
        logger.debug("Loaded %d entries from %s", len(energies), path)
        return cls(last_update=last_update, energies=energies)

    def persist(self, path: Path) -> None:
        """Write to a temp file beside path, then rename it over path."""
        path = Path(path)
        try:
            data = encodeTable(self.last_update, self.energies)
        except UnicodeEncodeError as e:
            raise IOFailureError(f"Cannot write {path}: key is not UTF-8 ({e})", path=path) from e
        tmp_name: str | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise IOFailureError(f"Cannot write {path}: {e}", path=path) from e
        logger.debug("Wrote %d entries (%d bytes) to %s", len(self.energies), len(data), path)
