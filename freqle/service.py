"""Service layer: one load/decay/mutate/persist pipeline per command."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from freqle.models import RankedEntry
from freqle.table import FrecencyTable
from freqle.vector import Weights

logger = logging.getLogger("freqle")


def svcBump(
    path: Path,
    key: str | None = None,
    threshold: float = 0.1,
    strict: bool = False,
    now: datetime | None = None,
) -> dict:
    """Record one use of key. Without a key this only decays, expires and writes."""
    tbl = FrecencyTable.load(path, strict)
    tbl.decay(now)
    if key is not None:
        tbl.bump(key)
    expired = tbl.expire(threshold)
    tbl.persist(path)
    return {"path": str(path), "key": key, "entries": len(tbl), "expired": expired}


def svcView(
    path: Path,
    weights: Weights,
    strict: bool = False,
    augment_keys: Sequence[str] | None = None,
    restrict_keys: Sequence[str] | None = None,
    augment_overwrite: bool = False,
    now: datetime | None = None,
) -> list[RankedEntry]:
    """Rank the table's keys. Read-only: the file is never written."""
    tbl = FrecencyTable.load(path, strict)
    tbl.decay(now)
    if augment_keys is not None:
        tbl.augment(augment_keys, overwrite=augment_overwrite)
    if restrict_keys is not None:
        tbl = tbl.restrict(restrict_keys)
    return tbl.rank(weights)


def svcDelete(
    path: Path,
    key: str,
    strict: bool = False,
    now: datetime | None = None,
) -> dict:
    """Forget key. Decays first so the stored timestamp stays consistent with bump."""
    tbl = FrecencyTable.load(path, strict)
    tbl.decay(now)
    deleted = tbl.delete(key)
    if not deleted:
        logger.debug("Key %r not in %s", key, path)
    tbl.persist(path)
    return {"path": str(path), "key": key, "deleted": deleted, "entries": len(tbl)}


# ── Rendering ────────────────────────────────────────────────

PRECISION = 3
_COL = 12


def formatListing(rows: Sequence[RankedEntry], scores: bool = False) -> list[str]:
    """Lines to print for a ranked view: keys only, or a score table."""
    if not scores:
        return [r.key for r in rows]
    header = f"{'score':>{_COL}} {'hourly':>{_COL}} {'daily':>{_COL}} {'monthly':>{_COL}}  key"
    lines = [header]
    for r in rows:
        vals = (r.score, r.hourly, r.daily, r.monthly)
        nums = " ".join(f"{v:>{_COL}.{PRECISION}f}" for v in vals)
        lines.append(f"{nums}  {r.key}")
    return lines
