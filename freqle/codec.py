"""Binary table encoding.

Layout (little-endian):
    header  magic "FRQL" | u16 version | i64 last_update (µs since epoch, UTC) | u64 count
    entry   u32 key length | UTF-8 key | f64 hourly | f64 daily | f64 monthly

Entries are written in key order so equal tables encode to equal bytes.
"""

from __future__ import annotations

import struct
from datetime import datetime, timedelta, timezone

from freqle.errors import DecodeFailureError
from freqle.vector import ScoreVector

MAGIC = b"FRQL"
FORMAT_VERSION = 1
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_HEADER = struct.Struct("<4sHqQ")
_KEY_LEN = struct.Struct("<I")
_VECTOR = struct.Struct("<3d")


def toMicros(ts: datetime) -> int:
    return (ts - EPOCH) // timedelta(microseconds=1)


def fromMicros(us: int) -> datetime:
    try:
        return EPOCH + timedelta(microseconds=us)
    except OverflowError as e:
        raise DecodeFailureError(f"Timestamp out of range: {us}") from e


def encodeTable(last_update: datetime, energies: dict[str, ScoreVector]) -> bytes:
    parts = [_HEADER.pack(MAGIC, FORMAT_VERSION, toMicros(last_update), len(energies))]
    for key in sorted(energies):
        raw = key.encode("utf-8")
        parts.append(_KEY_LEN.pack(len(raw)))
        parts.append(raw)
        parts.append(_VECTOR.pack(*energies[key].asTuple()))
    return b"".join(parts)


def decodeTable(data: bytes) -> tuple[datetime, dict[str, ScoreVector]]:
    """Parse bytes from encodeTable. Raises DecodeFailureError on anything malformed."""
    if len(data) < _HEADER.size:
        raise DecodeFailureError(
            f"Not a freqle table ({len(data)} bytes, header needs {_HEADER.size})"
        )
    magic, version, micros, count = _HEADER.unpack_from(data, 0)
    if magic != MAGIC:
        raise DecodeFailureError(f"Not a freqle table (bad magic {magic!r})")
    if version != FORMAT_VERSION:
        raise DecodeFailureError(f"Unsupported table format version {version}")
    last_update = fromMicros(micros)

    energies: dict[str, ScoreVector] = {}
    offset = _HEADER.size
    try:
        for _ in range(count):
            (klen,) = _KEY_LEN.unpack_from(data, offset)
            offset += _KEY_LEN.size
            raw = data[offset : offset + klen]
            if len(raw) != klen:
                raise DecodeFailureError("Truncated key")
            offset += klen
            key = raw.decode("utf-8")
            if not key:
                raise DecodeFailureError("Empty key")
            if key in energies:
                raise DecodeFailureError(f"Duplicate key {key!r}")
            energies[key] = ScoreVector(*_VECTOR.unpack_from(data, offset))
            offset += _VECTOR.size
    except struct.error as e:
        raise DecodeFailureError(f"Truncated table: {e}") from e
    except UnicodeDecodeError as e:
        raise DecodeFailureError(f"Key is not valid UTF-8: {e}") from e

    if offset != len(data):
        raise DecodeFailureError(f"{len(data) - offset} trailing bytes after {count} entries")
    return last_update, energies
