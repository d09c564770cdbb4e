"""Error kinds. Each exception carries the exit code the CLI reports."""

from __future__ import annotations

from enum import Enum
from pathlib import Path


class ErrorKind(str, Enum):
    MISSING_FILE_STRICT = "missing_file_strict"
    IO_FAILURE = "io_failure"
    DECODE_FAILURE = "decode_failure"
    NUMERIC_FAILURE = "numeric_failure"


EXIT_CODES: dict[ErrorKind, int] = {
    ErrorKind.MISSING_FILE_STRICT: 2,
    ErrorKind.IO_FAILURE: 3,
    ErrorKind.DECODE_FAILURE: 4,
    ErrorKind.NUMERIC_FAILURE: 5,
}


class FreqleError(Exception):
    """Base for every failure that aborts an invocation before persisting."""

    kind: ErrorKind

    @property
    def exit_code(self) -> int:
        return EXIT_CODES[self.kind]


class MissingFileStrictError(FreqleError):
    kind = ErrorKind.MISSING_FILE_STRICT

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"History file does not exist (strict mode): {path}")


class IOFailureError(FreqleError):
    kind = ErrorKind.IO_FAILURE

    def __init__(self, message: str, path: Path | None = None):
        self.path = path
        super().__init__(message)


class DecodeFailureError(FreqleError):
    kind = ErrorKind.DECODE_FAILURE

    def __init__(self, message: str, path: Path | None = None):
        self.path = path
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)


class NumericFailureError(FreqleError):
    kind = ErrorKind.NUMERIC_FAILURE

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Score for {key!r} is NaN; check weights and stored energies")
