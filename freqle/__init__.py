"""Frecency table: time-decayed usage scores for ranking keys."""

from freqle.errors import (
    DecodeFailureError,
    ErrorKind,
    FreqleError,
    IOFailureError,
    MissingFileStrictError,
    NumericFailureError,
)
from freqle.table import FrecencyTable
from freqle.vector import Energies, ScoreVector, Weights

__all__ = [
    "DecodeFailureError",
    "Energies",
    "ErrorKind",
    "FrecencyTable",
    "FreqleError",
    "IOFailureError",
    "MissingFileStrictError",
    "NumericFailureError",
    "ScoreVector",
    "Weights",
]
