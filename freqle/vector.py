"""Three-timescale score vector (hourly, daily, monthly)."""

from __future__ import annotations

import sys
from dataclasses import dataclass


def _pow(base: float, exponent: float) -> float:
    # float ** raises instead of returning inf; saturate so 0 * factor stays 0
    try:
        return base**exponent
    except OverflowError:
        return sys.float_info.max


@dataclass(eq=True)
class ScoreVector:
    """Energy or weight vector with one component per half-life.

    Arithmetic returns new vectors, except ``+=`` (scalar, used by bump) and
    ``*=`` (vector, used by decay) which update in place.
    """

    hourly: float
    daily: float
    monthly: float

    @classmethod
    def uniform(cls, c: float) -> ScoreVector:
        return cls(c, c, c)

    def __pow__(self, exponent: ScoreVector) -> ScoreVector:
        return ScoreVector(
            _pow(self.hourly, exponent.hourly),
            _pow(self.daily, exponent.daily),
            _pow(self.monthly, exponent.monthly),
        )

    def __truediv__(self, other: ScoreVector) -> ScoreVector:
        return ScoreVector(
            self.hourly / other.hourly,
            self.daily / other.daily,
            self.monthly / other.monthly,
        )

    def __iadd__(self, s: float) -> ScoreVector:
        self.hourly += s
        self.daily += s
        self.monthly += s
        return self

    def __imul__(self, other: ScoreVector) -> ScoreVector:
        self.hourly *= other.hourly
        self.daily *= other.daily
        self.monthly *= other.monthly
        return self

    def dot(self, other: ScoreVector) -> float:
        return self.hourly * other.hourly + self.daily * other.daily + self.monthly * other.monthly

    def asTuple(self) -> tuple[float, float, float]:
        return (self.hourly, self.daily, self.monthly)

    def copy(self) -> ScoreVector:
        return ScoreVector(self.hourly, self.daily, self.monthly)


Energies = ScoreVector
Weights = ScoreVector

# 1 hour, 1 day, 30 days
HALF_LIVES_SEC = ScoreVector(3600.0, 24.0 * 3600.0, 30.0 * 24.0 * 3600.0)


def decayFactors(delta_sec: float) -> ScoreVector:
    """Per-component 0.5 ** (delta / half_life). Above 1 when delta is negative."""
    return ScoreVector.uniform(0.5) ** (ScoreVector.uniform(delta_sec) / HALF_LIVES_SEC)
