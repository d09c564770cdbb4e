"""Pydantic models for ranked listings."""

from __future__ import annotations

from pydantic import BaseModel


class RankedEntry(BaseModel):
    key: str
    score: float
    hourly: float
    daily: float
    monthly: float
