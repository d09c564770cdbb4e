"""Config loading from ~/.freqle/config.json with env var overrides."""

from __future__ import annotations

import json
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from freqle.vector import Weights

CONFIG_DIR = Path.home() / ".freqle"
CONFIG_PATH = CONFIG_DIR / "config.json"


class WeightsConfig(BaseModel):
    hourly: float = 400.0
    daily: float = 20.0
    monthly: float = 1.0

    def toVector(self) -> Weights:
        return Weights(self.hourly, self.daily, self.monthly)


class FreqleConfig(BaseSettings):
    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_prefix="FREQLE_",
        env_nested_delimiter="__",
        extra="ignore",
    )
    # Expiry cutoff on the monthly component
    threshold: float = 0.1
    strict: bool = False
    # Reset existing entries to zero on --augment instead of keeping them
    augment_overwrite: bool = False
    weights: WeightsConfig = Field(default_factory=WeightsConfig)


def loadConfig() -> FreqleConfig:
    """Load config from ~/.freqle/config.json (if any) with env var overrides."""
    if CONFIG_PATH.exists():
        raw = json.loads(CONFIG_PATH.read_text())
        if not isinstance(raw, dict):
            raise ValueError(f"Expected a JSON object, got {type(raw).__name__}")
        return FreqleConfig(**raw)
    return FreqleConfig()
