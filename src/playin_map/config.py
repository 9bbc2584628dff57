from __future__ import annotations

import os
from pathlib import Path
from typing import Tuple

import yaml
from pydantic import BaseModel, Field, field_validator

ANON_KEY_ENV = "PLAYIN_ANON_KEY"


class BackendConfig(BaseModel):
    url: str
    anon_key: str
    venues_table: str = "complexes"
    offers_table: str = "complex_activity_offers"
    timeout_s: float = Field(default=10.0, gt=0)

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        value = value.strip()
        if not value.lower().startswith(("http://", "https://")):
            raise ValueError(f"Invalid URL value: {value!r}")
        return value.rstrip("/")

    @field_validator("anon_key", "venues_table", "offers_table")
    @classmethod
    def _check_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("value must not be empty")
        return value


class MapConfig(BaseModel):
    quiet_interval_s: float = Field(default=0.6, ge=0)
    key_precision: int = Field(default=6, ge=0, le=12)
    max_venues: int = Field(default=400, gt=0)
    default_span: float = Field(default=0.10, gt=0)
    default_center: Tuple[float, float] = (48.8566, 2.3522)
    default_venue_name: str = "Complexe"
    default_emoji: str = "🏟️"


class TooltipConfig(BaseModel):
    delay_s: float = Field(default=1.2, gt=0)


class AppConfig(BaseModel):
    backend: BackendConfig
    map: MapConfig = Field(default_factory=MapConfig)
    tooltip: TooltipConfig = Field(default_factory=TooltipConfig)

    @classmethod
    def load(cls, path: Path) -> "AppConfig":
        with Path(path).expanduser().open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
        anon_key = os.environ.get(ANON_KEY_ENV)
        if anon_key:
            raw.setdefault("backend", {})["anon_key"] = anon_key
        return cls.model_validate(raw)
