# src/civicreport/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/civicreport/config/defaults.yaml`, then optionally overridden by:
- an external YAML file via `CIVICREPORT_CONFIG_PATH` (replaces the packaged defaults)
- environment variables (`CIVICREPORT_LOG_LEVEL`, `CIVICREPORT_DATA_PATH`)

Design rule:
- Tuning knobs (default radius, radius choices, service area) live in YAML, not in code.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator

from civicreport.core.env import load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `civicreport.config`."""
    text = resources.files("civicreport.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "CivicReport"
    timezone: str = "Asia/Kolkata"
    log_level: str = "INFO"


class DataSettings(BaseModel):
    issues_path: str = "data/issues/issues.json"
    # Write store mutations back to `issues_path`.
    persist: bool = False


class ProximitySettings(BaseModel):
    default_radius_km: float = Field(3.0, gt=0)
    radius_choices_km: list[float] = Field(default_factory=lambda: [1.0, 3.0, 5.0, 10.0])
    enforce_radius_choices: bool = False
    max_radius_km: float = Field(50.0, gt=0)

    @model_validator(mode="after")
    def _validate_default(self) -> "ProximitySettings":
        if self.default_radius_km > self.max_radius_km:
            raise ValueError("proximity.default_radius_km must be <= proximity.max_radius_km")
        return self


class GeofenceSettings(BaseModel):
    enabled: bool = True
    south: float = Field(6.8, ge=-90, le=90)
    north: float = Field(37.6, ge=-90, le=90)
    west: float = Field(68.1, ge=-180, le=180)
    east: float = Field(97.4, ge=-180, le=180)


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    data: DataSettings = Field(default_factory=DataSettings)
    proximity: ProximitySettings = Field(default_factory=ProximitySettings)
    geofence: GeofenceSettings = Field(default_factory=GeofenceSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload."""
    data = dict(data)
    log_level = os.getenv("CIVICREPORT_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    issues_path = os.getenv("CIVICREPORT_DATA_PATH")
    if issues_path:
        data.setdefault("data", {})["issues_path"] = issues_path

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("CIVICREPORT_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
