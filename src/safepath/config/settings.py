# src/safepath/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/safepath/config/defaults.yaml`, then optionally overridden by:
- environment variables (e.g., `SAFEPATH_LOG_LEVEL`, `SAFEPATH_OSRM_BASE_URL`)
- an external YAML file via `SAFEPATH_CONFIG_PATH`

Design rule:
- Tuning knobs live in YAML, not hard-coded in business logic.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any
from safepath.core.env import load_dotenv_if_present

import yaml
from pydantic import BaseModel, Field


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `safepath.config`."""
    text = resources.files("safepath.config").joinpath(filename).read_text(encoding="utf-8")
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
    name: str = "SafePath"
    timezone: str = "Asia/Kolkata"
    http_timeout_seconds: float = 15
    log_level: str = "INFO"


class CatalogSettings(BaseModel):
    # Empty path and url means "use the catalog bundled with the package".
    path: str | None = None
    url: str | None = None


class MatchingSettings(BaseModel):
    # None keeps point-sampling semantics; a step (meters) densifies routes first.
    densify_step_m: float | None = Field(default=None, gt=0)
    cell_size_deg: float = Field(0.05, gt=0)


class HistorySettings(BaseModel):
    path: str = ".cache/safepath/recent_routes.json"
    max_items: int = Field(5, ge=1, le=100)


class OsrmSettings(BaseModel):
    base_url: str = "https://router.project-osrm.org"
    profile: str = "driving"


class NominatimSettings(BaseModel):
    base_url: str = "https://nominatim.openstreetmap.org"


class StaticGeocoderSettings(BaseModel):
    places: dict[str, tuple[float, float]] = Field(default_factory=dict)


class GeocodingSettings(BaseModel):
    # "nominatim" calls the web service; "static" only uses the lookup table below.
    provider: str = "nominatim"
    nominatim: NominatimSettings = Field(default_factory=NominatimSettings)
    static: StaticGeocoderSettings = Field(default_factory=StaticGeocoderSettings)


class NavigationSettings(BaseModel):
    directions_url: str = "https://www.google.com/maps/dir/"


class IngestionSettings(BaseModel):
    osrm: OsrmSettings = Field(default_factory=OsrmSettings)
    geocoding: GeocodingSettings = Field(default_factory=GeocodingSettings)


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    matching: MatchingSettings = Field(default_factory=MatchingSettings)
    history: HistorySettings = Field(default_factory=HistorySettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)
    navigation: NavigationSettings = Field(default_factory=NavigationSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("SAFEPATH_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    catalog_path = os.getenv("SAFEPATH_CATALOG_PATH")
    if catalog_path:
        data.setdefault("catalog", {})["path"] = catalog_path

    catalog_url = os.getenv("SAFEPATH_CATALOG_URL")
    if catalog_url:
        data.setdefault("catalog", {})["url"] = catalog_url

    history_path = os.getenv("SAFEPATH_HISTORY_PATH")
    if history_path:
        data.setdefault("history", {})["path"] = history_path

    osrm_url = os.getenv("SAFEPATH_OSRM_BASE_URL")
    if osrm_url:
        data.setdefault("ingestion", {}).setdefault("osrm", {})["base_url"] = osrm_url

    nominatim_url = os.getenv("SAFEPATH_NOMINATIM_BASE_URL")
    if nominatim_url:
        geocoding = data.setdefault("ingestion", {}).setdefault("geocoding", {})
        geocoding.setdefault("nominatim", {})["base_url"] = nominatim_url

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("SAFEPATH_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
