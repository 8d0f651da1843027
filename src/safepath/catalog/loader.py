"""
Hazard catalog loader.

The catalog is a JSON array of hazard records (`id, type, name, lat, lon,
radius_meters, description, active_hours, icon`). It can come from:
- a local JSON file (`catalog.path`)
- an HTTP endpoint serving the same JSON (`catalog.url`)
- the catalog bundled with the package (default)

Records are validated into typed Pydantic models once, at load time, and wrapped in
an immutable `HazardCatalog` that is passed explicitly to the matcher.
"""

from __future__ import annotations

import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter

from safepath.config.settings import Settings
from safepath.core.env import resolve_project_path
from safepath.core.http import get_json
from safepath.domain.models import Hazard, HazardCatalog

logger = logging.getLogger(__name__)

_HAZARDS_ADAPTER = TypeAdapter(list[Hazard])

BUNDLED_CATALOG = "hazards.json"


def parse_hazards(payload: Any) -> HazardCatalog:
    """Validate a decoded JSON payload into a `HazardCatalog`."""
    return HazardCatalog(_HAZARDS_ADAPTER.validate_python(payload))


def load_hazards(path: str | Path) -> HazardCatalog:
    """Load and validate a hazard catalog JSON file."""
    resolved = resolve_project_path(path)
    payload = json.loads(resolved.read_text(encoding="utf-8"))
    return parse_hazards(payload)


def load_bundled_hazards() -> HazardCatalog:
    """Load the catalog shipped inside `safepath.catalog`."""
    text = resources.files("safepath.catalog").joinpath(BUNDLED_CATALOG).read_text(encoding="utf-8")
    return parse_hazards(json.loads(text))


def fetch_hazards(url: str, *, timeout_seconds: float = 15) -> HazardCatalog:
    """Fetch the catalog JSON over HTTP.

    Raises:
        httpx.HTTPError: On transport errors or non-2xx status codes.
    """
    logger.info("Fetching hazard catalog from %s", url)
    return parse_hazards(get_json(url, timeout_seconds=timeout_seconds))


def dump_hazards(catalog: HazardCatalog) -> list[dict[str, Any]]:
    """Serialize back to the catalog JSON shape (fields that were not set stay absent)."""
    return [h.model_dump(mode="json", exclude_unset=True) for h in catalog]


def write_hazards(catalog: HazardCatalog, path: str | Path) -> Path:
    resolved = resolve_project_path(path)
    resolved.parent.mkdir(parents=True, exist_ok=True)
    resolved.write_text(json.dumps(dump_hazards(catalog), ensure_ascii=False, indent=2), encoding="utf-8")
    return resolved


def load_catalog(settings: Settings) -> HazardCatalog:
    """Load the catalog configured in settings (url > path > bundled)."""
    if settings.catalog.url:
        catalog = fetch_hazards(settings.catalog.url, timeout_seconds=settings.app.http_timeout_seconds)
        source = settings.catalog.url
    elif settings.catalog.path:
        catalog = load_hazards(settings.catalog.path)
        source = settings.catalog.path
    else:
        catalog = load_bundled_hazards()
        source = "bundled"
    logger.info("Loaded %d hazards from %s", len(catalog), source)
    return catalog
