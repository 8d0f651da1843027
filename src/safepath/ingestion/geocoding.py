"""
Geocoding clients.

Two interchangeable implementations of `Geocoder.geocode(place) -> GeoPoint`:
- `NominatimGeocoder`: OpenStreetMap Nominatim search API (first hit wins)
- `StaticGeocoder`: fixed, case-insensitive lookup table (offline demos and tests)

Both raise `LocationNotFound` when the place cannot be resolved.
"""

from __future__ import annotations

import logging
from typing import Mapping, Protocol

from safepath.config.settings import Settings
from safepath.core.geo import GeoPoint, InvalidCoordinate, validate_coordinate
from safepath.core.http import get_json
from safepath.ingestion.errors import LocationNotFound

logger = logging.getLogger(__name__)


class Geocoder(Protocol):
    def geocode(self, place: str) -> GeoPoint: ...


class StaticGeocoder:
    def __init__(self, places: Mapping[str, tuple[float, float]]):
        self._places = {k.strip().lower(): validate_coordinate(lat, lon) for k, (lat, lon) in places.items()}

    def geocode(self, place: str) -> GeoPoint:
        point = self._places.get(place.strip().lower())
        if point is None:
            raise LocationNotFound(place)
        return point


class NominatimGeocoder:
    def __init__(self, settings: Settings):
        self._settings = settings

    def geocode(self, place: str) -> GeoPoint:
        """Resolve `place` with Nominatim.

        Raises:
            LocationNotFound: If the search returns no usable result.
            httpx.HTTPError: On transport errors or non-2xx status codes.
        """
        url = f"{self._settings.ingestion.geocoding.nominatim.base_url.rstrip('/')}/search"
        params = {"format": "json", "q": place, "limit": 1}
        logger.info("Geocoding %r", place)
        data = get_json(url, params=params, timeout_seconds=self._settings.app.http_timeout_seconds)
        if not isinstance(data, list) or not data:
            raise LocationNotFound(place)
        first = data[0] if isinstance(data[0], dict) else {}
        try:
            return validate_coordinate(first.get("lat"), first.get("lon"))
        except InvalidCoordinate as e:
            raise LocationNotFound(place) from e


def build_geocoder(settings: Settings, *, provider: str | None = None) -> Geocoder:
    """Build the geocoder named by `provider` (defaults to `ingestion.geocoding.provider`)."""
    name = (provider or settings.ingestion.geocoding.provider).strip().lower()
    if name == "static":
        return StaticGeocoder(settings.ingestion.geocoding.static.places)
    if name == "nominatim":
        return NominatimGeocoder(settings)
    raise ValueError(f"Unknown geocoding provider '{name}'.")
