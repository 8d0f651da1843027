"""
Routing ingestion client (OSRM).

The hazard matcher never computes routes itself. This client asks an OSRM server for
the driving route between two points and normalizes the answer:
- geometry: GeoJSON `[lon, lat]` pairs reversed to `[lat, lon]`
- distance: kilometers
- duration: minutes
- steps: one instruction string per maneuver
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from safepath.config.settings import Settings
from safepath.core.geo import GeoPoint
from safepath.core.http import get_json
from safepath.ingestion.errors import RoutingError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteInfo:
    """A normalized route returned by the routing service."""

    coordinates: list[tuple[float, float]]
    distance_km: float
    duration_min: float
    steps: list[str] = field(default_factory=list)


def _format_coordinates(points: list[GeoPoint]) -> str:
    # OSRM expects lon,lat order.
    return ";".join(f"{p.lon},{p.lat}" for p in points)


def _step_instruction(step: dict[str, Any]) -> str | None:
    maneuver = step.get("maneuver") or {}
    instruction = maneuver.get("instruction")
    if isinstance(instruction, str) and instruction.strip():
        return instruction.strip()

    # The public OSRM demo server omits `instruction`; build a short one from type/modifier/name.
    kind = str(maneuver.get("type") or "").strip()
    if not kind:
        return None
    modifier = str(maneuver.get("modifier") or "").strip()
    name = str(step.get("name") or "").strip()
    text = " ".join(part for part in [kind, modifier] if part)
    if name:
        text = f"{text} onto {name}" if kind not in {"depart", "arrive"} else f"{text} on {name}"
    return text[:1].upper() + text[1:]


def parse_route_response(data: Any) -> RouteInfo:
    """Normalize an OSRM `/route` JSON payload (first route only)."""
    if not isinstance(data, dict):
        raise RoutingError("Route calculation failed: unexpected response shape")
    if data.get("code") not in (None, "Ok"):
        raise RoutingError(f"Route calculation failed: {data.get('message') or data.get('code')}")
    routes = data.get("routes") or []
    if not routes:
        raise RoutingError("Route calculation failed: no route found")

    route = routes[0]
    geometry = route.get("geometry") or {}
    raw_coords = geometry.get("coordinates") or []
    try:
        coordinates = [(float(lat), float(lon)) for lon, lat in raw_coords]
    except (TypeError, ValueError) as e:
        raise RoutingError("Route calculation failed: malformed geometry") from e

    steps: list[str] = []
    for leg in route.get("legs") or []:
        for step in leg.get("steps") or []:
            instruction = _step_instruction(step)
            if instruction:
                steps.append(instruction)

    return RouteInfo(
        coordinates=coordinates,
        distance_km=float(route.get("distance") or 0.0) / 1000,
        duration_min=float(route.get("duration") or 0.0) / 60,
        steps=steps,
    )


class RoutingClient:
    """Fetches driving routes from an OSRM server."""

    def __init__(self, settings: Settings):
        self._settings = settings

    def get_route(self, start: GeoPoint, end: GeoPoint) -> RouteInfo:
        """Return the route from `start` to `end`.

        Raises:
            RoutingError: If the service returns no usable route.
            httpx.HTTPError: On transport errors or non-2xx status codes.
        """
        cfg = self._settings.ingestion.osrm
        url = f"{cfg.base_url.rstrip('/')}/route/v1/{cfg.profile}/{_format_coordinates([start, end])}"
        params = {"overview": "full", "geometries": "geojson", "steps": "true"}
        logger.info("Requesting route %.4f,%.4f -> %.4f,%.4f", start.lat, start.lon, end.lat, end.lon)
        data = get_json(url, params=params, timeout_seconds=self._settings.app.http_timeout_seconds)
        return parse_route_response(data)
