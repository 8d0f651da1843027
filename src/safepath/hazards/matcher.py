"""
Route hazard matching (the entry points used by the planner, API and CLI).

Two compositions are exposed on purpose and are NOT unified:
- `match_along_route`: proximity to the route only. Activity windows are ignored, so
  every geometrically-near hazard is surfaced (route-planning view).
- `match_near_point`: proximity to a single location AND `is_active(hazard, now)`
  (current-location view).

Whether the route view should also honor activity windows is an open product
question; until it is decided, both behaviors are kept as-is.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterable

from safepath.core.geo import GeoPoint, densify, to_geo_point, to_route
from safepath.domain.models import Hazard, HazardCatalog
from safepath.hazards.index import HazardIndex, scan_near_point, scan_near_polyline
from safepath.hazards.time_window import is_active

logger = logging.getLogger(__name__)


class RouteHazardMatcher:
    """Matches routes and points against one immutable hazard catalog."""

    def __init__(
        self,
        catalog: HazardCatalog,
        *,
        densify_step_m: float | None = None,
        cell_size_deg: float = 0.05,
    ):
        if densify_step_m is not None and float(densify_step_m) <= 0:
            raise ValueError("densify_step_m must be > 0 when set")
        self._index = HazardIndex(catalog, cell_size_deg=cell_size_deg)
        self._densify_step_m = float(densify_step_m) if densify_step_m is not None else None

    @property
    def index(self) -> HazardIndex:
        return self._index

    def _prepare_route(self, route: Iterable[Any]) -> list[GeoPoint]:
        points = to_route(route)
        if self._densify_step_m is not None:
            points = densify(points, self._densify_step_m)
        return points

    def match_along_route(self, route: Iterable[Any]) -> list[Hazard]:
        """Hazards within radius of any route point (activity windows ignored)."""
        points = self._prepare_route(route)
        if not points:
            return []
        found = self._index.near_polyline(points)
        logger.debug("Route with %d points matched %d hazards", len(points), len(found))
        return found

    def match_near_point(self, point: Any, now: datetime) -> list[Hazard]:
        """Hazards covering `point` that are active at `now`."""
        origin = to_geo_point(point)
        return [h for h in self._index.near_point(origin) if is_active(h, now)]


def match_along_route(route: Iterable[Any], hazards: Iterable[Hazard]) -> list[Hazard]:
    """Stateless variant of `RouteHazardMatcher.match_along_route` over a hazard list."""
    points = to_route(route)
    if not points:
        return []
    return scan_near_polyline(points, list(hazards))


def match_near_point(point: Any, hazards: Iterable[Hazard], now: datetime) -> list[Hazard]:
    """Stateless variant of `RouteHazardMatcher.match_near_point` over a hazard list."""
    origin = to_geo_point(point)
    return [h for h in scan_near_point(origin, hazards) if is_active(h, now)]
