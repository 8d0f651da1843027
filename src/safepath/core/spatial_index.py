"""
Lightweight spatial indexing (grid bucket) for circular lat/lon regions.

Each item is a circle (center + radius). It is registered in every grid cell its
bounding box touches, so a point query only has to look at one cell. Queries are
exact: candidates are always confirmed with a haversine check.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from safepath.core.geo import EARTH_RADIUS_M, GeoPoint, haversine_m

T = TypeVar("T")

# Items covering more cells than this (huge radii) are checked on every query instead.
_MAX_CELLS_PER_ITEM = 4096
# Slack added to bounding boxes (degrees) so float rounding never drops a match.
_BBOX_PAD_DEG = 1e-6


def _bbox_deg(lat: float, lon: float, radius_m: float) -> tuple[float, float, float, float] | None:
    """Bounding box (min_lat, max_lat, min_lon, max_lon) of a spherical cap, or None.

    None means the box cannot be expressed without wrapping (pole or antimeridian).
    """
    delta = float(radius_m) / EARTH_RADIUS_M
    if delta >= math.pi / 2:
        return None
    dlat = math.degrees(delta) + _BBOX_PAD_DEG
    min_lat = lat - dlat
    max_lat = lat + dlat
    if min_lat <= -90.0 or max_lat >= 90.0:
        return None

    ratio = math.sin(delta) / math.cos(math.radians(lat))
    if ratio >= 1.0:
        return None
    dlon = math.degrees(math.asin(ratio)) + _BBOX_PAD_DEG
    min_lon = lon - dlon
    max_lon = lon + dlon
    if min_lon < -180.0 or max_lon > 180.0:
        return None
    return min_lat, max_lat, min_lon, max_lon


@dataclass(frozen=True)
class _Entry(Generic[T]):
    position: int
    item: T
    center: GeoPoint
    radius_m: float


class SpatialGridIndex(Generic[T]):
    def __init__(
        self,
        items: list[T],
        *,
        get_latlon: Callable[[T], tuple[float, float]],
        get_radius_m: Callable[[T], float],
        cell_size_deg: float = 0.05,
    ):
        if float(cell_size_deg) <= 0:
            raise ValueError("cell_size_deg must be > 0")
        self._cell_size_deg = float(cell_size_deg)
        self._cells: dict[tuple[int, int], list[_Entry[T]]] = {}
        # Items that cannot be bucketed; checked on every query.
        self._unbounded: list[_Entry[T]] = []
        self._entries: list[_Entry[T]] = []

        for position, it in enumerate(items):
            lat, lon = get_latlon(it)
            e = _Entry(
                position=position,
                item=it,
                center=GeoPoint(lat=float(lat), lon=float(lon)),
                radius_m=float(get_radius_m(it)),
            )
            self._entries.append(e)
            self._register(e)

    def __len__(self) -> int:
        return len(self._entries)

    def _cell_index(self, deg: float) -> int:
        return int(math.floor(deg / self._cell_size_deg))

    def _register(self, e: _Entry[T]) -> None:
        if not (math.isfinite(e.center.lat) and math.isfinite(e.center.lon) and math.isfinite(e.radius_m)):
            self._unbounded.append(e)
            return
        bbox = _bbox_deg(e.center.lat, e.center.lon, e.radius_m)
        if bbox is None:
            self._unbounded.append(e)
            return
        min_lat, max_lat, min_lon, max_lon = bbox
        rows = range(self._cell_index(min_lat), self._cell_index(max_lat) + 1)
        cols = range(self._cell_index(min_lon), self._cell_index(max_lon) + 1)
        if len(rows) * len(cols) > _MAX_CELLS_PER_ITEM:
            self._unbounded.append(e)
            return
        for r in rows:
            for c in cols:
                self._cells.setdefault((r, c), []).append(e)

    def _candidates(self, lat: float, lon: float) -> list[_Entry[T]]:
        if not (math.isfinite(lat) and math.isfinite(lon)):
            return list(self._unbounded)
        cell = self._cells.get((self._cell_index(lat), self._cell_index(lon)), [])
        return [*cell, *self._unbounded]

    def query_positions(self, *, lat: float, lon: float) -> set[int]:
        """Return insertion positions of every item whose circle covers the point."""
        origin = GeoPoint(lat=float(lat), lon=float(lon))
        out: set[int] = set()
        for e in self._candidates(origin.lat, origin.lon):
            if e.position in out:
                continue
            if haversine_m(e.center, origin) <= e.radius_m:
                out.add(e.position)
        return out

    def query_covering(self, *, lat: float, lon: float) -> list[T]:
        """Return items whose circle covers the point, in insertion order."""
        positions = self.query_positions(lat=lat, lon=lon)
        return [e.item for e in self._entries if e.position in positions]
