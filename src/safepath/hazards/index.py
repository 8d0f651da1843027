"""
Hazard proximity queries.

`HazardIndex` wraps an immutable `HazardCatalog` and answers two questions:
- which hazards cover a single point (`near_point`)
- which hazards cover at least one point of a route polyline (`near_polyline`)

Both return hazards in catalog order, each at most once.

Routes are matched at their sample points only: a hazard near the middle of a long
straight segment but out of range of both endpoints is not found. Callers that want
segment awareness densify the route first (see `safepath.core.geo.densify`).
"""

from __future__ import annotations

from typing import Iterable, Sequence

from safepath.core.geo import GeoPoint, haversine_m
from safepath.core.spatial_index import SpatialGridIndex
from safepath.domain.models import Hazard, HazardCatalog


def hazard_covers(hazard: Hazard, point: GeoPoint) -> bool:
    return haversine_m(hazard.center, point) <= hazard.radius_meters


def scan_near_point(point: GeoPoint, hazards: Iterable[Hazard]) -> list[Hazard]:
    """Brute-force point query over an arbitrary hazard list."""
    return [h for h in hazards if hazard_covers(h, point)]


def scan_near_polyline(route: Sequence[GeoPoint], hazards: Iterable[Hazard]) -> list[Hazard]:
    """Brute-force route query: first covered route point wins for each hazard."""
    out: list[Hazard] = []
    for h in hazards:
        if any(hazard_covers(h, p) for p in route):
            out.append(h)
    return out


class HazardIndex:
    def __init__(self, catalog: HazardCatalog, *, cell_size_deg: float = 0.05):
        self._catalog = catalog
        self._grid: SpatialGridIndex[Hazard] = SpatialGridIndex(
            list(catalog.hazards),
            get_latlon=lambda h: (h.lat, h.lon),
            get_radius_m=lambda h: h.radius_meters,
            cell_size_deg=cell_size_deg,
        )

    @property
    def catalog(self) -> HazardCatalog:
        return self._catalog

    def __len__(self) -> int:
        return len(self._catalog)

    def near_point(self, point: GeoPoint, hazards: Iterable[Hazard] | None = None) -> list[Hazard]:
        """Hazards whose radius covers `point`; `hazards` overrides the indexed catalog."""
        if hazards is not None:
            return scan_near_point(point, hazards)
        positions = self._grid.query_positions(lat=point.lat, lon=point.lon)
        return [h for i, h in enumerate(self._catalog.hazards) if i in positions]

    def near_polyline(
        self, route: Sequence[GeoPoint], hazards: Iterable[Hazard] | None = None
    ) -> list[Hazard]:
        """Hazards covering at least one route point, in catalog order."""
        if hazards is not None:
            return scan_near_polyline(route, hazards)
        total = len(self._catalog)
        matched: set[int] = set()
        for p in route:
            matched |= self._grid.query_positions(lat=p.lat, lon=p.lon)
            if len(matched) == total:
                break
        return [h for i, h in enumerate(self._catalog.hazards) if i in matched]
