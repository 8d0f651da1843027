"""
Domain models (Pydantic).

These types represent the stable "contract" between layers:
- the hazard catalog (`Hazard`, `HazardCatalog`)
- API/CLI inputs (`RouteHazardsRequest`, `NearbyHazardsRequest`, `RoutePlanRequest`)
- outputs consumed by the UI layer (`HazardMatchResult`, `RoutePlan`)

Keeping these models in one place helps:
- validation (reject bad catalog records early),
- typed refactors,
- consistent JSON output across CLI/API.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Iterator, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from safepath.core.geo import GeoPoint as CoreGeoPoint

# Ints stay ints so catalog JSON round-trips without turning 6000 into 6000.0.
Latitude = Union[
    Annotated[int, Field(ge=-90, le=90)],
    Annotated[float, Field(ge=-90, le=90, allow_inf_nan=False)],
]
Longitude = Union[
    Annotated[int, Field(ge=-180, le=180)],
    Annotated[float, Field(ge=-180, le=180, allow_inf_nan=False)],
]
Radius = Union[Annotated[int, Field(gt=0)], Annotated[float, Field(gt=0, allow_inf_nan=False)]]


class GeoPoint(BaseModel):
    """A geographic point in decimal degrees."""

    lat: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    lon: float = Field(..., ge=-180, le=180, allow_inf_nan=False)


class Hazard(BaseModel):
    """A stationary hazard with a radius of relevance and an activity schedule.

    Field names match the catalog JSON exactly so records round-trip unchanged.
    """

    model_config = ConfigDict(frozen=True)

    id: int | str
    type: str
    name: str
    lat: Latitude
    lon: Longitude
    radius_meters: Radius
    description: str = ""
    active_hours: str | None = None
    icon: str | None = None

    @field_validator("type")
    @classmethod
    def _require_type(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("hazard type must not be empty")
        return value

    @property
    def category(self) -> str:
        return self.type

    @property
    def center(self) -> CoreGeoPoint:
        return CoreGeoPoint(lat=self.lat, lon=self.lon)


class HazardCatalog:
    """Immutable, ordered set of hazards loaded once and passed around explicitly."""

    def __init__(self, hazards: list[Hazard] | tuple[Hazard, ...] = ()):
        seen: set[int | str] = set()
        for h in hazards:
            if h.id in seen:
                raise ValueError(f"Duplicate hazard id in catalog: {h.id!r}")
            seen.add(h.id)
        self._hazards: tuple[Hazard, ...] = tuple(hazards)

    @property
    def hazards(self) -> tuple[Hazard, ...]:
        return self._hazards

    def __iter__(self) -> Iterator[Hazard]:
        return iter(self._hazards)

    def __len__(self) -> int:
        return len(self._hazards)

    def __repr__(self) -> str:
        return f"HazardCatalog({len(self._hazards)} hazards)"

    def get(self, hazard_id: int | str) -> Hazard | None:
        for h in self._hazards:
            if h.id == hazard_id:
                return h
        return None


class RouteHazardsRequest(BaseModel):
    """Route polyline as `[lat, lon]` pairs (already reversed from GeoJSON order)."""

    route: list[tuple[float, float]] = Field(default_factory=list)


class NearbyHazardsRequest(BaseModel):
    """Single current-location query; `at` defaults to "now" in the app timezone."""

    point: GeoPoint
    at: datetime | None = None


class RoutePlanRequest(BaseModel):
    """Place names for a route plan (geocoded server-side)."""

    model_config = ConfigDict(populate_by_name=True)

    from_place: str = Field(..., alias="from", min_length=1)
    to_place: str = Field(..., alias="to", min_length=1)


class HazardMatchResult(BaseModel):
    """Matched hazards plus the query metadata."""

    generated_at: datetime
    mode: str
    hazards: list[Hazard]
    summary: str
    meta: dict[str, Any] = Field(default_factory=dict)


class RecentRoute(BaseModel):
    """One entry of the recent-routes list."""

    model_config = ConfigDict(populate_by_name=True)

    from_place: str = Field(..., alias="from")
    to_place: str = Field(..., alias="to")


class RoutePlan(BaseModel):
    """End-to-end route plan: geometry from the router plus the hazards along it."""

    generated_at: datetime
    from_place: str
    to_place: str
    start: GeoPoint
    end: GeoPoint
    coordinates: list[tuple[float, float]]
    distance_km: float
    duration_min: float
    steps: list[str] = Field(default_factory=list)
    hazards: list[Hazard] = Field(default_factory=list)
    summary: str
    navigation_url: str | None = None
