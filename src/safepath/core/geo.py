from __future__ import annotations
from dataclasses import dataclass
from math import asin, ceil, cos, isfinite, radians, sin, sqrt
from typing import Any, Iterable, Sequence

"""
Geospatial helpers.

We keep a tiny geometry layer here so hazard matching can do distance calculations
without pulling in heavier GIS dependencies.
"""

EARTH_RADIUS_M = 6_371_000


class InvalidCoordinate(ValueError):
    """Raised when a coordinate is not a finite, in-range lat/lon pair."""


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lon: float


def haversine_m(a: GeoPoint, b: GeoPoint) -> float:
    """Compute great-circle distance in meters between two points.

    No validation happens here: NaN inputs produce a NaN distance.
    """
    r = EARTH_RADIUS_M
    lat1 = radians(a.lat)
    lon1 = radians(a.lon)
    lat2 = radians(b.lat)
    lon2 = radians(b.lon)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    # Argument order matters: min(nan, 1.0) stays nan.
    return 2 * r * asin(sqrt(min(h, 1.0)))


distance_meters = haversine_m


def validate_coordinate(lat: Any, lon: Any) -> GeoPoint:
    """Return a `GeoPoint` or raise `InvalidCoordinate`.

    Accepts anything `float()` understands; rejects NaN/inf and values outside
    [-90, 90] x [-180, 180].
    """
    try:
        lat_f = float(lat)
        lon_f = float(lon)
    except (TypeError, ValueError) as e:
        raise InvalidCoordinate(f"coordinate must be numeric, got ({lat!r}, {lon!r})") from e
    if not (isfinite(lat_f) and isfinite(lon_f)):
        raise InvalidCoordinate(f"coordinate must be finite, got ({lat_f}, {lon_f})")
    if not -90.0 <= lat_f <= 90.0:
        raise InvalidCoordinate(f"latitude out of range: {lat_f}")
    if not -180.0 <= lon_f <= 180.0:
        raise InvalidCoordinate(f"longitude out of range: {lon_f}")
    return GeoPoint(lat=lat_f, lon=lon_f)


def to_geo_point(value: Any) -> GeoPoint:
    """Coerce a `GeoPoint`, a `(lat, lon)` pair or a `{"lat", "lon"}` mapping."""
    if isinstance(value, GeoPoint):
        return validate_coordinate(value.lat, value.lon)
    if isinstance(value, dict):
        if "lat" not in value or "lon" not in value:
            raise InvalidCoordinate(f"coordinate mapping needs 'lat' and 'lon': {value!r}")
        return validate_coordinate(value["lat"], value["lon"])
    if hasattr(value, "lat") and hasattr(value, "lon"):
        return validate_coordinate(value.lat, value.lon)
    if isinstance(value, (list, tuple)) and len(value) == 2:
        return validate_coordinate(value[0], value[1])
    raise InvalidCoordinate(f"expected a (lat, lon) pair, got {value!r}")


def to_route(points: Iterable[Any]) -> list[GeoPoint]:
    """Validate a route polyline given as `[lat, lon]` pairs (or points)."""
    return [to_geo_point(p) for p in points]


def interpolate(a: GeoPoint, b: GeoPoint, fraction: float) -> GeoPoint:
    """Linear interpolation in lat/lon space (fine for road-scale segments)."""
    return GeoPoint(lat=a.lat + (b.lat - a.lat) * fraction, lon=a.lon + (b.lon - a.lon) * fraction)


def densify(route: Sequence[GeoPoint], step_m: float) -> list[GeoPoint]:
    """Insert points so consecutive points are at most `step_m` apart.

    Original points are kept in order; interpolated points are added between them.
    """
    if float(step_m) <= 0:
        raise ValueError("step_m must be > 0")
    if len(route) < 2:
        return list(route)

    out: list[GeoPoint] = [route[0]]
    for prev, cur in zip(route, route[1:]):
        d = haversine_m(prev, cur)
        pieces = int(ceil(d / float(step_m))) if isfinite(d) else 1
        for i in range(1, pieces):
            out.append(interpolate(prev, cur, i / pieces))
        out.append(cur)
    return out
