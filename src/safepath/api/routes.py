"""
API routes.

Endpoints:
- GET  `/api/health`: liveness + catalog size.
- GET  `/api/hazards`: the loaded hazard catalog.
- POST `/api/hazards/route`: hazards along a route polyline (activity windows ignored).
- POST `/api/hazards/near`: active hazards around a single point.
- POST `/api/routes/plan`: geocode + route + hazards for two place names.
- GET  `/api/routes/recent`: recently planned (from, to) pairs.
"""

from __future__ import annotations

import logging
from functools import lru_cache

import httpx
from fastapi import APIRouter, HTTPException

from safepath.catalog.loader import dump_hazards
from safepath.config.settings import get_settings
from safepath.core.time import now_in, to_local
from safepath.domain.models import (
    HazardMatchResult,
    NearbyHazardsRequest,
    RouteHazardsRequest,
    RoutePlan,
    RoutePlanRequest,
)
from safepath.hazards.matcher import RouteHazardMatcher
from safepath.ingestion.errors import CollaboratorError, LocationNotFound
from safepath.ingestion.geocoding import Geocoder, build_geocoder
from safepath.ingestion.routing_client import RoutingClient
from safepath.planner.plan import (
    build_history,
    build_matcher,
    nearby_hazards_result,
    plan_safe_route,
    route_hazards_result,
)
from safepath.planner.recent import RecentRoutes

logger = logging.getLogger(__name__)

router = APIRouter()


@lru_cache
def _matcher() -> RouteHazardMatcher:
    # The catalog is loaded once per process and never mutated.
    return build_matcher(get_settings())


@lru_cache
def _clients() -> tuple[Geocoder, RoutingClient]:
    settings = get_settings()
    return build_geocoder(settings), RoutingClient(settings)


@lru_cache
def _history() -> RecentRoutes:
    return build_history(get_settings())


def _validation_error(e: Exception) -> HTTPException:
    return HTTPException(status_code=400, detail={"code": "VALIDATION_ERROR", "message": str(e)})


@router.get("/api/health")
def get_health() -> dict:
    return {"status": "ok", "hazard_count": len(_matcher().index)}


@router.get("/api/hazards")
def get_hazards() -> dict:
    """Return the hazard catalog in its JSON exchange format."""
    catalog = _matcher().index.catalog
    return {"count": len(catalog), "hazards": dump_hazards(catalog)}


@router.post("/api/hazards/route", response_model=HazardMatchResult)
def post_route_hazards(request: RouteHazardsRequest) -> HazardMatchResult:
    """Hazards within radius of any route point (no activity-window filtering)."""
    settings = get_settings()
    try:
        return route_hazards_result(_matcher(), request.route, settings=settings)
    except ValueError as e:
        raise _validation_error(e) from e


@router.post("/api/hazards/near", response_model=HazardMatchResult)
def post_nearby_hazards(request: NearbyHazardsRequest) -> HazardMatchResult:
    """Active hazards covering a single point at `at` (default: now, app timezone)."""
    settings = get_settings()
    tz = settings.app.timezone
    at = to_local(request.at, tz) if request.at is not None else now_in(tz)
    try:
        return nearby_hazards_result(_matcher(), request.point, at, settings=settings)
    except ValueError as e:
        raise _validation_error(e) from e


@router.post("/api/routes/plan", response_model=RoutePlan)
def post_route_plan(request: RoutePlanRequest) -> RoutePlan:
    """Plan a route between two place names and list the hazards along it."""
    settings = get_settings()
    geocoder, routing_client = _clients()
    try:
        return plan_safe_route(
            request.from_place,
            request.to_place,
            settings=settings,
            matcher=_matcher(),
            geocoder=geocoder,
            routing_client=routing_client,
            history=_history(),
        )
    except LocationNotFound as e:
        raise HTTPException(status_code=404, detail={"code": "LOCATION_NOT_FOUND", "message": str(e)}) from e
    except (CollaboratorError, httpx.HTTPError) as e:
        logger.warning("Route planning failed upstream: %s", e)
        raise HTTPException(status_code=502, detail={"code": "UPSTREAM_ERROR", "message": str(e)}) from e
    except ValueError as e:
        raise _validation_error(e) from e


@router.get("/api/routes/recent")
def get_recent_routes() -> dict:
    return {"routes": [r.model_dump(by_alias=True) for r in _history().items()]}
