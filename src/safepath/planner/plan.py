from __future__ import annotations

# This module is the "orchestrator" for the route-planning flow.
# It wires together:
# - collaborators (geocoder + routing client) that turn place names into a polyline
# - the hazard matcher (pure, in-memory) that finds hazards along that polyline
# - presentation helpers (alert summary, navigation URL) and the recent-routes history
#
# Design goal:
# - Keep each layer focused (ingestion does fetching; hazards do geometry; this file does orchestration).
# - Collaborator failures propagate: there is no meaningful "best effort" route without a polyline.

import logging
from datetime import datetime
from zoneinfo import ZoneInfo

from safepath.catalog.loader import load_catalog
from safepath.config.settings import Settings, get_settings
from safepath.core.env import resolve_project_path
from safepath.domain.models import GeoPoint, HazardCatalog, HazardMatchResult, RoutePlan
from safepath.hazards.matcher import RouteHazardMatcher
from safepath.ingestion.geocoding import Geocoder, build_geocoder
from safepath.ingestion.routing_client import RoutingClient
from safepath.planner.alerts import NO_NEARBY_HAZARDS_MESSAGE, navigation_url, summarize_hazards
from safepath.planner.recent import RecentRoutes

logger = logging.getLogger(__name__)


def build_matcher(settings: Settings, catalog: HazardCatalog | None = None) -> RouteHazardMatcher:
    # Load the configured catalog unless the caller (tests, API cache) already has one.
    catalog = catalog if catalog is not None else load_catalog(settings)
    return RouteHazardMatcher(
        catalog,
        densify_step_m=settings.matching.densify_step_m,
        cell_size_deg=settings.matching.cell_size_deg,
    )


def build_history(settings: Settings) -> RecentRoutes:
    return RecentRoutes(resolve_project_path(settings.history.path), max_items=settings.history.max_items)


def plan_safe_route(
    from_place: str,
    to_place: str,
    *,
    settings: Settings | None = None,
    matcher: RouteHazardMatcher | None = None,
    geocoder: Geocoder | None = None,
    routing_client: RoutingClient | None = None,
    history: RecentRoutes | None = None,
) -> RoutePlan:
    # ---- Step 1: Validate inputs (ValueError becomes a 400 in the API layer) ----
    from_place = (from_place or "").strip()
    to_place = (to_place or "").strip()
    if not from_place or not to_place:
        raise ValueError("Please enter both source and destination.")

    # ---- Step 2: Resolve settings and collaborators (tests inject stubs) ----
    settings = settings or get_settings()
    matcher = matcher or build_matcher(settings)
    geocoder = geocoder or build_geocoder(settings)
    routing_client = routing_client or RoutingClient(settings)

    # ---- Step 3: Place names -> coordinates -> route polyline ----
    start = geocoder.geocode(from_place)
    end = geocoder.geocode(to_place)
    route = routing_client.get_route(start, end)

    # ---- Step 4: Hazards along the route (proximity only; activity windows not applied here) ----
    hazards = matcher.match_along_route(route.coordinates)
    logger.info(
        "Planned %s -> %s: %.1f km, %d points, %d hazards",
        from_place,
        to_place,
        route.distance_km,
        len(route.coordinates),
        len(hazards),
    )

    # ---- Step 5: Remember the pair only after a successful plan ----
    if history is not None:
        history.add(from_place, to_place)

    return RoutePlan(
        generated_at=datetime.now(ZoneInfo(settings.app.timezone)),
        from_place=from_place,
        to_place=to_place,
        start=GeoPoint(lat=start.lat, lon=start.lon),
        end=GeoPoint(lat=end.lat, lon=end.lon),
        coordinates=route.coordinates,
        distance_km=route.distance_km,
        duration_min=route.duration_min,
        steps=route.steps,
        hazards=hazards,
        summary=summarize_hazards(hazards),
        navigation_url=navigation_url(route.coordinates, base_url=settings.navigation.directions_url),
    )


def route_hazards_result(
    matcher: RouteHazardMatcher, route: list[tuple[float, float]], *, settings: Settings
) -> HazardMatchResult:
    """Wrap `match_along_route` into the API/CLI result shape."""
    hazards = matcher.match_along_route(route)
    return HazardMatchResult(
        generated_at=datetime.now(ZoneInfo(settings.app.timezone)),
        mode="route",
        hazards=hazards,
        summary=summarize_hazards(hazards),
        meta={"route_points": len(route), "catalog_size": len(matcher.index)},
    )


def nearby_hazards_result(
    matcher: RouteHazardMatcher, point: GeoPoint, at: datetime, *, settings: Settings
) -> HazardMatchResult:
    """Wrap `match_near_point` into the API/CLI result shape; `at` must be local time."""
    hazards = matcher.match_near_point(point, at)
    return HazardMatchResult(
        generated_at=datetime.now(ZoneInfo(settings.app.timezone)),
        mode="point",
        hazards=hazards,
        summary=summarize_hazards(hazards, empty_message=NO_NEARBY_HAZARDS_MESSAGE),
        meta={"at": at.isoformat(), "catalog_size": len(matcher.index)},
    )
