from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from safepath.catalog.loader import load_bundled_hazards
from safepath.core.geo import InvalidCoordinate
from safepath.domain.models import HazardCatalog
from safepath.hazards.matcher import RouteHazardMatcher, match_along_route, match_near_point

IST = ZoneInfo("Asia/Kolkata")


@pytest.fixture
def catalog():
    return load_bundled_hazards()


def test_route_point_at_hazard_center_matches(catalog):
    matcher = RouteHazardMatcher(catalog)
    assert [h.id for h in matcher.match_along_route([[12.966, 79.797]])] == [1]
    assert [h.id for h in match_along_route([[12.966, 79.797]], catalog)] == [1]


def test_route_far_from_every_hazard_matches_nothing(catalog):
    matcher = RouteHazardMatcher(catalog)
    assert matcher.match_along_route([[13.5, 80.5]]) == []
    assert match_along_route([[13.5, 80.5]], catalog) == []


def test_route_matching_ignores_activity_windows(catalog):
    # The flood zone (Monsoon) and market (10:00-22:00) are returned regardless of time.
    matcher = RouteHazardMatcher(catalog)
    assert [h.id for h in matcher.match_along_route([(12.834, 79.704)])] == [4, 5]


def test_route_matching_never_duplicates_ids(catalog):
    route = [(12.665, 79.971), (12.6651, 79.9705), (12.665, 79.9684), (12.6652, 79.969)]
    ids = [h.id for h in RouteHazardMatcher(catalog).match_along_route(route)]
    assert ids == [2, 3]
    assert len(ids) == len(set(ids))


def test_empty_inputs_return_empty_results():
    empty = HazardCatalog([])
    now = datetime(2026, 8, 15, 12, 0, tzinfo=IST)

    assert RouteHazardMatcher(empty).match_along_route([(12.966, 79.797)]) == []
    assert RouteHazardMatcher(empty).match_near_point((12.966, 79.797), now) == []
    assert RouteHazardMatcher(load_bundled_hazards()).match_along_route([]) == []
    assert match_along_route([], load_bundled_hazards()) == []


def test_near_point_honors_monsoon_window(catalog):
    matcher = RouteHazardMatcher(catalog)
    point = (12.834, 79.704)

    january = datetime(2026, 1, 15, 8, 0, tzinfo=IST)
    august = datetime(2026, 8, 15, 8, 0, tzinfo=IST)

    assert matcher.match_near_point(point, january) == []
    assert [h.id for h in matcher.match_near_point(point, august)] == [4]
    assert [h.id for h in match_near_point(point, catalog, august)] == [4]


def test_near_point_honors_daily_window(catalog):
    matcher = RouteHazardMatcher(catalog)
    point = (12.834, 79.704)

    assert [h.id for h in matcher.match_near_point(point, datetime(2026, 8, 15, 12, 0))] == [4, 5]
    assert [h.id for h in matcher.match_near_point(point, datetime(2026, 1, 15, 12, 0))] == [5]
    assert matcher.match_near_point(point, datetime(2026, 1, 15, 23, 0)) == []


def test_segment_midpoint_is_missed_unless_route_is_densified(catalog):
    # Both endpoints are ~11 km from the road work (radius 6 km); the segment passes through it.
    route = [(12.866, 79.797), (13.066, 79.797)]

    assert RouteHazardMatcher(catalog).match_along_route(route) == []
    densified = RouteHazardMatcher(catalog, densify_step_m=1000)
    assert [h.id for h in densified.match_along_route(route)] == [1]


def test_invalid_coordinates_are_rejected(catalog):
    matcher = RouteHazardMatcher(catalog)
    with pytest.raises(InvalidCoordinate):
        matcher.match_along_route([(12.9, 79.8), (123.0, 79.8)])
    with pytest.raises(InvalidCoordinate):
        matcher.match_near_point((float("nan"), 79.8), datetime(2026, 8, 15, 12, 0))
    with pytest.raises(ValueError):
        RouteHazardMatcher(catalog, densify_step_m=0)
