import pytest

from safepath.config.settings import get_settings
from safepath.core.geo import GeoPoint
from safepath.ingestion.errors import LocationNotFound, RoutingError
from safepath.ingestion.geocoding import NominatimGeocoder, StaticGeocoder, build_geocoder
from safepath.ingestion.routing_client import RoutingClient, parse_route_response

OSRM_PAYLOAD = {
    "code": "Ok",
    "routes": [
        {
            "distance": 72_450.0,
            "duration": 5_400.0,
            "geometry": {"type": "LineString", "coordinates": [[80.2707, 13.0827], [79.797, 12.966], [79.7043, 12.8342]]},
            "legs": [
                {
                    "steps": [
                        {"name": "Anna Salai", "maneuver": {"type": "depart", "instruction": "Head south on Anna Salai"}},
                        {"name": "NH48", "maneuver": {"type": "turn", "modifier": "right"}},
                        {"name": "", "maneuver": {"type": "arrive"}},
                    ]
                }
            ],
        }
    ],
}


def test_parse_route_response_reverses_coordinates_and_converts_units():
    route = parse_route_response(OSRM_PAYLOAD)

    assert route.coordinates == [(13.0827, 80.2707), (12.966, 79.797), (12.8342, 79.7043)]
    assert route.distance_km == pytest.approx(72.45)
    assert route.duration_min == pytest.approx(90.0)
    assert route.steps == ["Head south on Anna Salai", "Turn right onto NH48", "Arrive"]


@pytest.mark.parametrize("payload", [{"code": "NoRoute", "message": "Impossible route"}, {"code": "Ok", "routes": []}, []])
def test_parse_route_response_raises_on_unusable_payloads(payload):
    with pytest.raises(RoutingError):
        parse_route_response(payload)


def test_routing_client_builds_osrm_request(monkeypatch):
    calls = []

    def fake_get_json(url, *, params=None, headers=None, timeout_seconds=15):  # noqa: ARG001
        calls.append((url, params))
        return OSRM_PAYLOAD

    monkeypatch.setattr("safepath.ingestion.routing_client.get_json", fake_get_json)
    client = RoutingClient(get_settings())
    route = client.get_route(GeoPoint(13.0827, 80.2707), GeoPoint(12.8342, 79.7043))

    url, params = calls[0]
    assert url.endswith("/route/v1/driving/80.2707,13.0827;79.7043,12.8342")
    assert params == {"overview": "full", "geometries": "geojson", "steps": "true"}
    assert len(route.coordinates) == 3


def test_static_geocoder_is_case_insensitive():
    geocoder = StaticGeocoder({"Chennai": (13.0827, 80.2707)})
    assert geocoder.geocode("  CHENNAI ") == GeoPoint(13.0827, 80.2707)
    with pytest.raises(LocationNotFound, match="Location not found: Atlantis"):
        geocoder.geocode("Atlantis")


def test_nominatim_geocoder_uses_first_hit(monkeypatch):
    seen = {}

    def fake_get_json(url, *, params=None, headers=None, timeout_seconds=15):  # noqa: ARG001
        seen["url"] = url
        seen["params"] = params
        return [{"lat": "12.8342", "lon": "79.7043", "display_name": "Kanchipuram"}, {"lat": "0", "lon": "0"}]

    monkeypatch.setattr("safepath.ingestion.geocoding.get_json", fake_get_json)
    point = NominatimGeocoder(get_settings()).geocode("Kanchipuram")

    assert point == GeoPoint(12.8342, 79.7043)
    assert seen["url"].endswith("/search")
    assert seen["params"] == {"format": "json", "q": "Kanchipuram", "limit": 1}


def test_nominatim_geocoder_raises_when_nothing_found(monkeypatch):
    monkeypatch.setattr("safepath.ingestion.geocoding.get_json", lambda *_a, **_kw: [])
    with pytest.raises(LocationNotFound):
        NominatimGeocoder(get_settings()).geocode("Nowhere")


def test_build_geocoder_selects_provider():
    settings = get_settings()
    static = build_geocoder(settings, provider="static")
    assert static.geocode("mysuru") == GeoPoint(12.2958, 76.6394)
    assert isinstance(build_geocoder(settings, provider="nominatim"), NominatimGeocoder)
    with pytest.raises(ValueError):
        build_geocoder(settings, provider="carrier-pigeon")
