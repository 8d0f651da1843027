import json

import pytest
from pydantic import ValidationError

from safepath.catalog.loader import (
    dump_hazards,
    fetch_hazards,
    load_bundled_hazards,
    load_catalog,
    load_hazards,
    write_hazards,
)
from safepath.config.settings import get_settings

RECORDS = [
    {
        "id": 1,
        "type": "construction",
        "name": "NH-48 Road Work",
        "lat": 12.966,
        "lon": 79.797,
        "radius_meters": 6000,
        "description": "Major road construction: Expect 20 min delay.",
        "active_hours": "07:00-21:00",
        "icon": "🚧",
    },
    {
        "id": "rail-7",
        "type": "level_crossing",
        "name": "Unmanned crossing",
        "lat": 13,
        "lon": 80.25,
        "radius_meters": 750.5,
        "description": "Look both ways.",
        "active_hours": "All day",
    },
]


def test_catalog_json_round_trips_losslessly(tmp_path):
    path = tmp_path / "hazards.json"
    path.write_text(json.dumps(RECORDS, ensure_ascii=False), encoding="utf-8")

    catalog = load_hazards(path)
    assert dump_hazards(catalog) == RECORDS

    out = write_hazards(catalog, tmp_path / "out" / "hazards.json")
    assert json.loads(out.read_text(encoding="utf-8")) == RECORDS


def test_open_categories_and_string_ids_are_kept(tmp_path):
    path = tmp_path / "hazards.json"
    path.write_text(json.dumps(RECORDS), encoding="utf-8")

    catalog = load_hazards(path)
    second = catalog.get("rail-7")
    assert second is not None
    assert second.category == "level_crossing"
    assert second.icon is None
    assert isinstance(catalog.get(1).radius_meters, int)


def test_bundled_catalog_has_reference_hazards():
    catalog = load_bundled_hazards()
    assert [h.id for h in catalog] == [1, 2, 3, 4, 5]
    flood = catalog.get(4)
    assert flood.name == "Kanchipuram Flood Zone"
    assert flood.active_hours == "Monsoon"
    assert flood.radius_meters == 8000


@pytest.mark.parametrize(
    "patch",
    [{"lat": 95.0}, {"lon": -181}, {"radius_meters": 0}, {"radius_meters": -5}, {"type": " "}],
)
def test_invalid_records_are_rejected(tmp_path, patch):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps([{**RECORDS[0], **patch}]), encoding="utf-8")
    with pytest.raises(ValidationError):
        load_hazards(path)


def test_duplicate_ids_are_rejected(tmp_path):
    path = tmp_path / "dup.json"
    path.write_text(json.dumps([RECORDS[0], RECORDS[0]]), encoding="utf-8")
    with pytest.raises(ValueError, match="Duplicate hazard id"):
        load_hazards(path)


def test_hazards_are_immutable():
    h = load_bundled_hazards().get(1)
    with pytest.raises(ValidationError):
        h.radius_meters = 1


def test_fetch_hazards_over_http(monkeypatch):
    seen = {}

    def fake_get_json(url, *, params=None, headers=None, timeout_seconds=15):  # noqa: ARG001
        seen["url"] = url
        return RECORDS

    monkeypatch.setattr("safepath.catalog.loader.get_json", fake_get_json)
    catalog = fetch_hazards("https://example.test/hazards.json")

    assert seen["url"] == "https://example.test/hazards.json"
    assert len(catalog) == 2


def test_load_catalog_prefers_url_then_path_then_bundled(monkeypatch, tmp_path):
    settings = get_settings()
    assert len(load_catalog(settings)) == 5

    path = tmp_path / "hazards.json"
    path.write_text(json.dumps(RECORDS[:1]), encoding="utf-8")
    by_path = settings.model_copy(update={"catalog": settings.catalog.model_copy(update={"path": str(path)})})
    assert len(load_catalog(by_path)) == 1

    monkeypatch.setattr("safepath.catalog.loader.get_json", lambda *_a, **_kw: RECORDS)
    by_url = by_path.model_copy(
        update={"catalog": by_path.catalog.model_copy(update={"url": "https://example.test/h.json"})}
    )
    assert len(load_catalog(by_url)) == 2
