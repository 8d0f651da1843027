from __future__ import annotations

import pytest
from pydantic import ValidationError

from safepath.config.settings import Settings, _apply_env_overrides, _read_yaml_file, get_settings


def test_packaged_defaults_load():
    settings = get_settings()

    assert settings.app.timezone == "Asia/Kolkata"
    assert settings.matching.densify_step_m is None
    assert settings.history.max_items == 5
    assert settings.catalog.path is None and settings.catalog.url is None
    assert settings.ingestion.geocoding.static.places["chennai"] == (13.0827, 80.2707)


def test_env_overrides_are_whitelisted(monkeypatch):
    monkeypatch.setenv("SAFEPATH_LOG_LEVEL", "debug")
    monkeypatch.setenv("SAFEPATH_CATALOG_PATH", "data/hazards.json")
    monkeypatch.setenv("SAFEPATH_OSRM_BASE_URL", "http://localhost:5000")
    monkeypatch.setenv("SAFEPATH_NOMINATIM_BASE_URL", "http://localhost:8080")

    raw = _apply_env_overrides({"app": {"name": "SafePath"}})
    settings = Settings.model_validate(raw)

    assert settings.app.log_level == "debug"
    assert settings.catalog.path == "data/hazards.json"
    assert settings.ingestion.osrm.base_url == "http://localhost:5000"
    assert settings.ingestion.geocoding.nominatim.base_url == "http://localhost:8080"


def test_external_yaml_file_is_validated(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("matching:\n  densify_step_m: 250\nhistory:\n  max_items: 3\n", encoding="utf-8")

    settings = Settings.model_validate(_read_yaml_file(path))
    assert settings.matching.densify_step_m == 250
    assert settings.history.max_items == 3

    path.write_text("matching:\n  densify_step_m: -1\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        Settings.model_validate(_read_yaml_file(path))


def test_yaml_root_must_be_a_mapping(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError, match="expected a mapping"):
        _read_yaml_file(path)
