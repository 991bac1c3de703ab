from __future__ import annotations

import pytest

from civicreport.config.settings import Settings, get_settings


@pytest.fixture(autouse=True)
def _fresh_settings():
    # get_settings is lru_cached; tests that touch env vars need a clean cache both ways.
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_packaged_defaults_load():
    settings = get_settings()
    assert settings.proximity.default_radius_km == 3
    assert settings.proximity.radius_choices_km == [1, 3, 5, 10]
    assert settings.geofence.enabled is True
    assert (settings.geofence.south, settings.geofence.north) == (6.8, 37.6)
    assert (settings.geofence.west, settings.geofence.east) == (68.1, 97.4)


def test_settings_are_cached():
    assert get_settings() is get_settings()


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("CIVICREPORT_LOG_LEVEL", "debug")
    monkeypatch.setenv("CIVICREPORT_DATA_PATH", "/tmp/civicreport/issues.json")
    settings = get_settings()
    assert settings.app.log_level == "debug"
    assert settings.data.issues_path == "/tmp/civicreport/issues.json"


def test_external_config_file(monkeypatch, tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("proximity:\n  default_radius_km: 5\ngeofence:\n  enabled: false\n", encoding="utf-8")
    monkeypatch.setenv("CIVICREPORT_CONFIG_PATH", str(path))
    settings = get_settings()
    assert settings.proximity.default_radius_km == 5
    assert settings.geofence.enabled is False
    # Unspecified sections fall back to model defaults.
    assert settings.proximity.radius_choices_km == [1, 3, 5, 10]


def test_external_config_must_be_a_mapping(monkeypatch, tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- not\n- a mapping\n", encoding="utf-8")
    monkeypatch.setenv("CIVICREPORT_CONFIG_PATH", str(path))
    with pytest.raises(ValueError, match="expected a mapping"):
        get_settings()


def test_default_radius_cannot_exceed_max():
    with pytest.raises(ValueError, match="default_radius_km"):
        Settings.model_validate({"proximity": {"default_radius_km": 60, "max_radius_km": 50}})
