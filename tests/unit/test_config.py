from evswap.plan.config import (
    DEFAULT_LATERAL_THRESHOLD_M,
    PlannerConfig,
    fleet_source,
    load_planner_config,
    load_routes_config,
)


def test_defaults_without_env():
    cfg = load_planner_config()
    assert cfg.lateral_threshold_m == DEFAULT_LATERAL_THRESHOLD_M
    assert cfg.range_threshold_km == 100.0
    assert cfg.forward_progress_ratio == 0.6
    assert cfg.tz_name == "Europe/Prague"

def test_env_overrides(monkeypatch):
    monkeypatch.setenv("LATERAL_THRESHOLD_M", "250")
    monkeypatch.setenv("RANGE_THRESHOLD_KM", "not-a-number")
    monkeypatch.setenv("PLANNER_TZ", "UTC")
    cfg = load_planner_config()
    assert cfg.lateral_threshold_m == 250.0
    assert cfg.range_threshold_km == 100.0
    assert cfg.tz_name == "UTC"

def test_with_overrides_ignores_none():
    cfg = PlannerConfig()
    assert cfg.with_overrides(lateral_threshold_m=None) is cfg
    changed = cfg.with_overrides(lateral_threshold_m=50.0, range_threshold_km=None)
    assert changed.lateral_threshold_m == 50.0
    assert changed.range_threshold_km == cfg.range_threshold_km

def test_fleet_source_prefers_url(monkeypatch, _env_test_data):
    assert fleet_source() == str(_env_test_data.resolve())
    monkeypatch.setenv("FLEET_DATA_URL", "https://example.org/fleet/")
    assert fleet_source() == "https://example.org/fleet/"

def test_routes_config_from_env(monkeypatch):
    monkeypatch.setenv("ROUTES_TIMEOUT_SEC", "5")
    cfg = load_routes_config()
    assert cfg.api_key == "test-key"
    assert cfg.timeout_sec == 5.0
    assert cfg.require_key() == "test-key"
