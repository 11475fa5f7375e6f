"""
Tests for DeskConfig environment overrides
"""

from dispatch_desk.config import DEFAULT_RANKS, DeskConfig


class TestDeskConfig:
    """DeskConfig.from_env"""

    def test_defaults(self, monkeypatch):
        for name in ("SEED_ZONE_COUNT", "DRAIN_STEP", "SIMULATION_ENABLED", "RANKS"):
            monkeypatch.delenv(f"DISPATCH_DESK_{name}", raising=False)

        config = DeskConfig.from_env()

        assert config.seed_zone_count == 425
        assert config.alarm_interval_sec == 600.0
        assert config.drain_interval_sec == 30.0
        assert config.drain_step == 5
        assert config.discharge_step == 20
        assert config.low_battery_threshold == 20
        assert config.ranks == DEFAULT_RANKS

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("DISPATCH_DESK_SEED_ZONE_COUNT", "10")
        monkeypatch.setenv("DISPATCH_DESK_ALARM_INTERVAL_SEC", "2.5")
        monkeypatch.setenv("DISPATCH_DESK_SIMULATION_ENABLED", "no")
        monkeypatch.setenv("DISPATCH_DESK_RANKS", "Guard, Senior Guard ,")

        config = DeskConfig.from_env()

        assert config.seed_zone_count == 10
        assert config.alarm_interval_sec == 2.5
        assert config.simulation_enabled is False
        assert config.ranks == ("Guard", "Senior Guard")

    def test_malformed_values_fall_back(self, monkeypatch):
        monkeypatch.setenv("DISPATCH_DESK_DRAIN_STEP", "five")
        monkeypatch.setenv("DISPATCH_DESK_DRAIN_INTERVAL_SEC", "")

        config = DeskConfig.from_env()

        assert config.drain_step == 5
        assert config.drain_interval_sec == 30.0
