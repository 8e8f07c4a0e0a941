"""Tests for the settings layer and time helpers."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from config.settings import (
    Environment,
    LoggingSettings,
    LogLevel,
    MonitoringSettings,
    ServerSettings,
    Settings,
)
from utils.helpers import TimeHelper


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("PORT", "SERVER_PORT", "ENVIRONMENT", "DEBUG"):
        monkeypatch.delenv(name, raising=False)
    for prefix in ("MONITOR_", "LOG_", "SERVER_"):
        for key in list(os.environ):
            if key.startswith(prefix):
                monkeypatch.delenv(key, raising=False)


class TestDefaults:
    def test_monitoring_defaults(self) -> None:
        settings = MonitoringSettings()
        assert settings.check_interval == 60.0
        assert settings.request_timeout == 10.0
        assert settings.stop_grace_period == 15.0
        assert settings.follow_redirects is True
        assert settings.sites_file == Path("config/sites.json")

    def test_server_defaults(self) -> None:
        settings = ServerSettings()
        assert settings.port is None
        assert settings.host == "0.0.0.0"
        assert settings.cors_allow_origin == "*"

    def test_grace_period_follows_timeout(self) -> None:
        assert MonitoringSettings(request_timeout=3).stop_grace_period == 8.0
        assert MonitoringSettings(stop_grace_period=1).stop_grace_period == 1.0


class TestEnvironment:
    def test_port_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("PORT", "8081")
        assert ServerSettings().port == 8081

    def test_port_keyword(self) -> None:
        assert ServerSettings(port=9000).port == 9000

    def test_invalid_port(self, monkeypatch) -> None:
        monkeypatch.setenv("PORT", "not-a-port")
        with pytest.raises(ValidationError):
            ServerSettings()

    def test_monitor_prefix(self, monkeypatch) -> None:
        monkeypatch.setenv("MONITOR_CHECK_INTERVAL", "5")
        monkeypatch.setenv("MONITOR_SITES_FILE", "/etc/sites.json")
        settings = MonitoringSettings()
        assert settings.check_interval == 5.0
        assert settings.sites_file == Path("/etc/sites.json")

    def test_lowercase_log_level(self, monkeypatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "warning")
        assert LoggingSettings().level == LogLevel.WARNING

    @pytest.mark.parametrize("interval", ["0", "-1"])
    def test_interval_must_be_positive(self, monkeypatch, interval) -> None:
        monkeypatch.setenv("MONITOR_CHECK_INTERVAL", interval)
        with pytest.raises(ValidationError):
            MonitoringSettings()


class TestSettings:
    def test_production_disables_colors_and_debug(self) -> None:
        settings = Settings(environment=Environment.PRODUCTION, debug=True)
        assert settings.debug is False
        assert settings.logging.colorize is False

    def test_development_keeps_console_colors(self) -> None:
        settings = Settings()
        assert settings.environment == Environment.DEVELOPMENT
        assert settings.is_production is False
        assert settings.logging.colorize is True

    def test_unknown_environment_is_rejected(self, monkeypatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "staging")
        with pytest.raises(ValidationError):
            Settings()

    def test_debug_lowers_log_level(self) -> None:
        settings = Settings(debug=True)
        assert settings.logging.level == LogLevel.DEBUG

    def test_to_dict(self) -> None:
        data = Settings(server=ServerSettings(port=8080)).to_dict()
        assert data["server"]["port"] == 8080
        assert data["monitoring"]["check_interval"] == 60.0
        assert data["environment"] == "development"


class TestTimeHelper:
    @pytest.mark.parametrize(
        "seconds,expected",
        [(0, "0s"), (59, "59s"), (61, "1m 1s"), (3600, "1h"), (90061, "1d 1h 1m 1s"), (-5, "0s")],
    )
    def test_human_readable(self, seconds, expected) -> None:
        assert TimeHelper.seconds_to_human_readable(seconds) == expected

    def test_now_is_utc(self) -> None:
        assert TimeHelper.get_utc_now().utcoffset().total_seconds() == 0

    def test_elapsed_ms(self) -> None:
        assert TimeHelper.elapsed_ms(1.0, 1.2505) == 250
        assert TimeHelper.elapsed_ms(2.0, 1.0) == 0
