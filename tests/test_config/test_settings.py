"""Tests for environment-based configuration."""

import pytest
from pydantic import ValidationError

from trend_monitor.alerts.config import AlertConfig
from trend_monitor.config.settings import Settings
from trend_monitor.sources.config import SourcesConfig


class TestSettings:
    def test_defaults(self, test_settings):
        assert test_settings.recency_window_hours == 2
        assert test_settings.collection_interval_hours == 2
        assert test_settings.schedule_timezone == "Asia/Seoul"
        assert test_settings.max_items_per_fetch == 10
        assert test_settings.youtube_configured is False
        assert test_settings.smtp_configured is False

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("YOUTUBE_API_KEY", "yt-key")
        monkeypatch.setenv("RECENCY_WINDOW_HOURS", "6")

        settings = Settings()

        assert settings.youtube_configured is True
        assert settings.recency_window_hours == 6

    def test_interval_bounds(self):
        with pytest.raises(ValidationError):
            Settings(collection_interval_hours=0)


class TestComponentConfigs:
    def test_alert_config_prefix(self, monkeypatch):
        monkeypatch.setenv("ALERTS_MAX_THRESHOLD", "300")
        config = AlertConfig()
        assert config.max_threshold == 300
        assert config.min_threshold == 10

    def test_sources_config_prefix(self, monkeypatch):
        monkeypatch.setenv("SOURCES_SEED_ON_INIT", "false")
        assert SourcesConfig().seed_on_init is False
