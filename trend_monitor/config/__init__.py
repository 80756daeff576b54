"""Application configuration."""

from trend_monitor.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
