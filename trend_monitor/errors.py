"""Exception hierarchy for the trend monitor.

Adapter-level failures are never raised (they become ``CollectionResult``
values). Only conditions that must cross a layer boundary live here.
"""


class TrendMonitorError(Exception):
    """Base exception for trend monitor errors."""


class ConfigurationError(TrendMonitorError):
    """Raised when keyword/source configuration cannot be loaded.

    This is the only failure that aborts a whole collection cycle.
    """


class UnknownSourceTypeError(TrendMonitorError):
    """Raised when a Source declares a type with no matching adapter."""

    def __init__(self, source_name: str, source_type: str) -> None:
        super().__init__(
            f"Unknown source type {source_type!r} for source {source_name!r}"
        )
        self.source_name = source_name
        self.source_type = source_type


class InvalidAlertSettingsError(TrendMonitorError):
    """Raised when alert settings fall outside the administrative range."""
