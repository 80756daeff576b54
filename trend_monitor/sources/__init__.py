"""Sources: database-backed catalogue of collection targets."""

from trend_monitor.sources.config import SourcesConfig
from trend_monitor.sources.repository import SourcesRepository
from trend_monitor.sources.schemas import Source, SourceType, parse_source_type
from trend_monitor.sources.service import SourcesService

__all__ = [
    "Source",
    "SourceType",
    "SourcesConfig",
    "SourcesRepository",
    "SourcesService",
    "parse_source_type",
]
