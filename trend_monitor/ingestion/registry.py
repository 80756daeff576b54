"""
Collector registry: maps a Source's adapter kind to the adapter instance.

Dispatch is a closed lookup on ``SourceType``. A Source whose stored type
resolved to no kind (``Source.kind is None``) or to a kind with no adapter
registered raises ``UnknownSourceTypeError``; the collection service counts
that Source as failed.
"""

from collections.abc import Mapping

from trend_monitor.errors import UnknownSourceTypeError
from trend_monitor.ingestion.base_adapter import BaseAdapter
from trend_monitor.ingestion.community_adapter import CommunityAdapter
from trend_monitor.ingestion.news_adapter import NewsAdapter
from trend_monitor.ingestion.video_adapter import VideoAdapter
from trend_monitor.sources.schemas import Source, SourceType


class CollectorRegistry:
    """Resolves Sources to site adapters."""

    def __init__(self, adapters: Mapping[SourceType, BaseAdapter]) -> None:
        self._adapters = dict(adapters)

    @classmethod
    def default(cls) -> "CollectorRegistry":
        """Registry with one adapter per source type, configured from settings."""
        return cls({
            SourceType.NEWS: NewsAdapter(),
            SourceType.COMMUNITY: CommunityAdapter(),
            SourceType.VIDEO: VideoAdapter(),
        })

    @property
    def adapters(self) -> dict[SourceType, BaseAdapter]:
        return dict(self._adapters)

    def resolve(self, source: Source) -> BaseAdapter:
        """Return the adapter for ``source``.

        Raises:
            UnknownSourceTypeError: The source's type has no adapter.
        """
        adapter = self._adapters.get(source.kind) if source.kind else None
        if adapter is None:
            raise UnknownSourceTypeError(source.name, source.type)
        return adapter
