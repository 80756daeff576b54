"""
Collection service - fans out adapters over (source x keyword).

One task per active Source runs concurrently; inside a Source the keywords
are collected strictly one after another. Every non-empty result set is
written in its own transaction as soon as it arrives.

Failure isolation:
- Adapter failures are values (``CollectionResult.failed``): counted, logged,
  and the next keyword proceeds
- A Source whose type has no adapter, or whose task raises, is counted as a
  failed Source without affecting its siblings
- Only a failure to load keywords/sources aborts the run (ConfigurationError)
"""

import asyncio
import time
from collections.abc import Sequence
from dataclasses import asdict, dataclass

import structlog

from trend_monitor.errors import ConfigurationError
from trend_monitor.ingestion.registry import CollectorRegistry
from trend_monitor.keywords.repository import KeywordsRepository
from trend_monitor.keywords.schemas import Keyword
from trend_monitor.observability.metrics import get_metrics
from trend_monitor.sources.repository import SourcesRepository
from trend_monitor.sources.schemas import Source
from trend_monitor.storage.database import Database
from trend_monitor.storage.repository import ItemRepository

logger = structlog.get_logger(__name__)


@dataclass
class CollectionSummary:
    """Aggregate counts of one collection run."""

    successful_sources: int = 0
    failed_sources: int = 0
    items_stored: int = 0
    adapter_failures: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass
class _SourceOutcome:
    items_stored: int = 0
    adapter_failures: int = 0


class CollectionService:
    """
    Orchestrates one collection run across all active sources.

    Usage:
        service = CollectionService.from_database(db)
        summary = await service.run()
    """

    def __init__(
        self,
        keywords_repository: KeywordsRepository,
        sources_repository: SourcesRepository,
        item_repository: ItemRepository,
        registry: CollectorRegistry | None = None,
    ):
        """
        Initialize collection service.

        Args:
            keywords_repository: Active keywords
            sources_repository: Active sources
            item_repository: Destination of collected items
            registry: Adapter lookup (or create one adapter per source type)
        """
        self._keywords_repo = keywords_repository
        self._sources_repo = sources_repository
        self._item_repo = item_repository
        self._registry = registry or CollectorRegistry.default()
        self._metrics = get_metrics()

    @classmethod
    def from_database(
        cls,
        database: Database,
        registry: CollectorRegistry | None = None,
    ) -> "CollectionService":
        return cls(
            KeywordsRepository(database),
            SourcesRepository(database),
            ItemRepository(database),
            registry=registry,
        )

    async def run(self) -> CollectionSummary:
        """
        Load active keywords and sources, then collect.

        Raises:
            ConfigurationError: Keywords or sources could not be loaded
        """
        try:
            sources = await self._sources_repo.list_active()
            keywords = await self._keywords_repo.list_active()
        except Exception as e:
            logger.error("Failed to load collection configuration", error=str(e))
            raise ConfigurationError(f"Cannot load keywords/sources: {e}") from e

        return await self.collect(sources, keywords)

    async def collect(
        self,
        sources: Sequence[Source],
        keywords: Sequence[Keyword],
    ) -> CollectionSummary:
        """
        Collect every keyword from every given source.

        Never raises for per-source problems; they are reflected in the
        returned summary.
        """
        start_time = time.monotonic()
        logger.info(
            "Starting collection",
            sources=len(sources),
            keywords=len(keywords),
        )

        for adapter in self._registry.adapters.values():
            adapter.begin_run()

        results = await asyncio.gather(
            *(self._collect_source(source, keywords) for source in sources),
            return_exceptions=True,
        )

        summary = CollectionSummary()
        for source, outcome in zip(sources, results):
            if isinstance(outcome, BaseException):
                summary.failed_sources += 1
                self._metrics.record_source_run(success=False)
                logger.error(
                    "Source collection failed",
                    source=source.name,
                    source_type=source.type,
                    error=str(outcome),
                    error_type=type(outcome).__name__,
                )
                continue

            summary.successful_sources += 1
            summary.items_stored += outcome.items_stored
            summary.adapter_failures += outcome.adapter_failures
            self._metrics.record_source_run(success=True)

        elapsed = time.monotonic() - start_time
        self._metrics.record_collection_latency(elapsed)

        logger.info(
            "Collection complete",
            duration_seconds=round(elapsed, 2),
            **summary.to_dict(),
        )
        return summary

    async def _collect_source(
        self,
        source: Source,
        keywords: Sequence[Keyword],
    ) -> _SourceOutcome:
        """Collect all keywords from one source, sequentially."""
        adapter = self._registry.resolve(source)
        outcome = _SourceOutcome()

        for keyword in keywords:
            result = await adapter.collect(source, keyword)

            if not result.succeeded:
                outcome.adapter_failures += 1
                self._metrics.record_adapter_failure(adapter.kind.value, result.failure.value)
                logger.debug(
                    "Adapter failure",
                    source=source.name,
                    keyword=keyword.name,
                    reason=result.failure.value,
                    detail=result.detail,
                )

            if result.items:
                stored = await self._item_repo.insert_batch(list(result.items))
                outcome.items_stored += stored
                self._metrics.record_items(adapter.kind.value, stored)

        return outcome
