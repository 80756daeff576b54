"""
Windowed keyword counts over stored items.

Two adjacent windows of equal length end at ``now``:

    previous = [now - 2w, now - w)      recent = [now - w, now)

Windows are taken over the store's insertion ``timestamp``. Counting is a
pure function of the items, so the same items and ``now`` always produce
the same windows.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from trend_monitor.ingestion.schemas import Item
from trend_monitor.storage.repository import ItemRepository


@dataclass(frozen=True)
class KeywordWindowCount:
    """Mentions of one keyword inside one window."""

    count: int
    sources: tuple[str, ...]  # first-appearance order, no duplicates


@dataclass(frozen=True)
class TrendWindows:
    """Per-keyword counts for the recent and previous windows."""

    recent: dict[str, KeywordWindowCount]
    previous: dict[str, KeywordWindowCount]
    now: datetime


def aggregate_by_keyword(items: Iterable[Item]) -> dict[str, KeywordWindowCount]:
    """Count items per keyword name and collect their source names.

    Args:
        items: Items of one window, in store order.

    Returns:
        Mapping keyword name -> count and ordered source names.
    """
    counts: dict[str, int] = {}
    sources: dict[str, dict[str, None]] = {}

    for item in items:
        counts[item.keyword_name] = counts.get(item.keyword_name, 0) + 1
        sources.setdefault(item.keyword_name, {}).setdefault(item.source_name, None)

    return {
        keyword: KeywordWindowCount(count=n, sources=tuple(sources[keyword]))
        for keyword, n in counts.items()
    }


class TrendAggregator:
    """Reads the two windows from the item store and counts them."""

    def __init__(
        self,
        repository: ItemRepository,
        window: timedelta = timedelta(hours=2),
    ) -> None:
        self._repo = repository
        self._window = window

    @property
    def window(self) -> timedelta:
        return self._window

    async def aggregate(self, now: datetime | None = None) -> TrendWindows:
        now = now or datetime.now(timezone.utc)
        recent_start = now - self._window
        previous_start = recent_start - self._window

        recent_items = await self._repo.get_items_between(recent_start, now)
        previous_items = await self._repo.get_items_between(previous_start, recent_start)

        return TrendWindows(
            recent=aggregate_by_keyword(recent_items),
            previous=aggregate_by_keyword(previous_items),
            now=now,
        )
