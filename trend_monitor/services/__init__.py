"""Services - collection orchestration and scheduled cycles."""

from trend_monitor.services.collection_service import CollectionService, CollectionSummary
from trend_monitor.services.scheduler import CycleResult, TrendMonitorScheduler

__all__ = [
    "CollectionService",
    "CollectionSummary",
    "CycleResult",
    "TrendMonitorScheduler",
]
