"""Trends: windowed keyword counts and surge detection."""

from trend_monitor.trends.aggregation import (
    KeywordWindowCount,
    TrendAggregator,
    TrendWindows,
    aggregate_by_keyword,
)
from trend_monitor.trends.detector import SurgeDetector, detect_surges, percentage_change
from trend_monitor.trends.service import TrendAnalysisService

__all__ = [
    "KeywordWindowCount",
    "SurgeDetector",
    "TrendAggregator",
    "TrendAnalysisService",
    "TrendWindows",
    "aggregate_by_keyword",
    "detect_surges",
    "percentage_change",
]
