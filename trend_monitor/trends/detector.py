"""Surge detection: compare the recent window against the previous one."""

import math
from collections.abc import Mapping

from trend_monitor.alerts.repository import AlertSettingsRepository
from trend_monitor.alerts.schemas import Alert, AlertSettings
from trend_monitor.trends.aggregation import KeywordWindowCount, TrendWindows


def percentage_change(recent_count: int, previous_count: int) -> int:
    """Rounded percent increase; ``previous_count`` is floored at 1."""
    previous_count = max(previous_count, 1)
    change = (recent_count - previous_count) / previous_count * 100
    # halves round up (12.5 -> 13, -2.5 -> -2)
    return math.floor(change + 0.5)


def detect_surges(
    recent: Mapping[str, KeywordWindowCount],
    previous: Mapping[str, KeywordWindowCount],
    settings: AlertSettings,
) -> list[Alert]:
    """Alerts for every recent keyword whose change meets the threshold.

    Keywords only present in ``previous`` are ignored. Alert order follows
    ``recent``.
    """
    if not settings.enabled:
        return []

    alerts: list[Alert] = []
    for keyword, current in recent.items():
        prior = previous.get(keyword)
        previous_count = (prior.count if prior else 0) or 1
        change = percentage_change(current.count, previous_count)
        if change >= settings.threshold:
            alerts.append(
                Alert(
                    keyword=keyword,
                    recent_count=current.count,
                    previous_count=previous_count,
                    percentage_change=change,
                    sources=current.sources,
                )
            )
    return alerts


class SurgeDetector:
    """Reads alert settings and runs ``detect_surges`` on a pair of windows."""

    def __init__(self, settings_repository: AlertSettingsRepository) -> None:
        self._settings_repo = settings_repository

    async def detect(
        self,
        windows: TrendWindows,
        settings: AlertSettings | None = None,
    ) -> list[Alert]:
        """Detect surges, reading the stored settings unless given."""
        if settings is None:
            settings = await self._settings_repo.get()
        return detect_surges(windows.recent, windows.previous, settings)
