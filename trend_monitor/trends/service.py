"""
Trend analysis: aggregate the windows, detect surges, notify.

Runs after a collection pass has settled. Alert settings are read once per
pass and used for both the threshold and the delivery channels.
"""

from collections.abc import Callable
from datetime import datetime, timedelta

import structlog

from trend_monitor.alerts.config import AlertConfig
from trend_monitor.alerts.dispatcher import NotificationDispatcher, channels_from_settings
from trend_monitor.alerts.repository import AlertSettingsRepository
from trend_monitor.alerts.schemas import Alert, AlertSettings
from trend_monitor.config.settings import get_settings
from trend_monitor.observability.metrics import get_metrics
from trend_monitor.storage.database import Database
from trend_monitor.storage.repository import ItemRepository
from trend_monitor.trends.aggregation import TrendAggregator
from trend_monitor.trends.detector import SurgeDetector

logger = structlog.get_logger(__name__)


class TrendAnalysisService:
    """
    One aggregate/detect/notify pass.

    Usage:
        service = TrendAnalysisService.from_database(db)
        alerts = await service.analyze()
    """

    def __init__(
        self,
        aggregator: TrendAggregator,
        settings_repository: AlertSettingsRepository,
        dispatcher_factory: Callable[[AlertSettings], NotificationDispatcher] | None = None,
        alert_config: AlertConfig | None = None,
    ):
        """
        Initialize trend analysis.

        Args:
            aggregator: Reads recent/previous windows from the item store
            settings_repository: Alert settings (threshold and channels)
            dispatcher_factory: Builds the dispatcher for the loaded settings
            alert_config: Delivery defaults (webhook timeout)
        """
        self._aggregator = aggregator
        self._settings_repo = settings_repository
        self._detector = SurgeDetector(settings_repository)
        self._alert_config = alert_config or AlertConfig()
        self._dispatcher_factory = dispatcher_factory or self._default_dispatcher
        self._metrics = get_metrics()

    @classmethod
    def from_database(cls, database: Database) -> "TrendAnalysisService":
        settings = get_settings()
        aggregator = TrendAggregator(
            ItemRepository(database),
            window=timedelta(hours=settings.recency_window_hours),
        )
        return cls(aggregator, AlertSettingsRepository(database))

    def _default_dispatcher(self, settings: AlertSettings) -> NotificationDispatcher:
        return NotificationDispatcher(channels_from_settings(settings, self._alert_config))

    async def analyze(self, now: datetime | None = None) -> list[Alert]:
        """
        Run one analysis pass.

        Args:
            now: End of the recent window (defaults to current UTC time)

        Returns:
            Alerts emitted (empty when alerting is disabled)
        """
        settings = await self._settings_repo.get()
        windows = await self._aggregator.aggregate(now)
        alerts = await self._detector.detect(windows, settings)

        logger.info(
            "Trend analysis complete",
            keywords_recent=len(windows.recent),
            keywords_previous=len(windows.previous),
            threshold=settings.threshold,
            enabled=settings.enabled,
            alerts=len(alerts),
        )
        self._metrics.record_alerts(len(alerts))

        if not alerts:
            return alerts

        for alert in alerts:
            logger.info(
                "Surge detected",
                keyword=alert.keyword,
                recent=alert.recent_count,
                previous=alert.previous_count,
                change_pct=alert.percentage_change,
                sources=list(alert.sources),
            )

        dispatcher = self._dispatcher_factory(settings)
        delivered = await dispatcher.dispatch_batch(alerts)
        logger.info("Alerts dispatched", alerts=len(alerts), delivered=delivered)

        return alerts
