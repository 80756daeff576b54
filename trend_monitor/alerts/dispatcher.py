"""Notification dispatcher delivering surge alerts across channels.

Each (alert, channel) delivery is attempted independently: a failing
channel never blocks the remaining channels or the remaining alerts.
Deliveries are single attempts; there is no retry queue.
"""

import logging

from trend_monitor.alerts.channels import EmailChannel, NotificationChannel, WebhookChannel
from trend_monitor.alerts.config import AlertConfig
from trend_monitor.alerts.schemas import Alert, AlertSettings
from trend_monitor.observability.metrics import MetricsCollector, get_metrics

logger = logging.getLogger(__name__)


def channels_from_settings(
    settings: AlertSettings,
    config: AlertConfig | None = None,
) -> list[NotificationChannel]:
    """Build the channels configured in ``settings`` (email, then webhook)."""
    config = config or AlertConfig()
    channels: list[NotificationChannel] = []
    if settings.email:
        channels.append(EmailChannel(settings.email))
    if settings.webhook:
        channels.append(
            WebhookChannel(settings.webhook, timeout=config.webhook_timeout_seconds)
        )
    return channels


class NotificationDispatcher:
    """Sends alerts to every configured notification channel."""

    def __init__(
        self,
        channels: list[NotificationChannel],
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._channels = list(channels)
        self._metrics = metrics or get_metrics()

    @property
    def channels(self) -> list[NotificationChannel]:
        return self._channels

    async def dispatch(self, alert: Alert) -> list[tuple[str, bool]]:
        """Send an alert to all configured channels.

        Args:
            alert: Alert to deliver.

        Returns:
            List of (channel_name, success) tuples.
        """
        results: list[tuple[str, bool]] = []

        for channel in self._channels:
            try:
                success = await channel.send(alert)
            except Exception as e:
                logger.warning(
                    "Channel %s send error for keyword %s: %s",
                    channel.name, alert.keyword, e,
                )
                success = False
            self._metrics.record_notification(channel.name, success)
            results.append((channel.name, success))

        self._record_delivery(alert, results)
        return results

    async def dispatch_batch(self, alerts: list[Alert]) -> int:
        """Send a batch of alerts, isolating failures per-alert.

        Returns:
            Number of alerts delivered to at least one channel.
        """
        delivered = 0
        for alert in alerts:
            try:
                results = await self.dispatch(alert)
            except Exception as e:
                logger.error(
                    "Unexpected error dispatching alert for keyword %s: %s",
                    alert.keyword, e,
                )
                continue
            if any(ok for _, ok in results):
                delivered += 1
        return delivered

    def _record_delivery(
        self,
        alert: Alert,
        results: list[tuple[str, bool]],
    ) -> None:
        successes = [name for name, ok in results if ok]
        failures = [name for name, ok in results if not ok]

        if not results:
            logger.info("No notification channels configured; alert for %s logged only", alert.keyword)
        elif failures and not successes:
            logger.error(
                "Alert for %s failed ALL channels: %s", alert.keyword, failures,
            )
        elif failures:
            logger.warning(
                "Alert for %s partial delivery: ok=%s failed=%s",
                alert.keyword, successes, failures,
            )
        else:
            logger.debug(
                "Alert for %s delivered to all channels: %s", alert.keyword, successes,
            )
