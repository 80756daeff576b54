"""
Prometheus metrics for the collection and alerting pipeline.

Defines and exposes metrics for:
- Items collected per source type
- Adapter failures by reason
- Per-source task outcomes
- Alerts emitted and notification deliveries

Metrics are exposed via HTTP endpoint for Prometheus scraping.
"""

import logging

from prometheus_client import (
    REGISTRY,
    Counter,
    Histogram,
    start_http_server,
)

from trend_monitor.config.settings import get_settings

logger = logging.getLogger(__name__)

# Collection cycles hit many slow sites; buckets span up to several minutes
LATENCY_BUCKETS = (0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0)


class MetricsCollector:
    """
    Prometheus metrics collector for the trend monitor.

    Usage:
        metrics = get_metrics()
        metrics.start_server()
        metrics.record_items("community", 7)
    """

    def __init__(self):
        self.items_collected = Counter(
            "trend_monitor_items_collected_total",
            "Total number of items stored",
            ["source_type"],
        )

        self.adapter_failures = Counter(
            "trend_monitor_adapter_failures_total",
            "Adapter calls that ended in a named failure",
            ["source_type", "reason"],
        )

        self.source_runs = Counter(
            "trend_monitor_source_runs_total",
            "Per-source collection task outcomes",
            ["status"],  # success, failed
        )

        self.alerts_emitted = Counter(
            "trend_monitor_alerts_emitted_total",
            "Surge alerts produced by the detector",
        )

        self.notifications = Counter(
            "trend_monitor_notifications_total",
            "Notification delivery attempts",
            ["channel", "status"],  # status: delivered, failed
        )

        self.collection_latency = Histogram(
            "trend_monitor_collection_latency_seconds",
            "Wall time of one full collection run",
            buckets=LATENCY_BUCKETS,
        )

        logger.info("Prometheus metrics initialized")

    def start_server(self, port: int | None = None) -> None:
        """
        Start Prometheus metrics HTTP server.

        Args:
            port: Port to expose metrics on (default from settings)
        """
        settings = get_settings()
        port = port or settings.metrics_port

        start_http_server(port, registry=REGISTRY)
        logger.info(f"Prometheus metrics server started on port {port}")

    def record_items(self, source_type: str, count: int) -> None:
        self.items_collected.labels(source_type=source_type).inc(count)

    def record_adapter_failure(self, source_type: str, reason: str) -> None:
        self.adapter_failures.labels(source_type=source_type, reason=reason).inc()

    def record_source_run(self, success: bool) -> None:
        self.source_runs.labels(status="success" if success else "failed").inc()

    def record_alerts(self, count: int) -> None:
        if count:
            self.alerts_emitted.inc(count)

    def record_notification(self, channel: str, delivered: bool) -> None:
        self.notifications.labels(
            channel=channel,
            status="delivered" if delivered else "failed",
        ).inc()

    def record_collection_latency(self, seconds: float) -> None:
        self.collection_latency.observe(seconds)


# Global metrics instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector instance."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
