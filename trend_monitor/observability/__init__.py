"""Observability layer - logging and metrics."""

from trend_monitor.observability.logging import setup_logging
from trend_monitor.observability.metrics import MetricsCollector, get_metrics

__all__ = ["setup_logging", "MetricsCollector", "get_metrics"]
