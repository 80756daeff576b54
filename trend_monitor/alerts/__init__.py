"""Alerts: surge alert settings, notification channels and dispatch."""

from trend_monitor.alerts.channels import EmailChannel, NotificationChannel, WebhookChannel
from trend_monitor.alerts.config import AlertConfig
from trend_monitor.alerts.dispatcher import NotificationDispatcher, channels_from_settings
from trend_monitor.alerts.repository import AlertSettingsRepository
from trend_monitor.alerts.schemas import Alert, AlertSettings, format_alert_message

__all__ = [
    "Alert",
    "AlertConfig",
    "AlertSettings",
    "AlertSettingsRepository",
    "EmailChannel",
    "NotificationChannel",
    "NotificationDispatcher",
    "WebhookChannel",
    "channels_from_settings",
    "format_alert_message",
]
