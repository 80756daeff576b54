"""Notification channel implementations for surge alerts.

Provides an ABC for notification channels plus concrete implementations
for webhooks and email. Channels never raise: a failed delivery is logged
and reported as ``False`` so the dispatcher can move on.
"""

import asyncio
import logging
import smtplib
from abc import ABC, abstractmethod
from email.mime.text import MIMEText
from urllib.parse import urlparse

import httpx

from trend_monitor.alerts.schemas import Alert
from trend_monitor.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class NotificationChannel(ABC):
    """Abstract base for notification delivery channels."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this channel (e.g. 'webhook', 'email')."""

    @abstractmethod
    async def send(self, alert: Alert) -> bool:
        """Deliver an alert through this channel.

        Args:
            alert: Alert to deliver.

        Returns:
            True if delivery succeeded, False otherwise.
        """


class WebhookChannel(NotificationChannel):
    """Delivers alerts as ``{"text": message}`` JSON POSTs.

    Creates a new ``httpx.AsyncClient`` per call (short-lived, no pooling)
    matching the project's HTTP pattern.
    """

    def __init__(self, url: str, timeout: float = 10.0) -> None:
        self._url = url
        # webhook paths embed tokens; logs carry the host only
        self._host = urlparse(url).hostname or "webhook"
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "webhook"

    async def send(self, alert: Alert) -> bool:
        payload = {"text": alert.message}
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(self._url, json=payload)
                if resp.is_success:
                    return True
                logger.warning(
                    "Webhook %s returned %d for keyword %s",
                    self._host, resp.status_code, alert.keyword,
                )
                return False
        except httpx.TimeoutException:
            logger.warning(
                "Webhook %s timed out for keyword %s", self._host, alert.keyword,
            )
            return False
        except Exception as e:
            logger.warning(
                "Webhook %s failed for keyword %s: %s",
                self._host, alert.keyword, type(e).__name__,
            )
            return False


class EmailChannel(NotificationChannel):
    """Delivers alerts as plain-text email through an SMTP relay.

    smtplib is blocking, so the send runs in a worker thread. Without a
    configured ``SMTP_HOST`` the message is only logged and the delivery
    counts as failed.
    """

    def __init__(self, recipient: str, settings: Settings | None = None) -> None:
        self._recipient = recipient
        self._settings = settings or get_settings()

    @property
    def name(self) -> str:
        return "email"

    def _build_message(self, alert: Alert) -> MIMEText:
        msg = MIMEText(alert.message, "plain", "utf-8")
        msg["Subject"] = f"[Trend surge] {alert.keyword} +{alert.percentage_change}%"
        msg["From"] = self._settings.smtp_from
        msg["To"] = self._recipient
        return msg

    def _send_sync(self, msg: MIMEText) -> None:
        s = self._settings
        with smtplib.SMTP(s.smtp_host, s.smtp_port, timeout=10) as server:
            if s.smtp_use_tls:
                server.starttls()
            if s.smtp_username and s.smtp_password:
                server.login(s.smtp_username, s.smtp_password)
            server.sendmail(s.smtp_from, [self._recipient], msg.as_string())

    async def send(self, alert: Alert) -> bool:
        if not self._settings.smtp_configured:
            logger.warning(
                "SMTP not configured; email to %s not sent: %s",
                self._recipient, alert.message,
            )
            return False

        msg = self._build_message(alert)
        try:
            await asyncio.to_thread(self._send_sync, msg)
            return True
        except smtplib.SMTPAuthenticationError:
            logger.warning("SMTP authentication failed for %s", self._settings.smtp_host)
            return False
        except (smtplib.SMTPException, OSError) as e:
            logger.warning(
                "Email to %s failed for keyword %s: %s",
                self._recipient, alert.keyword, e,
            )
            return False
