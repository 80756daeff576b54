"""Schema definitions for alert settings and surge alerts.

``AlertSettings`` maps to the single row of the ``alert_settings`` table.
``Alert`` is ephemeral: it is produced by the surge detector, handed to the
notification channels and never persisted.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone

DEFAULT_THRESHOLD = 50


@dataclass
class AlertSettings:
    """Surge alert configuration.

    Attributes:
        threshold: Minimum percentage change that triggers an alert.
        email: Recipient address, or None to skip email delivery.
        webhook: Webhook URL, or None to skip webhook delivery.
        enabled: Master switch; disabled settings produce no alerts.
        updated_at: Last time the settings were saved, None for defaults.
    """

    threshold: int = DEFAULT_THRESHOLD
    email: str | None = None
    webhook: str | None = None
    enabled: bool = True
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        self.email = (self.email or "").strip() or None
        self.webhook = (self.webhook or "").strip() or None


@dataclass(frozen=True)
class Alert:
    """A keyword whose recent mention count surged past the threshold.

    Attributes:
        keyword: Keyword name.
        recent_count: Items in the recent window.
        previous_count: Items in the previous window, floored at 1.
        percentage_change: Rounded percentage increase.
        sources: Source names from the recent window, first-appearance order.
    """

    keyword: str
    recent_count: int
    previous_count: int
    percentage_change: int
    sources: tuple[str, ...] = ()
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc),
        compare=False,
    )

    @property
    def message(self) -> str:
        return format_alert_message(self)

    def to_dict(self) -> dict:
        return {
            "keyword": self.keyword,
            "recent_count": self.recent_count,
            "previous_count": self.previous_count,
            "percentage_change": self.percentage_change,
            "sources": list(self.sources),
            "created_at": self.created_at.isoformat(),
        }


def format_alert_message(alert: Alert) -> str:
    """Human-readable notification text shared by every channel."""
    return (
        f"[Trend surge] Mentions of keyword '{alert.keyword}' rose "
        f"{alert.percentage_change}% versus the previous window. "
        f"(Sources: {', '.join(alert.sources)})"
    )
