"""Alert settings repository.

A single row (``id = 'alerts'``) holds the surge threshold and delivery
targets. A missing row reads as the defaults, so a fresh database alerts at
the default threshold with no channels configured.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from trend_monitor.alerts.config import AlertConfig
from trend_monitor.alerts.schemas import AlertSettings
from trend_monitor.errors import InvalidAlertSettingsError
from trend_monitor.storage.database import Database

logger = logging.getLogger(__name__)

SETTINGS_ID = "alerts"

_UPDATABLE_FIELDS = frozenset({"threshold", "email", "webhook", "enabled"})

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS alert_settings (
    id          TEXT PRIMARY KEY,
    threshold   INTEGER NOT NULL,
    email       TEXT,
    webhook     TEXT,
    enabled     BOOLEAN NOT NULL DEFAULT TRUE,
    updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
"""

_UPSERT_SQL = """
INSERT INTO alert_settings (id, threshold, email, webhook, enabled, updated_at)
VALUES ($1, $2, $3, $4, $5, $6)
ON CONFLICT (id) DO UPDATE SET
    threshold = EXCLUDED.threshold,
    email = EXCLUDED.email,
    webhook = EXCLUDED.webhook,
    enabled = EXCLUDED.enabled,
    updated_at = EXCLUDED.updated_at
"""


def _record_to_settings(record) -> AlertSettings:
    """Convert an asyncpg Record to AlertSettings."""
    return AlertSettings(
        threshold=record["threshold"],
        email=record["email"],
        webhook=record["webhook"],
        enabled=record["enabled"],
        updated_at=record["updated_at"],
    )


class AlertSettingsRepository:
    """Read and merge-update the singleton alert settings row."""

    def __init__(self, database: Database, config: AlertConfig | None = None) -> None:
        self._db = database
        self._config = config or AlertConfig()

    async def create_table(self) -> None:
        """Create the alert_settings table (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("Alert settings table ensured")

    async def get(self) -> AlertSettings:
        """Current settings, or the defaults when none were saved."""
        row = await self._db.fetchrow(
            "SELECT * FROM alert_settings WHERE id = $1", SETTINGS_ID,
        )
        if row is None:
            return AlertSettings(threshold=self._config.default_threshold)
        return _record_to_settings(row)

    def validate_threshold(self, threshold: int) -> None:
        """Raise InvalidAlertSettingsError outside [min_threshold, max_threshold]."""
        low, high = self._config.min_threshold, self._config.max_threshold
        if not low <= threshold <= high:
            raise InvalidAlertSettingsError(
                f"Threshold must be between {low} and {high}, got {threshold}"
            )

    async def update(self, **changes: Any) -> AlertSettings:
        """Merge ``changes`` into the stored settings and save.

        Fields not named keep their current value. Passing ``email=None`` or
        ``webhook=None`` clears that channel.

        Raises:
            InvalidAlertSettingsError: Unknown field or threshold out of range.
        """
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise InvalidAlertSettingsError(
                f"Unknown alert settings fields: {sorted(unknown)}"
            )

        current = await self.get()
        merged = AlertSettings(
            threshold=int(changes.get("threshold", current.threshold)),
            email=changes.get("email", current.email),
            webhook=changes.get("webhook", current.webhook),
            enabled=bool(changes.get("enabled", current.enabled)),
            updated_at=datetime.now(timezone.utc),
        )
        self.validate_threshold(merged.threshold)

        await self._db.execute(
            _UPSERT_SQL,
            SETTINGS_ID,
            merged.threshold,
            merged.email,
            merged.webhook,
            merged.enabled,
            merged.updated_at,
        )
        logger.info(
            "Alert settings saved: threshold=%d enabled=%s",
            merged.threshold, merged.enabled,
        )
        return merged
