"""Shared fixtures for alert tests."""

from datetime import datetime, timezone

import pytest

from trend_monitor.alerts.schemas import Alert


@pytest.fixture
def sample_alert() -> Alert:
    return Alert(
        keyword="galaxy",
        recent_count=15,
        previous_count=10,
        percentage_change=50,
        sources=("Clien", "Google News"),
        created_at=datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc),
    )
