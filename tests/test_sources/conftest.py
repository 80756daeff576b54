"""Shared fixtures for sources tests."""

from datetime import datetime, timezone

import pytest


@pytest.fixture
def sample_db_row() -> dict:
    """A dict mimicking an asyncpg Record for a source."""
    return {
        "id": "src_clien",
        "name": "Clien",
        "type": "community",
        "url": "https://www.clien.net",
        "notes": "Site search, newest first",
        "active": True,
        "created_at": datetime(2026, 1, 10, tzinfo=timezone.utc),
    }
