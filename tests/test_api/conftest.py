"""Shared fixtures for API tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from trend_monitor.api.app import create_app
from trend_monitor.api.dependencies import (
    get_collection_service,
    get_database,
    get_registry,
)
from trend_monitor.services.collection_service import CollectionSummary
from trend_monitor.sources.schemas import SourceType


def _mock_db(healthy: bool = True):
    """Create a mock database."""
    db = AsyncMock()
    if healthy:
        db.health_check = AsyncMock(return_value=True)
    else:
        db.health_check = AsyncMock(side_effect=Exception("Connection refused"))
    return db


def _mock_registry(disabled: dict[SourceType, str] | None = None):
    """Registry double exposing one adapter per source type."""
    disabled = disabled or {}
    adapters = {}
    for kind in (SourceType.NEWS, SourceType.COMMUNITY, SourceType.VIDEO):
        adapter = MagicMock()
        adapter.disabled_reason = MagicMock(return_value=disabled.get(kind))
        adapters[kind] = adapter
    registry = MagicMock()
    registry.adapters = adapters
    return registry


@pytest.fixture
def mock_collection_service():
    """Mock CollectionService."""
    service = AsyncMock()
    service.run = AsyncMock(
        return_value=CollectionSummary(successful_sources=6, failed_sources=2, items_stored=31)
    )
    return service


@pytest.fixture
def client(mock_collection_service):
    """Test client with the collection service overridden."""
    app = create_app()
    app.dependency_overrides[get_collection_service] = lambda: mock_collection_service
    return TestClient(app)


@pytest.fixture
def make_health_client():
    """Factory for clients with configurable health states."""

    def _make(db_healthy: bool = True, disabled: dict[SourceType, str] | None = None):
        app = create_app()
        app.dependency_overrides[get_database] = lambda: _mock_db(db_healthy)
        app.dependency_overrides[get_registry] = lambda: _mock_registry(disabled)
        return TestClient(app)

    return _make
