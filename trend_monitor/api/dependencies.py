"""
Dependency injection for FastAPI endpoints.
"""

from trend_monitor.ingestion.registry import CollectorRegistry
from trend_monitor.services.collection_service import CollectionService
from trend_monitor.storage.database import Database

# Global instances (initialized on first request)
_database: Database | None = None
_registry: CollectorRegistry | None = None


async def get_database() -> Database:
    """Get the shared database pool, connecting on first use."""
    global _database

    if _database is None:
        database = Database()
        await database.connect()
        _database = database

    return _database


def get_registry() -> CollectorRegistry:
    """
    Get the adapter registry.

    Adapters are reused across requests so per-adapter state (rate limits,
    resolved channel ids) carries over between manual runs.
    """
    global _registry

    if _registry is None:
        _registry = CollectorRegistry.default()

    return _registry


async def get_collection_service() -> CollectionService:
    database = await get_database()
    return CollectionService.from_database(database, registry=get_registry())


async def cleanup_dependencies() -> None:
    """Clean up global dependencies on shutdown."""
    global _database, _registry

    _registry = None

    if _database is not None:
        await _database.close()
        _database = None
