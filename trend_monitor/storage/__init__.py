"""Storage layer - PostgreSQL connection and item repository."""

from trend_monitor.storage.database import Database
from trend_monitor.storage.repository import ItemRepository

__all__ = ["Database", "ItemRepository"]
