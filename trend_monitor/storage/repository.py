"""
Item repository: append-only storage of collected mentions.

Items are written in one transaction per (source, keyword) result set and
never updated afterwards. The insertion ``timestamp`` is assigned by
PostgreSQL (``DEFAULT NOW()``), which is the clock the trend windows use.
"""

import logging
from datetime import datetime, timedelta, timezone

from trend_monitor.ingestion.schemas import Item
from trend_monitor.storage.database import Database

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS items (
    id            BIGSERIAL PRIMARY KEY,
    source_name   TEXT NOT NULL,
    source_type   TEXT NOT NULL,
    keyword_name  TEXT NOT NULL,
    keyword_id    TEXT NOT NULL,
    title         TEXT NOT NULL,
    url           TEXT NOT NULL,
    content       TEXT NOT NULL DEFAULT '',
    published_at  TIMESTAMPTZ,
    collected_at  TIMESTAMPTZ NOT NULL,
    timestamp     TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_items_timestamp
    ON items(timestamp DESC);
CREATE INDEX IF NOT EXISTS idx_items_keyword_timestamp
    ON items(keyword_name, timestamp DESC);
"""

_INSERT_SQL = """
INSERT INTO items (
    source_name, source_type, keyword_name, keyword_id,
    title, url, content, published_at, collected_at
)
VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
"""

_ITEM_COLUMNS = """
    id, source_name, source_type, keyword_name, keyword_id,
    title, url, content, published_at, collected_at, timestamp
"""


def _record_to_item(record) -> Item:
    """Convert an asyncpg Record to an Item."""
    return Item(
        id=record["id"],
        source_name=record["source_name"],
        source_type=record["source_type"],
        keyword_name=record["keyword_name"],
        keyword_id=record["keyword_id"],
        title=record["title"],
        url=record["url"],
        content=record["content"],
        published_at=record["published_at"],
        collected_at=record["collected_at"],
        timestamp=record["timestamp"],
    )


class ItemRepository:
    """Storage and window queries for collected items."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_tables(self) -> None:
        """Create the items table and indexes (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("Items table ensured")

    async def insert_batch(self, items: list[Item]) -> int:
        """Insert items atomically.

        All rows commit together or not at all, so a concurrent reader
        never observes a partially written result set.

        Returns the number of items inserted.
        """
        if not items:
            return 0

        rows = [
            (
                item.source_name,
                item.source_type,
                item.keyword_name,
                item.keyword_id,
                item.title,
                item.url,
                item.content,
                item.published_at,
                item.collected_at,
            )
            for item in items
        ]

        async with self._db.transaction() as conn:
            await conn.executemany(_INSERT_SQL, rows)

        return len(rows)

    async def get_items_between(self, start: datetime, end: datetime) -> list[Item]:
        """Fetch items whose insertion timestamp falls in ``[start, end)``."""
        rows = await self._db.fetch(
            f"""
            SELECT {_ITEM_COLUMNS} FROM items
            WHERE timestamp >= $1 AND timestamp < $2
            ORDER BY timestamp ASC, id ASC
            """,
            start,
            end,
        )
        return [_record_to_item(r) for r in rows]

    async def list_recent(
        self,
        since: datetime,
        keyword: str | None = None,
        limit: int = 50,
    ) -> list[Item]:
        """Most recent items first, optionally filtered by keyword."""
        if keyword:
            rows = await self._db.fetch(
                f"""
                SELECT {_ITEM_COLUMNS} FROM items
                WHERE timestamp >= $1 AND keyword_name = $2
                ORDER BY timestamp DESC
                LIMIT $3
                """,
                since,
                keyword,
                limit,
            )
        else:
            rows = await self._db.fetch(
                f"""
                SELECT {_ITEM_COLUMNS} FROM items
                WHERE timestamp >= $1
                ORDER BY timestamp DESC
                LIMIT $2
                """,
                since,
                limit,
            )
        return [_record_to_item(r) for r in rows]

    async def count(self) -> int:
        """Count all stored items."""
        return await self._db.fetchval("SELECT COUNT(*) FROM items") or 0

    async def count_by_keyword_since(self, since: datetime) -> dict[str, int]:
        """Item counts per keyword name since ``since``."""
        rows = await self._db.fetch(
            """
            SELECT keyword_name, COUNT(*) AS n FROM items
            WHERE timestamp >= $1
            GROUP BY keyword_name
            ORDER BY n DESC, keyword_name
            """,
            since,
        )
        return {r["keyword_name"]: r["n"] for r in rows}

    async def latest_timestamp(self) -> datetime | None:
        """Insertion time of the most recent item, if any."""
        return await self._db.fetchval("SELECT MAX(timestamp) FROM items")

    async def cleanup_older_than(self, days: int) -> int:
        """Delete items inserted more than ``days`` days ago.

        Returns the number of deleted rows.
        """
        cutoff = datetime.now(timezone.utc) - timedelta(days=days)
        result = await self._db.execute(
            "DELETE FROM items WHERE timestamp < $1",
            cutoff,
        )
        # asyncpg status string: "DELETE <n>"
        try:
            deleted = int(result.split()[-1])
        except (ValueError, IndexError):
            deleted = 0
        logger.info("Deleted %d items older than %d days", deleted, days)
        return deleted

    async def count_older_than(self, days: int) -> int:
        """Count items ``cleanup_older_than(days)`` would delete."""
        cutoff = datetime.now(timezone.utc) - timedelta(days=days)
        return await self._db.fetchval(
            "SELECT COUNT(*) FROM items WHERE timestamp < $1", cutoff,
        ) or 0
