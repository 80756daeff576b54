"""Database repository for the sources table."""

import logging

from trend_monitor.sources.schemas import Source
from trend_monitor.storage.database import Database

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS sources (
    id          TEXT PRIMARY KEY,
    name        TEXT NOT NULL UNIQUE,
    type        TEXT NOT NULL,
    url         TEXT NOT NULL DEFAULT '',
    notes       TEXT NOT NULL DEFAULT '',
    active      BOOLEAN NOT NULL DEFAULT TRUE,
    created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_sources_active
    ON sources(active) WHERE active = TRUE;
"""

_INSERT_SQL = """
INSERT INTO sources (id, name, type, url, notes, active, created_at)
VALUES ($1, $2, $3, $4, $5, $6, $7)
RETURNING id
"""

_BULK_INSERT_SQL = """
INSERT INTO sources (id, name, type, url, notes, active)
SELECT * FROM unnest(
    $1::text[], $2::text[], $3::text[], $4::text[], $5::text[], $6::boolean[]
)
ON CONFLICT (name) DO NOTHING
"""


def _record_to_source(record) -> Source:
    """Convert an asyncpg Record to a Source dataclass."""
    return Source(
        id=record["id"],
        name=record["name"],
        type=record["type"],
        url=record["url"],
        notes=record["notes"],
        active=record["active"],
        created_at=record["created_at"],
    )


class SourcesRepository:
    """CRUD operations for the sources table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_table(self) -> None:
        """Create the sources table and indexes (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("Sources table ensured")

    async def create(self, source: Source) -> Source:
        await self._db.fetchval(
            _INSERT_SQL,
            source.id,
            source.name,
            source.type,
            source.url,
            source.notes,
            source.active,
            source.created_at,
        )
        logger.info("Created source %s (%s)", source.name, source.type)
        return source

    async def bulk_insert(self, sources: list[Source]) -> int:
        """Insert sources in one statement, skipping names that already exist.

        Returns the number of sources submitted.
        """
        if not sources:
            return 0

        await self._db.execute(
            _BULK_INSERT_SQL,
            [s.id for s in sources],
            [s.name for s in sources],
            [s.type for s in sources],
            [s.url for s in sources],
            [s.notes for s in sources],
            [s.active for s in sources],
        )
        logger.info("Bulk inserted %d sources", len(sources))
        return len(sources)

    async def get_by_name(self, name: str) -> Source | None:
        row = await self._db.fetchrow(
            "SELECT * FROM sources WHERE name = $1", name,
        )
        return _record_to_source(row) if row else None

    async def list_sources(self, active_only: bool = False) -> list[Source]:
        """All sources ordered by type then name."""
        where = " WHERE active = TRUE" if active_only else ""
        rows = await self._db.fetch(
            f"SELECT * FROM sources{where} ORDER BY type, name"
        )
        return [_record_to_source(r) for r in rows]

    async def list_active(self) -> list[Source]:
        """Sources targeted by collection runs."""
        return await self.list_sources(active_only=True)

    async def set_active(self, source_id: str, active: bool) -> bool:
        """Toggle the active flag. Returns True if a row was updated."""
        result = await self._db.execute(
            "UPDATE sources SET active = $2 WHERE id = $1",
            source_id, active,
        )
        return result.endswith(" 1")

    async def delete(self, source_id: str) -> bool:
        result = await self._db.execute(
            "DELETE FROM sources WHERE id = $1", source_id,
        )
        return result.endswith(" 1")

    async def count(self) -> int:
        """Count total sources in the table."""
        return await self._db.fetchval("SELECT COUNT(*) FROM sources") or 0
