"""Database repository for the keywords table."""

import logging

from trend_monitor.keywords.schemas import Keyword
from trend_monitor.storage.database import Database

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS keywords (
    id           TEXT PRIMARY KEY,
    name         TEXT NOT NULL UNIQUE,
    category     TEXT NOT NULL DEFAULT 'other',
    description  TEXT NOT NULL DEFAULT '',
    active       BOOLEAN NOT NULL DEFAULT TRUE,
    created_at   TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_keywords_active
    ON keywords(active) WHERE active = TRUE;
"""

_INSERT_SQL = """
INSERT INTO keywords (id, name, category, description, active, created_at)
VALUES ($1, $2, $3, $4, $5, $6)
RETURNING id
"""


def _record_to_keyword(record) -> Keyword:
    """Convert an asyncpg Record to a Keyword dataclass."""
    return Keyword(
        id=record["id"],
        name=record["name"],
        category=record["category"],
        description=record["description"],
        active=record["active"],
        created_at=record["created_at"],
    )


class KeywordsRepository:
    """CRUD operations for the keywords table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_table(self) -> None:
        """Create the keywords table and indexes (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("Keywords table ensured")

    async def create(self, keyword: Keyword) -> Keyword:
        await self._db.fetchval(
            _INSERT_SQL,
            keyword.id,
            keyword.name,
            keyword.category,
            keyword.description,
            keyword.active,
            keyword.created_at,
        )
        logger.info("Created keyword %s (%s)", keyword.name, keyword.category)
        return keyword

    async def get_by_name(self, name: str) -> Keyword | None:
        row = await self._db.fetchrow(
            "SELECT * FROM keywords WHERE name = $1", name.strip(),
        )
        return _record_to_keyword(row) if row else None

    async def list_keywords(self, active_only: bool = False) -> list[Keyword]:
        """All keywords, newest first."""
        where = " WHERE active = TRUE" if active_only else ""
        rows = await self._db.fetch(
            f"SELECT * FROM keywords{where} ORDER BY created_at DESC"
        )
        keywords = []
        for r in rows:
            try:
                keywords.append(_record_to_keyword(r))
            except ValueError as e:
                logger.warning("Skipping invalid keyword row %s: %s", r["id"], e)
        return keywords

    async def list_active(self) -> list[Keyword]:
        """Keywords targeted by collection runs."""
        return await self.list_keywords(active_only=True)

    async def set_active(self, keyword_id: str, active: bool) -> bool:
        """Toggle the active flag. Returns True if a row was updated."""
        result = await self._db.execute(
            "UPDATE keywords SET active = $2 WHERE id = $1",
            keyword_id, active,
        )
        return result.endswith(" 1")

    async def delete(self, keyword_id: str) -> bool:
        """Delete a keyword. Stored items keep their keyword name/id."""
        result = await self._db.execute(
            "DELETE FROM keywords WHERE id = $1", keyword_id,
        )
        return result.endswith(" 1")
