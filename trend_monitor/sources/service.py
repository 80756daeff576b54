"""Sources service with seed support for the default source catalogue."""

import json
import logging
from pathlib import Path

from trend_monitor.sources.config import SourcesConfig
from trend_monitor.sources.repository import SourcesRepository
from trend_monitor.sources.schemas import Source
from trend_monitor.storage.database import Database

logger = logging.getLogger(__name__)

_SEED_FILE = Path(__file__).parent / "data" / "seed_sources.json"


def _parse_seed_entry(entry: dict) -> Source:
    """Convert a JSON seed entry to a Source dataclass."""
    return Source(
        name=entry["name"],
        type=entry["type"],
        url=entry.get("url", ""),
        notes=entry.get("notes", ""),
        active=entry.get("active", True),
    )


def load_seed_sources(path: Path | None = None) -> list[Source]:
    """Read the seed catalogue without touching the database."""
    seed_path = path or _SEED_FILE
    with open(seed_path, encoding="utf-8") as f:
        entries = json.load(f)
    return [_parse_seed_entry(e) for e in entries]


class SourcesService:
    """Seeds and exposes the source catalogue."""

    def __init__(
        self,
        database: Database,
        config: SourcesConfig | None = None,
    ) -> None:
        self._config = config or SourcesConfig()
        self._repo = SourcesRepository(database)

    @property
    def repository(self) -> SourcesRepository:
        """Access the underlying repository for direct DB operations."""
        return self._repo

    async def seed_from_json(self, path: Path | None = None) -> int:
        """Load sources from a JSON file into the database.

        Existing names are left untouched. Returns the number of entries read.
        """
        sources = load_seed_sources(path)
        count = await self._repo.bulk_insert(sources)
        logger.info("Seeded %d sources from %s", count, path or _SEED_FILE)
        return count

    async def ensure_seeded(self) -> None:
        """Seed from default JSON if the table is empty and seed_on_init is True."""
        if not self._config.seed_on_init:
            return

        existing = await self._repo.count()
        if existing > 0:
            logger.debug("Sources table has %d rows, skipping seed", existing)
            return

        logger.info("Sources table empty, seeding from default JSON")
        await self.seed_from_json()
