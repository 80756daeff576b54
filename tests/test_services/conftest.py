"""Shared fixtures for service tests."""

from unittest.mock import AsyncMock

import pytest

from trend_monitor.ingestion.base_adapter import CollectionResult
from trend_monitor.keywords.schemas import Keyword
from trend_monitor.sources.schemas import Source, SourceType


class FakeAdapter:
    """Adapter double returning canned results per keyword name."""

    def __init__(self, kind: SourceType, results: dict | None = None) -> None:
        self.kind = kind
        self._results = results or {}
        self.calls: list[tuple[str, str]] = []
        self.runs_started = 0

    async def collect(self, source: Source, keyword: Keyword) -> CollectionResult:
        self.calls.append((source.name, keyword.name))
        result = self._results.get(keyword.name, CollectionResult.ok([]))
        if callable(result):
            return await result(source, keyword)
        return result

    def disabled_reason(self) -> str | None:
        return None

    def begin_run(self) -> None:
        self.runs_started += 1


@pytest.fixture
def fake_adapter_cls():
    return FakeAdapter


@pytest.fixture
def keywords() -> list[Keyword]:
    return [
        Keyword(id="kw_galaxy", name="galaxy"),
        Keyword(id="kw_iphone", name="iphone"),
    ]


@pytest.fixture
def item_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.insert_batch = AsyncMock(side_effect=lambda items: len(items))
    return repo


@pytest.fixture
def keywords_repo(keywords) -> AsyncMock:
    repo = AsyncMock()
    repo.list_active = AsyncMock(return_value=keywords)
    return repo


@pytest.fixture
def sources_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.list_active = AsyncMock(return_value=[])
    return repo
