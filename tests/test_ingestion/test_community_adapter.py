"""Tests for CommunityAdapter."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest
import respx

from trend_monitor.ingestion.base_adapter import FailureReason
from trend_monitor.ingestion.community_adapter import CommunityAdapter
from trend_monitor.sources.schemas import Source


@pytest.fixture
def adapter(clock) -> CommunityAdapter:
    return CommunityAdapter(clock=clock, rate_limit=1000)


class TestCommunityCollect:
    @pytest.mark.asyncio
    @respx.mock
    async def test_clien_items(self, adapter, clien_source, keyword, clien_html):
        route = respx.get(host="www.clien.net").mock(
            return_value=httpx.Response(200, text=clien_html)
        )

        result = await adapter.collect(clien_source, keyword)

        assert result.succeeded
        assert [i.title for i in result.items] == ["Galaxy battery life", "Galaxy update"]
        assert all(i.url.startswith("https://www.clien.net/") for i in result.items)
        assert all(i.source_name == "Clien" for i in result.items)
        assert all(i.source_type == "community" for i in result.items)
        assert route.calls.last.request.url.params["q"] == "galaxy"

    @pytest.mark.asyncio
    @respx.mock
    async def test_sends_user_agent(self, clock, clien_source, keyword, clien_html):
        adapter = CommunityAdapter(clock=clock, user_agent="TestAgent/1.0")
        route = respx.get(host="www.clien.net").mock(
            return_value=httpx.Response(200, text=clien_html)
        )

        await adapter.collect(clien_source, keyword)

        assert route.calls.last.request.headers["User-Agent"] == "TestAgent/1.0"

    @pytest.mark.asyncio
    @respx.mock
    async def test_no_results_is_success(self, adapter, clien_source, keyword):
        respx.get(host="www.clien.net").mock(
            return_value=httpx.Response(200, text="<html><body></body></html>")
        )

        result = await adapter.collect(clien_source, keyword)

        assert result.succeeded
        assert result.items == ()

    @pytest.mark.asyncio
    @respx.mock
    async def test_timeout(self, adapter, clien_source, keyword):
        respx.get(host="www.clien.net").mock(side_effect=httpx.ReadTimeout("slow"))

        result = await adapter.collect(clien_source, keyword)

        assert result.failure is FailureReason.TIMEOUT


class TestGatedAndUnknownSites:
    @pytest.mark.asyncio
    @respx.mock
    async def test_blind_requires_auth_without_fetch(self, adapter, blind_source, keyword):
        result = await adapter.collect(blind_source, keyword)

        assert result.failure is FailureReason.AUTH_REQUIRED
        assert result.items == ()
        assert len(respx.calls) == 0

    @pytest.mark.asyncio
    @respx.mock
    async def test_naver_cafe_requires_auth(self, adapter, keyword):
        source = Source(name="Asamo (Naver Cafe)", type="community", url="https://cafe.naver.com/appleiphone")

        result = await adapter.collect(source, keyword)

        assert result.failure is FailureReason.AUTH_REQUIRED
        assert len(respx.calls) == 0

    @pytest.mark.asyncio
    @respx.mock
    async def test_unknown_site(self, adapter, keyword):
        source = Source(name="Some Forum", type="community", url="https://forum.example.com")

        result = await adapter.collect(source, keyword)

        assert result.failure is FailureReason.UNKNOWN_SITE
        assert len(respx.calls) == 0


class TestRateLimiting:
    """Each site has its own request budget."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_sites_do_not_throttle_each_other(self, clock, clien_source, keyword, clien_html):
        adapter = CommunityAdapter(clock=clock, rate_limit=1)
        dcinside = Source(name="DCInside", type="community", url="https://gall.dcinside.com")
        respx.get(host="www.clien.net").mock(return_value=httpx.Response(200, text=clien_html))
        respx.get(host="search.dcinside.com").mock(
            return_value=httpx.Response(200, text="<html><body></body></html>")
        )

        with patch(
            "trend_monitor.ingestion.base_adapter.asyncio.sleep", new_callable=AsyncMock
        ) as sleep:
            await adapter.collect(clien_source, keyword)
            await adapter.collect(dcinside, keyword)

        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    @respx.mock
    async def test_same_site_is_throttled(self, clock, clien_source, keyword, clien_html):
        adapter = CommunityAdapter(clock=clock, rate_limit=1)
        respx.get(host="www.clien.net").mock(return_value=httpx.Response(200, text=clien_html))

        with patch(
            "trend_monitor.ingestion.base_adapter.asyncio.sleep", new_callable=AsyncMock
        ) as sleep:
            await adapter.collect(clien_source, keyword)
            await adapter.collect(clien_source, keyword)

        sleep.assert_awaited_once()
        assert sleep.call_args.args[0] > 0
