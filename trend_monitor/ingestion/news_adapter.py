"""
News adapter with two sub-sources.

- Google News RSS search (syndication feed): title, link, publication date,
  description. Only entries published inside the recency window are kept.
- Naver News search results page (HTML): title, link, snippet. No recency
  filter; the page is already sorted newest first.

The sub-source is chosen from the Source's name or URL host.
"""

import html
import logging

import feedparser
from bs4 import BeautifulSoup

from trend_monitor.ingestion.base_adapter import (
    AdapterFailure,
    BaseAdapter,
    FailureReason,
    struct_time_to_datetime,
)
from trend_monitor.ingestion.schemas import Item
from trend_monitor.ingestion.sites import NAVER_NEWS_SEARCH, NewsSite, resolve_news_site
from trend_monitor.keywords.schemas import Keyword
from trend_monitor.sources.schemas import Source, SourceType

logger = logging.getLogger(__name__)

GOOGLE_NEWS_RSS_URL = "https://news.google.com/rss/search"
GOOGLE_NEWS_LOCALE = {"hl": "ko", "gl": "KR", "ceid": "KR:ko"}


def _strip_html(value: str) -> str:
    """Feed descriptions are HTML fragments; keep the text only."""
    if not value:
        return ""
    text = BeautifulSoup(value, "html.parser").get_text(separator=" ")
    return html.unescape(text)


class NewsAdapter(BaseAdapter):
    """Collects news articles mentioning a keyword."""

    @property
    def kind(self) -> SourceType:
        return SourceType.NEWS

    async def _collect(self, source: Source, keyword: Keyword) -> list[Item]:
        site = resolve_news_site(source)
        if site is NewsSite.GOOGLE_NEWS:
            return await self._collect_feed(source, keyword)
        if site is NewsSite.NAVER_NEWS:
            return await self._collect_search_page(source, keyword)
        raise AdapterFailure(
            FailureReason.UNKNOWN_SITE, f"no news sub-source matches {source.name!r}"
        )

    async def _collect_feed(self, source: Source, keyword: Keyword) -> list[Item]:
        async with self._client() as client:
            response = await self._get(
                client,
                GOOGLE_NEWS_RSS_URL,
                params={"q": keyword.name, **GOOGLE_NEWS_LOCALE},
            )

        feed = feedparser.parse(response.text)
        if feed.get("bozo") and not feed.get("entries"):
            raise AdapterFailure(
                FailureReason.MALFORMED_RESPONSE,
                f"unparseable feed: {feed.get('bozo_exception')}",
            )

        cutoff = self._recency_cutoff()
        items: list[Item] = []

        for entry in feed.get("entries", []):
            published = struct_time_to_datetime(entry.get("published_parsed"))
            if published is None or published < cutoff:
                continue

            item = self._build_item(
                source,
                keyword,
                title=entry.get("title"),
                url=entry.get("link"),
                content=_strip_html(entry.get("summary", "")),
                published_at=published,
            )
            if item is not None:
                items.append(item)
            if len(items) >= self._max_items:
                break

        return items

    async def _collect_search_page(self, source: Source, keyword: Keyword) -> list[Item]:
        async with self._client() as client:
            response = await self._get(
                client, NAVER_NEWS_SEARCH.build_search_url(keyword.name)
            )

        results = NAVER_NEWS_SEARCH.extract(response.text, self._max_items)
        items = [
            self._build_item(source, keyword, r.title, r.url, r.snippet)
            for r in results
        ]
        return [item for item in items if item is not None]
