"""
Video adapter for YouTube channels.

Resolves the channel from the Source URL (a ``UC...`` channel id, a
``/channel/UC...`` URL or an ``@handle`` looked up through the keyed search
endpoint), then searches that channel's uploads matching the keyword within
the recency window.

Handles:
- Missing API key: adapter disabled for the whole run
- HTTP 403 (quota exhausted or key rejected): distinguished failure, no retry
- Optional quota-free path via the public per-channel Atom feed
"""

import logging
import re
from datetime import timezone
from typing import Any

import feedparser
import httpx

from trend_monitor.config.settings import get_settings
from trend_monitor.ingestion.base_adapter import (
    AdapterFailure,
    BaseAdapter,
    FailureReason,
    parse_iso_datetime,
    struct_time_to_datetime,
)
from trend_monitor.ingestion.schemas import Item
from trend_monitor.keywords.schemas import Keyword
from trend_monitor.sources.schemas import Source, SourceType

logger = logging.getLogger(__name__)

YOUTUBE_SEARCH_URL = "https://www.googleapis.com/youtube/v3/search"
YOUTUBE_FEED_URL = "https://www.youtube.com/feeds/videos.xml"
YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v={video_id}"

_CHANNEL_ID_PATTERN = re.compile(r"/channel/(UC[\w-]+)")
_HANDLE_PATTERN = re.compile(r"@([\w.-]+)")


def extract_channel_identifier(url: str) -> tuple[str, bool] | None:
    """
    Extract a channel identifier from a Source URL.

    Returns:
        (identifier, is_channel_id) or None when nothing usable is found.
        ``is_channel_id`` is False for handles that still need a lookup.
    """
    value = (url or "").strip()
    if not value:
        return None
    if value.startswith("UC"):
        return value, True

    match = _CHANNEL_ID_PATTERN.search(value)
    if match:
        return match.group(1), True

    match = _HANDLE_PATTERN.search(value)
    if match:
        return match.group(1), False

    return None


class VideoAdapter(BaseAdapter):
    """Collects recent channel uploads matching a keyword."""

    def __init__(
        self,
        api_key: str | None = None,
        use_feed: bool | None = None,
        **kwargs: Any,
    ):
        """
        Initialize video adapter.

        Args:
            api_key: YouTube Data API key (defaults to YOUTUBE_API_KEY)
            use_feed: Read the channel's public feed instead of the search API
            **kwargs: Passed to BaseAdapter
        """
        super().__init__(**kwargs)

        settings = get_settings()
        self._api_key = api_key if api_key is not None else settings.youtube_api_key
        self._use_feed = settings.video_use_feed if use_feed is None else use_feed

        # handle -> channel id, kept for the adapter's lifetime
        self._channel_cache: dict[str, str] = {}

    @property
    def kind(self) -> SourceType:
        return SourceType.VIDEO

    def disabled_reason(self) -> str | None:
        if not self._api_key:
            return "YOUTUBE_API_KEY is not set"
        return None

    async def _collect(self, source: Source, keyword: Keyword) -> list[Item]:
        identifier = extract_channel_identifier(source.url)
        if identifier is None:
            raise AdapterFailure(
                FailureReason.UNKNOWN_SITE,
                f"cannot extract a channel from {source.url!r}",
            )

        async with self._client() as client:
            channel_id = await self._resolve_channel_id(client, *identifier)
            if channel_id is None:
                raise AdapterFailure(
                    FailureReason.UNKNOWN_SITE,
                    f"no channel found for handle {identifier[0]!r}",
                )

            if self._use_feed:
                return await self._collect_from_feed(client, source, keyword, channel_id)
            return await self._search_channel_videos(client, source, keyword, channel_id)

    async def _api_get(
        self,
        client: httpx.AsyncClient,
        params: dict[str, Any],
        target: str,
    ) -> dict[str, Any]:
        """Keyed search API call.

        403 is reported as quota exhaustion. Errors never include the
        request URL since it carries the API key.
        """
        await self._limiter_for(target).acquire()
        response = await client.get(
            YOUTUBE_SEARCH_URL, params={"key": self._api_key, **params}
        )

        if response.status_code == 403:
            raise AdapterFailure(
                FailureReason.QUOTA_EXCEEDED, "YouTube API quota exceeded or key rejected"
            )
        if response.status_code >= 400:
            raise AdapterFailure(FailureReason.NETWORK, f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise AdapterFailure(FailureReason.MALFORMED_RESPONSE, str(e)) from e
        if not isinstance(data, dict):
            raise AdapterFailure(FailureReason.MALFORMED_RESPONSE, "expected a JSON object")
        return data

    async def _resolve_channel_id(
        self,
        client: httpx.AsyncClient,
        identifier: str,
        is_channel_id: bool,
    ) -> str | None:
        if is_channel_id:
            return identifier

        cached = self._channel_cache.get(identifier)
        if cached:
            return cached

        data = await self._api_get(
            client,
            {"q": identifier, "part": "snippet", "type": "channel", "maxResults": 1},
            target=identifier,
        )
        for entry in data.get("items") or []:
            channel_id = (entry.get("snippet") or {}).get("channelId") or (
                entry.get("id") or {}
            ).get("channelId")
            if channel_id:
                self._channel_cache[identifier] = channel_id
                logger.debug("Resolved @%s to channel %s", identifier, channel_id)
                return channel_id
        return None

    async def _search_channel_videos(
        self,
        client: httpx.AsyncClient,
        source: Source,
        keyword: Keyword,
        channel_id: str,
    ) -> list[Item]:
        published_after = self._recency_cutoff().astimezone(timezone.utc)
        data = await self._api_get(
            client,
            {
                "channelId": channel_id,
                "q": keyword.name,
                "part": "snippet",
                "type": "video",
                "order": "date",
                "publishedAfter": published_after.strftime("%Y-%m-%dT%H:%M:%SZ"),
                "maxResults": self._max_items,
            },
            target=channel_id,
        )

        items: list[Item] = []
        for entry in data.get("items") or []:
            video_id = (entry.get("id") or {}).get("videoId")
            snippet = entry.get("snippet") or {}
            item = self._build_item(
                source,
                keyword,
                title=snippet.get("title"),
                url=YOUTUBE_WATCH_URL.format(video_id=video_id) if video_id else None,
                content=snippet.get("description", ""),
                published_at=parse_iso_datetime(snippet.get("publishedAt")),
            )
            if item is not None:
                items.append(item)
        return items

    async def _collect_from_feed(
        self,
        client: httpx.AsyncClient,
        source: Source,
        keyword: Keyword,
        channel_id: str,
    ) -> list[Item]:
        """Read the channel's public feed (no API quota).

        The feed lists every recent upload, so entries are filtered to the
        recency window and to titles containing the keyword. The item cap
        applies to matching entries only.
        """
        response = await self._get(
            client, YOUTUBE_FEED_URL, params={"channel_id": channel_id}, target=channel_id
        )
        feed = feedparser.parse(response.text)

        cutoff = self._recency_cutoff()
        needle = keyword.name.casefold()
        items: list[Item] = []

        for entry in feed.get("entries", []):
            published = struct_time_to_datetime(entry.get("published_parsed"))
            if published is None or published < cutoff:
                continue

            title = entry.get("title") or ""
            if needle not in title.casefold():
                continue

            video_id = entry.get("yt_videoid")
            url = YOUTUBE_WATCH_URL.format(video_id=video_id) if video_id else entry.get("link")
            item = self._build_item(source, keyword, title, url, "", published)
            if item is not None:
                items.append(item)
            if len(items) >= self._max_items:
                break
        return items
