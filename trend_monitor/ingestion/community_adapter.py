"""
Community adapter for discussion-board search results.

Dispatches to the ``SiteExtractor`` registered for the source (see
``sites.COMMUNITY_SITES``). Sites behind a login (Blind, Naver Cafe) are
recognised but never fetched: the adapter holds no session for them, so
they always produce an ``auth_required`` result with no items.
"""

import logging

from trend_monitor.ingestion.base_adapter import AdapterFailure, BaseAdapter, FailureReason
from trend_monitor.ingestion.schemas import Item
from trend_monitor.ingestion.sites import resolve_community_site
from trend_monitor.keywords.schemas import Keyword
from trend_monitor.sources.schemas import Source, SourceType

logger = logging.getLogger(__name__)


class CommunityAdapter(BaseAdapter):
    """Collects community posts whose titles match a keyword."""

    @property
    def kind(self) -> SourceType:
        return SourceType.COMMUNITY

    async def _collect(self, source: Source, keyword: Keyword) -> list[Item]:
        site = resolve_community_site(source)
        if site is None:
            raise AdapterFailure(
                FailureReason.UNKNOWN_SITE, f"no community site matches {source.name!r}"
            )

        if site.requires_auth:
            raise AdapterFailure(
                FailureReason.AUTH_REQUIRED,
                f"{site.display_name} requires an authenticated session",
            )

        async with self._client() as client:
            response = await self._get(client, site.build_search_url(keyword.name))

        results = site.extract(response.text, self._max_items)
        items = [
            self._build_item(source, keyword, r.title, r.url, r.snippet)
            for r in results
        ]
        items = [item for item in items if item is not None]

        logger.debug("%s yielded %d rows for '%s'", site.display_name, len(items), keyword.name)
        return items
