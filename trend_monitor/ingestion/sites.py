"""
Per-site extraction rules for HTML search result pages.

Each site is a declarative ``SiteExtractor``: where to search, which rows
hold results and where the title/link/snippet live inside a row. Markup
changes upstream only require editing the table below; ``extract()`` is a
pure function of the HTML and is tested in isolation.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote, urlparse

from bs4 import BeautifulSoup

from trend_monitor.ingestion.base_adapter import absolute_url, clean_text
from trend_monitor.sources.schemas import Source

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractedResult:
    """Title/link/snippet triple scraped from one result row."""

    title: str
    url: str
    snippet: str = ""


@dataclass(frozen=True)
class SiteExtractor:
    """Search URL and CSS selectors for one site."""

    key: str
    display_name: str
    aliases: tuple[str, ...]
    hosts: tuple[str, ...]
    search_url: str  # format string with {query}
    base_url: str  # canonical host for relative links
    row_selector: str = ""
    title_selector: str = ""
    link_selector: str | None = None  # defaults to title_selector
    snippet_selector: str | None = None
    skip_rows: int = 0  # leading header rows inside the row selection
    requires_auth: bool = False

    def build_search_url(self, keyword: str) -> str:
        return self.search_url.format(query=quote(keyword))

    def extract(self, html: str, limit: int) -> list[ExtractedResult]:
        """Extract up to ``limit`` rows of results from a search page.

        Rows missing a title or link are skipped individually.
        """
        soup = BeautifulSoup(html, "html.parser")
        rows = soup.select(self.row_selector)[self.skip_rows:]

        results: list[ExtractedResult] = []
        for row in rows[:limit]:
            title_el = row.select_one(self.title_selector)
            link_el = row.select_one(self.link_selector or self.title_selector)
            if title_el is None or link_el is None:
                continue

            title = clean_text(title_el.get_text(" "))
            href = link_el.get("href")
            if not title or not href:
                continue

            snippet = ""
            if self.snippet_selector:
                snippet_el = row.select_one(self.snippet_selector)
                if snippet_el is not None:
                    snippet = clean_text(snippet_el.get_text(" "))

            results.append(
                ExtractedResult(
                    title=title,
                    url=absolute_url(str(href), self.base_url),
                    snippet=snippet,
                )
            )

        return results


def _normalize(value: str) -> str:
    return "".join(value.split()).casefold()


def _host(url: str) -> str:
    if not url:
        return ""
    if "://" not in url:
        url = f"https://{url}"
    return (urlparse(url).hostname or "").lower()


def _match(source: Source, aliases: tuple[str, ...], hosts: tuple[str, ...]) -> bool:
    """Match a source by display name first, then by URL host."""
    name = _normalize(source.name)
    if any(name == _normalize(alias) for alias in aliases):
        return True
    host = _host(source.url)
    return bool(host) and any(host == h or host.endswith(f".{h}") for h in hosts)


# ── Community sites ─────────────────────────────────────

COMMUNITY_SITES: tuple[SiteExtractor, ...] = (
    SiteExtractor(
        key="dcinside",
        display_name="DCInside",
        aliases=("dcinside", "디시인사이드"),
        hosts=("dcinside.com",),
        search_url="https://search.dcinside.com/combine/subject?keyword={query}",
        base_url="https://gall.dcinside.com",
        row_selector=".sch_result_list li",
        title_selector=".tit a",
    ),
    SiteExtractor(
        key="ppomppu",
        display_name="Ppomppu",
        aliases=("ppomppu", "뽐뿌"),
        hosts=("ppomppu.co.kr",),
        search_url="https://www.ppomppu.co.kr/search_bbs.php?keyword={query}",
        base_url="https://www.ppomppu.co.kr",
        row_selector="table.board_table tr",
        title_selector="td.title a",
        skip_rows=1,
    ),
    SiteExtractor(
        key="ruliweb",
        display_name="Ruliweb",
        aliases=("ruliweb", "루리웹"),
        hosts=("ruliweb.com",),
        search_url=(
            "https://bbs.ruliweb.com/community/board/300143"
            "?search_type=subject&search_key={query}"
        ),
        base_url="https://bbs.ruliweb.com",
        row_selector=".board_list_wrapper table tr",
        title_selector=".subject a",
    ),
    SiteExtractor(
        key="clien",
        display_name="Clien",
        aliases=("clien", "클리앙"),
        hosts=("clien.net",),
        search_url="https://www.clien.net/service/search?q={query}&sort=recency",
        base_url="https://www.clien.net",
        row_selector=".list_item",
        title_selector=".list_subject span",
        link_selector=".list_subject",
    ),
    SiteExtractor(
        key="blind",
        display_name="Blind",
        aliases=("blind", "블라인드", "teamblind"),
        hosts=("teamblind.com",),
        search_url="https://www.teamblind.com/kr/search/{query}",
        base_url="https://www.teamblind.com",
        requires_auth=True,
    ),
    SiteExtractor(
        key="naver_cafe",
        display_name="Asamo (Naver Cafe)",
        aliases=("asamo", "아사모", "아사모 (네이버 카페)", "asamo (naver cafe)", "naver cafe"),
        hosts=("cafe.naver.com",),
        search_url=(
            "https://cafe.naver.com/ArticleSearchList.nhn"
            "?search.clubid=10322133&search.searchBy=0&search.query={query}"
        ),
        base_url="https://cafe.naver.com",
        requires_auth=True,
    ),
)


def resolve_community_site(source: Source) -> SiteExtractor | None:
    """Find the extractor for a community source, or None if unsupported."""
    for site in COMMUNITY_SITES:
        if _match(source, site.aliases, site.hosts):
            return site
    return None


# ── News sites ──────────────────────────────────────────

class NewsSite(str, Enum):
    """News sub-sources: a syndication feed and an HTML search page."""

    GOOGLE_NEWS = "google_news"
    NAVER_NEWS = "naver_news"


_NEWS_SITE_MATCHERS: dict[NewsSite, tuple[tuple[str, ...], tuple[str, ...]]] = {
    NewsSite.GOOGLE_NEWS: (("google news", "googlenews", "구글 뉴스"), ("news.google.com",)),
    NewsSite.NAVER_NEWS: (
        ("naver news", "navernews", "네이버 뉴스"),
        ("search.naver.com", "news.naver.com"),
    ),
}

NAVER_NEWS_SEARCH = SiteExtractor(
    key="naver_news",
    display_name="Naver News",
    aliases=_NEWS_SITE_MATCHERS[NewsSite.NAVER_NEWS][0],
    hosts=_NEWS_SITE_MATCHERS[NewsSite.NAVER_NEWS][1],
    # sort=1: newest first
    search_url="https://search.naver.com/search.naver?where=news&query={query}&sort=1",
    base_url="https://search.naver.com",
    row_selector=".news_area",
    title_selector=".news_tit",
    snippet_selector=".news_dsc",
)


def resolve_news_site(source: Source) -> NewsSite | None:
    """Find the news sub-source for a source, or None if unsupported."""
    for site, (aliases, hosts) in _NEWS_SITE_MATCHERS.items():
        if _match(source, aliases, hosts):
            return site
    return None
