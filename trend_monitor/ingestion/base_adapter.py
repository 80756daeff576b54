"""
Base adapter interface and shared functionality for site adapters.

Each adapter implements ``_collect(source, keyword)`` for one source type.
The base class provides:
- Rate limiting per target site or channel
- Conversion of every failure into a ``CollectionResult`` (adapters never raise)
- One-time logging when the adapter is disabled for missing credentials
- Common normalization utilities (text cleaning, absolute links, recency)
"""

import asyncio
import logging
import re
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any
from urllib.parse import urljoin, urlparse

import httpx
from pydantic import ValidationError

from trend_monitor.config.settings import get_settings
from trend_monitor.ingestion.schemas import Item
from trend_monitor.keywords.schemas import Keyword
from trend_monitor.sources.schemas import Source, SourceType

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RateLimiter:
    """
    Simple token bucket rate limiter.

    Allows `rate` requests per minute with burst capacity.
    """

    rate: int  # requests per minute
    _tokens: float = field(init=False)
    _last_update: float = field(init=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    def __post_init__(self) -> None:
        self._tokens = float(self.rate)
        self._last_update = time.monotonic()

    async def acquire(self) -> None:
        """Wait until a token is available, then consume it."""
        async with self._lock:
            now = time.monotonic()
            elapsed = now - self._last_update
            self._last_update = now

            self._tokens = min(
                float(self.rate),
                self._tokens + elapsed * (self.rate / 60.0),
            )

            if self._tokens < 1:
                wait_time = (1 - self._tokens) * 60.0 / self.rate
                logger.debug(f"Rate limited, waiting {wait_time:.2f}s")
                await asyncio.sleep(wait_time)
                self._tokens = 0
            else:
                self._tokens -= 1


class FailureReason(str, Enum):
    """Why an adapter call produced no items."""

    NETWORK = "network"
    TIMEOUT = "timeout"
    PARSE = "parse"
    MALFORMED_RESPONSE = "malformed_response"
    AUTH_REQUIRED = "auth_required"
    QUOTA_EXCEEDED = "quota_exceeded"
    MISSING_CREDENTIALS = "missing_credentials"
    UNKNOWN_SITE = "unknown_site"


@dataclass(frozen=True)
class CollectionResult:
    """Outcome of one ``collect(source, keyword)`` call.

    Distinguishes "nothing found" (``ok`` with no items) from a named
    failure. Both expose ``items`` so callers can treat them uniformly.
    """

    items: tuple[Item, ...] = ()
    failure: FailureReason | None = None
    detail: str = ""

    @classmethod
    def ok(cls, items: list[Item]) -> "CollectionResult":
        return cls(items=tuple(items))

    @classmethod
    def failed(cls, reason: FailureReason, detail: str = "") -> "CollectionResult":
        return cls(failure=reason, detail=detail)

    @property
    def succeeded(self) -> bool:
        return self.failure is None


class AdapterFailure(Exception):
    """Named failure raised inside ``_collect`` and converted by ``collect``."""

    def __init__(self, reason: FailureReason, detail: str = "") -> None:
        super().__init__(detail or reason.value)
        self.reason = reason
        self.detail = detail


class BaseAdapter(ABC):
    """
    Abstract base class for site adapters.

    Subclasses must implement:
        - kind: SourceType this adapter handles
        - _collect(): one bounded fetch + parse for a (source, keyword) pair

    Subclasses may override ``disabled_reason()`` to switch the adapter off
    for the whole run (e.g. a missing API key).
    """

    def __init__(
        self,
        timeout: float | None = None,
        max_items: int | None = None,
        recency_window: timedelta | None = None,
        user_agent: str | None = None,
        rate_limit: int | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Initialize adapter.

        Args:
            timeout: Per-request timeout in seconds
            max_items: Maximum items returned per call
            recency_window: Trailing window for recency-filtered sub-sources
            user_agent: User-Agent header sent to scraped sites
            rate_limit: Maximum requests per minute
            clock: Returns the current UTC time (injectable for tests)
        """
        settings = get_settings()

        self._timeout = timeout or settings.http_timeout_seconds
        self._max_items = max_items or settings.max_items_per_fetch
        self._recency_window = recency_window or timedelta(
            hours=settings.recency_window_hours
        )
        self._user_agent = user_agent or settings.user_agent
        self._rate_limit = rate_limit or settings.adapter_rate_limit
        # one bucket per target site or channel
        self._rate_limiters: dict[str, RateLimiter] = {}
        self._clock = clock or _utc_now
        self._disabled_logged = False

    @property
    @abstractmethod
    def kind(self) -> SourceType:
        """Return the source type this adapter handles."""
        ...

    @property
    def name(self) -> str:
        """Human-readable adapter name."""
        return f"{self.kind.value}_adapter"

    def disabled_reason(self) -> str | None:
        """Return why the adapter is disabled for this run, or None."""
        return None

    def begin_run(self) -> None:
        """Reset per-run state. Called once at the start of every collection run."""
        self._disabled_logged = False

    @abstractmethod
    async def _collect(self, source: Source, keyword: Keyword) -> list[Item]:
        """
        Fetch and parse one source for one keyword.

        Raise AdapterFailure for named failures; httpx errors and any other
        exception are converted by ``collect()``.
        """
        ...

    async def collect(self, source: Source, keyword: Keyword) -> CollectionResult:
        """
        Collect items for a (source, keyword) pair.

        This is the entry point called by the collection service. It never
        raises: every failure is logged and returned as a failed result.
        """
        disabled = self.disabled_reason()
        if disabled is not None:
            if not self._disabled_logged:
                logger.warning(f"{self.name} disabled: {disabled}")
                self._disabled_logged = True
            return CollectionResult.failed(FailureReason.MISSING_CREDENTIALS, disabled)

        logger.debug(f"{self.name} collecting '{keyword.name}' from {source.name}")

        try:
            items = await self._collect(source, keyword)

        except AdapterFailure as e:
            logger.warning(
                f"{self.name} {e.reason.value} for {source.name}/'{keyword.name}': {e.detail}"
            )
            return CollectionResult.failed(e.reason, e.detail)

        except httpx.TimeoutException:
            logger.warning(
                f"{self.name} timed out after {self._timeout}s for "
                f"{source.name}/'{keyword.name}'"
            )
            return CollectionResult.failed(FailureReason.TIMEOUT, f"timeout after {self._timeout}s")

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning(
                f"{self.name} got HTTP {status} for {source.name}/'{keyword.name}'"
            )
            return CollectionResult.failed(FailureReason.NETWORK, f"HTTP {status}")

        except httpx.HTTPError as e:
            logger.warning(
                f"{self.name} request failed for {source.name}/'{keyword.name}': "
                f"{type(e).__name__}"
            )
            return CollectionResult.failed(FailureReason.NETWORK, type(e).__name__)

        except Exception as e:
            logger.error(
                f"Error parsing {source.name} response in {self.name}: {e}",
                exc_info=True,
            )
            return CollectionResult.failed(FailureReason.PARSE, str(e))

        items = items[: self._max_items]
        logger.info(f"Collected {len(items)} items from {source.name} for '{keyword.name}'")
        return CollectionResult.ok(items)

    # Shared helpers for subclasses

    def _client(self) -> httpx.AsyncClient:
        """Short-lived client for one collect call."""
        return httpx.AsyncClient(
            timeout=self._timeout,
            headers={"User-Agent": self._user_agent},
            follow_redirects=True,
        )

    async def _get(
        self,
        client: httpx.AsyncClient,
        url: str,
        params: dict[str, Any] | None = None,
        target: str | None = None,
    ) -> httpx.Response:
        """Rate-limited GET that raises on non-2xx responses.

        Requests are throttled per ``target`` (defaults to the URL host), so
        one site's traffic never delays another's.
        """
        await self._limiter_for(target or _host_of(url)).acquire()
        response = await client.get(url, params=params)
        response.raise_for_status()
        return response

    def _limiter_for(self, target: str) -> RateLimiter:
        limiter = self._rate_limiters.get(target)
        if limiter is None:
            limiter = RateLimiter(rate=self._rate_limit)
            self._rate_limiters[target] = limiter
        return limiter

    def _recency_cutoff(self) -> datetime:
        return self._clock() - self._recency_window

    def _build_item(
        self,
        source: Source,
        keyword: Keyword,
        title: str | None,
        url: str | None,
        content: str | None = "",
        published_at: datetime | None = None,
    ) -> Item | None:
        """Normalize one extracted result, or None when title/link is missing."""
        title = clean_text(title or "")
        url = (url or "").strip()
        if not title or not url:
            logger.debug(f"Skipping result without title/link from {source.name}")
            return None

        try:
            return Item(
                source_name=source.name,
                source_type=self.kind.value,
                keyword_name=keyword.name,
                keyword_id=keyword.id,
                title=title,
                url=url,
                content=clean_text(content or ""),
                published_at=published_at,
                collected_at=self._clock(),
            )
        except ValidationError as e:
            logger.debug(f"Skipping invalid result from {source.name}: {e}")
            return None


# Common normalization utilities used across adapters

def clean_text(text: str) -> str:
    """
    Clean text content by removing excessive whitespace and control characters.

    Args:
        text: Raw text content

    Returns:
        Cleaned text
    """
    text = " ".join(text.split())
    text = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]', '', text)
    return text.strip()


def _host_of(url: str) -> str:
    return (urlparse(url).hostname or url).lower()


def absolute_url(link: str, base_url: str) -> str:
    """Resolve a possibly relative link against a site's canonical host."""
    link = link.strip()
    if link.startswith(("http://", "https://")):
        return link
    return urljoin(base_url.rstrip("/") + "/", link)


def struct_time_to_datetime(value: Any) -> datetime | None:
    """Convert a feedparser ``*_parsed`` struct_time (UTC) to an aware datetime."""
    if not value:
        return None
    try:
        return datetime(*value[:6], tzinfo=timezone.utc)
    except (TypeError, ValueError):
        return None


def parse_iso_datetime(value: str | None) -> datetime | None:
    """Parse ISO 8601 timestamps such as ``2024-05-01T10:00:00Z``."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
