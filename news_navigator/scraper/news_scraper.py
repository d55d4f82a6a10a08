"""
Google News RSS scraping module.
Issues date-bounded search requests against the feed and parses each <item>
into a raw news record.
"""

import asyncio
import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import List, Optional
from dataclasses import dataclass
from urllib.parse import quote, urlencode

import aiohttp
import feedparser

from news_navigator.utils.config import get_feed_config

logger = logging.getLogger(__name__)

CDATA_MARKERS = ("<![CDATA[", "]]>")


class FeedFetchError(Exception):
    """Raised when one upstream feed request fails or times out."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


@dataclass(frozen=True)
class NewsRecord:
    """
    Represents a raw item as it appears in the upstream feed.
    Every field falls back to an empty string when the feed omits it.
    """
    title: str = ""
    link: str = ""
    pub_date: str = ""
    source: str = ""

    @property
    def timestamp(self) -> float:
        """Epoch seconds derived from ``pub_date``; 0.0 when unparsable."""
        return parse_pub_date(self.pub_date)


def parse_pub_date(text: str) -> float:
    """
    Parse a feed date into epoch seconds.

    RFC 2822 dates are tried first, ISO 8601 second. Anything else yields 0.0
    so the record sorts last.
    """
    text = (text or "").strip()
    if not text:
        return 0.0

    parsed: Optional[datetime] = None
    try:
        parsed = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        parsed = None

    if parsed is None:
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return 0.0

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.timestamp()
    except (OverflowError, OSError, ValueError):
        return 0.0


def _clean_field(value) -> str:
    if not isinstance(value, str):
        return ""
    for marker in CDATA_MARKERS:
        value = value.replace(marker, "")
    return value.strip()


def _entry_source(entry) -> str:
    source = entry.get("source")
    if isinstance(source, dict):
        return _clean_field(source.get("title"))
    return _clean_field(source)


def parse_feed_items(content: str) -> List[NewsRecord]:
    """
    Extract raw records from an RSS document.

    Args:
        content: Feed XML text

    Returns:
        Records in feed order; missing fields become empty strings
    """
    feed = feedparser.parse(content)
    if getattr(feed, "bozo", 0):
        logger.debug(f"Feed parsed leniently: {getattr(feed, 'bozo_exception', None)}")

    records = []
    for entry in feed.entries:
        records.append(NewsRecord(
            title=_clean_field(entry.get("title")),
            link=_clean_field(entry.get("link")),
            pub_date=_clean_field(entry.get("published")),
            source=_entry_source(entry),
        ))
    return records


class GoogleNewsScraper:
    """
    Fetches Google News RSS search results, one query per request.
    """

    def __init__(self, session: Optional[aiohttp.ClientSession] = None):
        """
        Initialize the scraper.

        Args:
            session: Existing client session to reuse; the scraper only closes
                sessions it created itself.
        """
        self.config = get_feed_config()
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self):
        """Async context manager entry."""
        if self.session is None:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config["timeout"]),
                headers={
                    "User-Agent": self.config["user_agent"],
                    "Accept-Language": f"{self.config['language']},en;q=0.8",
                }
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self.session and self._owns_session:
            await self.session.close()

    def build_feed_url(self, query: str) -> str:
        """Build the RSS search URL for one query string."""
        params = {
            "q": query,
            "hl": self.config["language"],
            "gl": self.config["region"],
            "ceid": self.config["ceid"],
        }
        return f"{self.config['rss_url']}/search?{urlencode(params, quote_via=quote, safe=':')}"

    async def fetch_feed(self, query: str, max_items: Optional[int] = None) -> List[NewsRecord]:
        """
        Fetch and parse the feed for a single query.

        Args:
            query: Full query text, including any date operators
            max_items: Advisory ceiling for this request

        Returns:
            Raw records in feed order

        Raises:
            FeedFetchError: On a non-2xx response, timeout, or connection error
        """
        max_items = max_items or self.config["max_items"]
        url = self.build_feed_url(query)

        try:
            async with self.session.get(url) as response:
                if not 200 <= response.status < 300:
                    raise FeedFetchError(
                        f"Google News RSS returned status {response.status} for '{query}'",
                        status=response.status
                    )
                content = await response.text()
        except asyncio.TimeoutError as e:
            raise FeedFetchError(f"Timed out fetching feed for '{query}'") from e
        except aiohttp.ClientError as e:
            raise FeedFetchError(f"Failed to fetch feed for '{query}': {e}") from e

        records = parse_feed_items(content)[:max_items]
        logger.info(f"Fetched {len(records)} items for '{query}'")
        return records
