"""
Aggregation and normalization of feed records.
Merges partition results, removes duplicate links, orders by recency and
produces the display records returned to API callers.
"""

import logging
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any, Dict, Iterable, List, Optional, Sequence
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from bs4 import BeautifulSoup

from news_navigator.utils.config import get_display_config
from news_navigator.scraper.news_scraper import NewsRecord

logger = logging.getLogger(__name__)

SOURCE_SEPARATOR = " - "
EMPTY_LINK = "#"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class NormalizedNewsItem:
    """
    A news item ready for display or summarization.
    ``timestamp`` only drives ordering and is not serialized.
    """
    title: str
    link: str
    pub_date: str
    source: str
    timestamp: float = 0.0

    def to_dict(self) -> Dict[str, str]:
        return {
            "title": self.title,
            "link": self.link,
            "pubDate": self.pub_date,
            "source": self.source,
        }


def merge_partitions(partitions: Iterable[Sequence[NewsRecord]]) -> List[NewsRecord]:
    """Concatenate partition results in the order given."""
    merged: List[NewsRecord] = []
    for records in partitions:
        merged.extend(records)
    return merged


def deduplicate_records(records: Iterable[NewsRecord]) -> List[NewsRecord]:
    """
    Keep the first record seen for each link.
    Records without a link share one key, so at most one of them survives.
    """
    seen = set()
    unique = []
    for record in records:
        key = record.link.strip()
        if key in seen:
            continue
        seen.add(key)
        unique.append(record)
    return unique


def sort_by_recency(records: Iterable[NewsRecord]) -> List[NewsRecord]:
    """Newest first; unparsable dates last; equal timestamps keep their relative order."""
    return sorted(
        records,
        key=lambda record: (record.timestamp != 0.0, record.timestamp),
        reverse=True
    )


def select_records(
    partitions: Iterable[Sequence[NewsRecord]],
    max_items: int
) -> List[NewsRecord]:
    """Merge, deduplicate, sort and truncate partition results."""
    merged = merge_partitions(partitions)
    unique = deduplicate_records(merged)
    ordered = sort_by_recency(unique)
    logger.debug(f"Selected {min(len(ordered), max_items)} of {len(merged)} merged records")
    return ordered[:max(max_items, 0)]


def strip_source_suffix(title: str, source: str) -> str:
    """Remove a trailing ``" - <source>"`` from the title."""
    if not source:
        return title
    suffix = f"{SOURCE_SEPARATOR}{source}"
    while title.endswith(suffix) and len(title) > len(suffix):
        title = title[:-len(suffix)].rstrip()
    return title


class NewsNormalizer:
    """
    Turns raw feed records into display records.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """Initialize the normalizer with display configuration."""
        self.config = config or get_display_config()
        self.unknown_source = self.config["unknown_source"]
        self.infer_source = self.config["infer_source"]
        self.date_format = self.config["date_format"]
        self.timezone = self._load_timezone(self.config["timezone"])

    @staticmethod
    def _load_timezone(name: Optional[str]) -> tzinfo:
        if not name or name.upper() == "UTC":
            return timezone.utc
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown display timezone {name!r}; falling back to UTC")
            return timezone.utc

    def clean_title(self, title: str) -> str:
        """Drop markup and entities some feeds leave in titles."""
        if "<" in title or "&" in title:
            title = BeautifulSoup(title, "html.parser").get_text()
        return " ".join(title.split())

    def format_date(self, timestamp: float, raw: str) -> str:
        """Format a timestamp for display; unparsable dates keep their raw text."""
        if timestamp == 0.0:
            return raw
        moment = (EPOCH + timedelta(seconds=timestamp)).astimezone(self.timezone)
        return moment.strftime(self.date_format)

    def normalize_record(self, record: NewsRecord) -> NormalizedNewsItem:
        """
        Normalize a single record.

        Args:
            record: Raw feed record

        Returns:
            Display record with cleaned title, defaulted source and formatted date
        """
        title = self.clean_title(record.title)
        source = record.source.strip()

        if source:
            title = strip_source_suffix(title, source)
        elif self.infer_source and SOURCE_SEPARATOR in title:
            title, source = (part.strip() for part in title.rsplit(SOURCE_SEPARATOR, 1))

        timestamp = record.timestamp
        return NormalizedNewsItem(
            title=title,
            link=record.link.strip() or EMPTY_LINK,
            pub_date=self.format_date(timestamp, record.pub_date),
            source=source or self.unknown_source,
            timestamp=timestamp,
        )

    def normalize_records(self, records: Iterable[NewsRecord]) -> List[NormalizedNewsItem]:
        """Normalize records, preserving order."""
        return [self.normalize_record(record) for record in records]


def aggregate_news(
    partitions: Iterable[Sequence[NewsRecord]],
    max_items: int,
    normalizer: Optional[NewsNormalizer] = None
) -> List[NormalizedNewsItem]:
    """
    Convenience function to aggregate partition results.

    Args:
        partitions: Raw records from each partition
        max_items: Maximum number of items to return
        normalizer: Normalizer to use, built from settings if omitted

    Returns:
        Deduplicated, newest-first, normalized items
    """
    normalizer = normalizer or NewsNormalizer()
    return normalizer.normalize_records(select_records(partitions, max_items))
