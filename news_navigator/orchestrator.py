"""
Workflow orchestrator for the news navigator.
Manages the search pipeline: Partition → Fetch → Aggregate → Resolve → Respond.
"""

import asyncio
import logging
from typing import List, Optional, Union
from dataclasses import dataclass, field
from datetime import datetime

from news_navigator.utils.config import settings
from news_navigator.scraper.time_windows import (
    TimeRange,
    TimeWindow,
    build_query,
    partition_time_range,
)
from news_navigator.scraper.news_scraper import FeedFetchError, GoogleNewsScraper, NewsRecord
from news_navigator.scraper.url_resolver import URLResolver
from news_navigator.scraper.cleaner import (
    NewsNormalizer,
    NormalizedNewsItem,
    deduplicate_records,
    select_records,
)

logger = logging.getLogger(__name__)


class SearchError(Exception):
    """Raised when no partition of a search could be fetched."""


@dataclass
class SearchRequest:
    """
    Request configuration for one news search.
    """
    topic: str
    time_range: Union[TimeRange, str, None] = None
    resolve_links: Optional[bool] = None
    max_results: Optional[int] = None
    now: Optional[datetime] = None


@dataclass
class PartitionOutcome:
    """
    Result of fetching one partition.
    """
    window: TimeWindow
    query: str
    records: List[NewsRecord] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class SearchResult:
    """
    Complete search result for one request.
    """
    topic: str
    time_range: str
    items: List[NormalizedNewsItem]
    partitions: List[PartitionOutcome]
    execution_time: float = 0.0

    @property
    def failed_partitions(self) -> int:
        return sum(1 for outcome in self.partitions if outcome.failed)


class NewsSearchOrchestrator:
    """
    Orchestrates one news search. Holds no state between searches.
    """

    def __init__(self, normalizer: Optional[NewsNormalizer] = None):
        """Initialize the orchestrator."""
        self.normalizer = normalizer or NewsNormalizer()

    async def search(self, request: SearchRequest) -> SearchResult:
        """
        Execute the complete search workflow.

        Args:
            request: Search request configuration

        Returns:
            Search result with normalized items, newest first

        Raises:
            ValueError: If the topic is empty
            SearchError: If every partition failed
        """
        start_time = datetime.now()
        topic = (request.topic or "").strip()
        if not topic:
            raise ValueError("Topic cannot be empty")

        time_range = request.time_range or settings.DEFAULT_TIME_RANGE
        max_results = settings.MAX_RESULTS if request.max_results is None else request.max_results
        resolve = settings.RESOLVE_LINKS if request.resolve_links is None else request.resolve_links

        # Step 1: Split the range into query windows
        windows = partition_time_range(time_range, request.now)
        logger.info(f"Searching '{topic}' over {time_range} in {len(windows)} partition(s)")

        async with GoogleNewsScraper() as scraper:
            # Step 2: Fetch every partition concurrently
            outcomes = await self._fetch_partitions(scraper, topic, windows)

            if outcomes and all(outcome.failed for outcome in outcomes):
                raise SearchError(
                    f"All {len(outcomes)} feed request(s) failed: {outcomes[0].error}"
                )

            # Step 3: Merge, deduplicate, sort and cap
            records = select_records((outcome.records for outcome in outcomes), max_results)

            # Step 4: Optionally swap wrapper links for publisher links
            if resolve and records:
                resolver = URLResolver(scraper.session)
                records = deduplicate_records(await resolver.resolve_links(records))

        # Step 5: Normalize for display
        items = self.normalizer.normalize_records(records)

        execution_time = (datetime.now() - start_time).total_seconds()
        result = SearchResult(
            topic=topic,
            time_range=str(getattr(time_range, "value", time_range)),
            items=items,
            partitions=outcomes,
            execution_time=execution_time
        )
        logger.info(
            f"Search for '{topic}' returned {len(items)} item(s) "
            f"({result.failed_partitions} failed partition(s)) in {execution_time:.2f}s"
        )
        return result

    async def _fetch_partitions(
        self,
        scraper: GoogleNewsScraper,
        topic: str,
        windows: List[TimeWindow]
    ) -> List[PartitionOutcome]:
        """
        Fetch all partitions and wait for every one to settle.

        Args:
            scraper: Open scraper
            topic: Search topic
            windows: Query windows

        Returns:
            One outcome per window, in window order
        """
        queries = [build_query(topic, window) for window in windows]
        results = await asyncio.gather(
            *(scraper.fetch_feed(query) for query in queries),
            return_exceptions=True
        )

        outcomes = []
        for window, query, result in zip(windows, queries, results):
            if isinstance(result, FeedFetchError):
                logger.warning(f"Partition '{query}' contributed no items: {result}")
                outcomes.append(PartitionOutcome(window=window, query=query, error=str(result)))
            elif isinstance(result, BaseException):
                logger.error(f"Unexpected failure in partition '{query}': {result}")
                outcomes.append(PartitionOutcome(window=window, query=query, error=str(result)))
            else:
                outcomes.append(PartitionOutcome(window=window, query=query, records=result))
        return outcomes


_orchestrator: Optional[NewsSearchOrchestrator] = None


def get_orchestrator() -> NewsSearchOrchestrator:
    """Get the shared orchestrator instance."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = NewsSearchOrchestrator()
    return _orchestrator


async def search_news(
    topic: str,
    time_range: Union[TimeRange, str, None] = None,
    resolve_links: Optional[bool] = None
) -> List[NormalizedNewsItem]:
    """
    Convenience function to search news.

    Args:
        topic: Search topic
        time_range: Range token such as ``"7d"``
        resolve_links: Whether to resolve wrapper links

    Returns:
        Normalized items, newest first
    """
    result = await get_orchestrator().search(
        SearchRequest(topic=topic, time_range=time_range, resolve_links=resolve_links)
    )
    return result.items
