"""
Best-effort resolution of Google News wrapper links to publisher URLs.
"""

import asyncio
import logging
from dataclasses import replace
from typing import List, Optional
from urllib.parse import urlparse

import aiohttp

from news_navigator.utils.config import get_resolver_config
from news_navigator.scraper.news_scraper import NewsRecord

logger = logging.getLogger(__name__)


def is_wrapper_url(url: str, wrapper_host: str) -> bool:
    """Return True if the URL still points at the redirect wrapper host."""
    host = (urlparse(url).hostname or "").lower()
    return host == wrapper_host.lower()


class URLResolver:
    """
    Follows redirects for article links. Never raises: every failure
    returns the original link.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        timeout: Optional[float] = None,
        concurrency: Optional[int] = None
    ):
        self.config = get_resolver_config()
        self.session = session
        self.timeout = timeout or self.config["timeout"]
        self.concurrency = concurrency or self.config["concurrency"]
        self.headers = {
            "User-Agent": self.config["user_agent"],
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": f"{self.config['language']},en;q=0.8",
            "Cache-Control": "no-cache",
            "Pragma": "no-cache",
        }

    async def resolve_url(self, url: str) -> str:
        """
        Resolve a single link.

        Args:
            url: Link as supplied by the feed

        Returns:
            The final landing URL, or ``url`` if resolution failed
        """
        if not url or not url.startswith(("http://", "https://")):
            return url

        try:
            async with self.session.get(
                url,
                allow_redirects=True,
                headers=self.headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as response:
                final_url = str(response.url)
        except asyncio.TimeoutError:
            logger.debug(f"Timed out resolving {url}")
            return url
        except aiohttp.ClientError as e:
            logger.debug(f"Could not resolve {url}: {e}")
            return url

        if not final_url or is_wrapper_url(final_url, self.config["wrapper_host"]):
            return url
        return final_url

    async def resolve_links(self, records: List[NewsRecord]) -> List[NewsRecord]:
        """
        Resolve the links of many records concurrently.

        The whole batch shares one deadline equal to the per-call timeout.
        Records still waiting when it passes keep their original link.

        Args:
            records: Records whose links should be resolved

        Returns:
            New records in the same order, with resolved links where possible
        """
        if not records:
            return []

        semaphore = asyncio.Semaphore(self.concurrency)

        async def _resolve(record: NewsRecord) -> NewsRecord:
            async with semaphore:
                link = await self.resolve_url(record.link)
            return record if link == record.link else replace(record, link=link)

        tasks = [asyncio.ensure_future(_resolve(record)) for record in records]
        done, pending = await asyncio.wait(tasks, timeout=self.timeout)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.warning(f"Link resolution deadline passed with {len(pending)} link(s) pending")

        resolved = [
            task.result() if task in done else record
            for task, record in zip(tasks, records)
        ]
        changed = sum(1 for before, after in zip(records, resolved) if before is not after)
        logger.info(f"Resolved {changed} of {len(records)} links")
        return resolved
