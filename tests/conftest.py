"""
Shared fixtures and fakes for the test suite.
"""

from typing import Dict, List, Optional, Union

import pytest


class FakeResponse:
    """Minimal stand-in for an aiohttp response."""

    def __init__(self, status: int = 200, text: str = "", url: Optional[str] = None):
        self.status = status
        self._text = text
        self.url = url

    async def text(self) -> str:
        return self._text


class _FakeRequest:
    def __init__(self, outcome: Union[FakeResponse, Exception]):
        self.outcome = outcome

    async def __aenter__(self) -> FakeResponse:
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False


class FakeSession:
    """
    Replaces aiohttp.ClientSession in tests.

    ``routes`` maps a URL (or a substring of it) to a response or an exception.
    Unmatched URLs get ``default``.
    """

    def __init__(
        self,
        routes: Optional[Dict[str, Union[FakeResponse, Exception]]] = None,
        default: Union[FakeResponse, Exception, None] = None
    ):
        self.routes = routes or {}
        self.default = default if default is not None else FakeResponse(status=404)
        self.requested: List[str] = []
        self.closed = False

    def get(self, url: str, **kwargs) -> _FakeRequest:
        self.requested.append(url)
        if url in self.routes:
            return _FakeRequest(self.routes[url])
        for key, outcome in self.routes.items():
            if key in url:
                return _FakeRequest(outcome)
        return _FakeRequest(self.default)

    async def close(self) -> None:
        self.closed = True


def rss_document(*items: str) -> str:
    """Wrap item blocks in a minimal RSS 2.0 document."""
    body = "\n".join(items)
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>"test" - Google News</title>
    {body}
  </channel>
</rss>"""


def rss_item(
    title: str = "",
    link: str = "",
    pub_date: str = "",
    source: Optional[str] = None,
    source_url: str = "https://publisher.example"
) -> str:
    """Build one <item> block; empty values are left out."""
    parts = ["<item>"]
    if title:
        parts.append(f"<title>{title}</title>")
    if link:
        parts.append(f"<link>{link}</link>")
    if pub_date:
        parts.append(f"<pubDate>{pub_date}</pubDate>")
    if source is not None:
        parts.append(f'<source url="{source_url}">{source}</source>')
    parts.append("</item>")
    return "".join(parts)


@pytest.fixture
def display_config() -> dict:
    return {
        "unknown_source": "unknown source",
        "infer_source": False,
        "timezone": "UTC",
        "date_format": "%Y-%m-%d %H:%M",
    }
