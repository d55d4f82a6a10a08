"""
Test cases for feed parsing and fetching.
"""

import asyncio

import aiohttp
import pytest

from news_navigator.scraper.news_scraper import (
    FeedFetchError,
    GoogleNewsScraper,
    NewsRecord,
    parse_feed_items,
    parse_pub_date,
)
from conftest import FakeResponse, FakeSession, rss_document, rss_item


def test_parse_strips_cdata_markers():
    xml = rss_document(rss_item(
        title="<![CDATA[Example Title]]>",
        link="<![CDATA[https://news.google.com/rss/articles/abc]]>",
        pub_date="Mon, 10 Jun 2024 10:00:00 GMT",
        source="<![CDATA[Example Times]]>",
    ))

    records = parse_feed_items(xml)

    assert records == [NewsRecord(
        title="Example Title",
        link="https://news.google.com/rss/articles/abc",
        pub_date="Mon, 10 Jun 2024 10:00:00 GMT",
        source="Example Times",
    )]


def test_parse_trims_whitespace_and_keeps_feed_order():
    xml = rss_document(
        rss_item(title="  First - Wire  ", link=" https://a.example/1 ", source=" Wire "),
        rss_item(title="Second", link="https://a.example/2"),
    )

    records = parse_feed_items(xml)

    assert [r.title for r in records] == ["First - Wire", "Second"]
    assert records[0].link == "https://a.example/1"
    assert records[0].source == "Wire"


def test_parse_missing_fields_become_empty_strings():
    xml = rss_document(rss_item(title="Only a title"))

    records = parse_feed_items(xml)

    assert len(records) == 1
    assert records[0].link == ""
    assert records[0].pub_date == ""
    assert records[0].source == ""


def test_parse_document_without_items():
    assert parse_feed_items(rss_document()) == []
    assert parse_feed_items("not xml at all") == []


@pytest.mark.parametrize("text,expected", [
    ("Mon, 10 Jun 2024 10:00:00 GMT", 1718013600.0),
    ("Mon, 10 Jun 2024 12:00:00 +0200", 1718013600.0),
    ("2024-06-10T10:00:00Z", 1718013600.0),
    ("invalid", 0.0),
    ("", 0.0),
])
def test_parse_pub_date(text, expected):
    assert parse_pub_date(text) == expected


def test_record_timestamp_uses_pub_date():
    assert NewsRecord(pub_date="Mon, 10 Jun 2024 10:00:00 GMT").timestamp == 1718013600.0
    assert NewsRecord().timestamp == 0.0


def test_build_feed_url_includes_locale_and_query():
    scraper = GoogleNewsScraper(session=FakeSession())

    url = scraper.build_feed_url("solar power after:2024-06-06")

    assert url.startswith("https://news.google.com/rss/search?q=solar%20power%20after:2024-06-06")
    assert "&hl=en-US" in url
    assert "&gl=US" in url
    assert "&ceid=US:en" in url


@pytest.mark.asyncio
async def test_fetch_feed_returns_records():
    xml = rss_document(*(
        rss_item(title=f"Story {i}", link=f"https://a.example/{i}") for i in range(5)
    ))
    session = FakeSession(default=FakeResponse(status=200, text=xml))

    async with GoogleNewsScraper(session=session) as scraper:
        records = await scraper.fetch_feed("topic", max_items=3)

    assert [r.title for r in records] == ["Story 0", "Story 1", "Story 2"]
    assert len(session.requested) == 1
    assert not session.closed


@pytest.mark.asyncio
async def test_fetch_feed_raises_on_non_2xx():
    session = FakeSession(default=FakeResponse(status=503, text="busy"))
    scraper = GoogleNewsScraper(session=session)

    with pytest.raises(FeedFetchError) as excinfo:
        await scraper.fetch_feed("topic")

    assert excinfo.value.status == 503


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [
    asyncio.TimeoutError(),
    aiohttp.ClientConnectionError("connection reset"),
])
async def test_fetch_feed_wraps_transport_errors(error):
    scraper = GoogleNewsScraper(session=FakeSession(default=error))

    with pytest.raises(FeedFetchError):
        await scraper.fetch_feed("topic")
