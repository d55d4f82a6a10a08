"""
Test cases for the headline summarizer.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import openai
import pytest

from news_navigator.ai.summarizer import (
    NewsSummarizer,
    SummarizerNotConfiguredError,
    SummaryGenerationError,
)

NEWS = [
    {"title": "Rates rise again", "link": "https://a/1", "pubDate": "2024-06-10 10:00", "source": "Wire"},
    {"title": "Markets slide", "link": "https://a/2", "pubDate": "2024-06-09 08:00", "source": "Post"},
]


def _client_returning(content):
    client = MagicMock()
    message = SimpleNamespace(content=content)
    client.chat.completions.create = AsyncMock(
        return_value=SimpleNamespace(choices=[SimpleNamespace(message=message)])
    )
    return client


@pytest.mark.asyncio
async def test_summarize_returns_model_text():
    client = _client_returning("  Rates dominate coverage.  ")
    summarizer = NewsSummarizer(client=client)

    summary = await summarizer.summarize(NEWS, "interest rates")

    assert summary.text == "Rates dominate coverage."
    assert summary.items_used == 2
    kwargs = client.chat.completions.create.call_args.kwargs
    prompt = kwargs["messages"][1]["content"]
    assert '"interest rates"' in prompt
    assert "[Published: 2024-06-10 10:00] Title: Rates rise again" in prompt
    assert kwargs["model"] == summarizer.model


@pytest.mark.asyncio
async def test_summarize_caps_items():
    client = _client_returning("ok")
    summarizer = NewsSummarizer(client=client)
    summarizer.max_items = 1

    summary = await summarizer.summarize(NEWS, "rates")

    assert summary.items_used == 1
    prompt = client.chat.completions.create.call_args.kwargs["messages"][1]["content"]
    assert "Markets slide" not in prompt


@pytest.mark.asyncio
async def test_empty_reply_is_an_error():
    summarizer = NewsSummarizer(client=_client_returning(""))

    with pytest.raises(SummaryGenerationError):
        await summarizer.summarize(NEWS, "rates")


@pytest.mark.asyncio
async def test_provider_failure_is_wrapped():
    client = MagicMock()
    client.chat.completions.create = AsyncMock(side_effect=openai.OpenAIError("quota exceeded"))
    summarizer = NewsSummarizer(client=client)

    with pytest.raises(SummaryGenerationError, match="quota exceeded"):
        await summarizer.summarize(NEWS, "rates")


@pytest.mark.asyncio
async def test_missing_api_key_is_reported():
    summarizer = NewsSummarizer()
    summarizer.config = dict(summarizer.config, api_key=None)

    assert not summarizer.is_configured
    with pytest.raises(SummarizerNotConfiguredError):
        await summarizer.summarize(NEWS, "rates")
