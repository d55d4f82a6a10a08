"""
AI-powered headline analysis using OpenAI-compatible chat models.
Summarizes a list of timestamped headlines about one topic.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence
from dataclasses import dataclass
from datetime import datetime

from openai import AsyncOpenAI, OpenAIError

from news_navigator.utils.config import get_openai_config

logger = logging.getLogger(__name__)


class SummaryError(Exception):
    """Base class for summary generation failures."""


class SummarizerNotConfiguredError(SummaryError):
    """Raised when no API key is configured."""


class SummaryGenerationError(SummaryError):
    """Raised when the model call fails or returns nothing."""


@dataclass
class HeadlineSummary:
    """
    Generated analysis with metadata.
    """
    text: str
    topic: str
    items_used: int
    generation_time: Optional[float] = None
    model_used: Optional[str] = None


SYSTEM_PROMPT = (
    "You are a senior news data analyst. You extract the core information from "
    "fragmented, timestamped headlines and describe how coverage of a topic has "
    "evolved over time. Answer in a professional, insightful and concise way."
)


class NewsSummarizer:
    """
    Headline summarizer backed by an OpenAI-compatible chat endpoint.
    """

    def __init__(self, client: Optional[AsyncOpenAI] = None):
        """Initialize the summarizer with OpenAI configuration."""
        self.config = get_openai_config()
        self.model = self.config["model"]
        self.max_tokens = self.config["max_tokens"]
        self.max_items = self.config["max_items"]
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self._client is not None or bool(self.config["api_key"])

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.config["api_key"]:
                raise SummarizerNotConfiguredError("OPENAI_API_KEY is not configured on the server")
            self._client = AsyncOpenAI(
                api_key=self.config["api_key"],
                base_url=self.config["base_url"]
            )
        return self._client

    async def summarize(self, news: Sequence[Dict[str, Any]], topic: str) -> HeadlineSummary:
        """
        Analyze a list of news items about a topic.

        Args:
            news: Items with ``title`` and ``pubDate`` keys
            topic: Search topic the items were retrieved for

        Returns:
            Generated analysis

        Raises:
            SummarizerNotConfiguredError: If no API key is available
            SummaryGenerationError: If the model call fails or returns no text
        """
        start_time = datetime.now()
        items = list(news)[:self.max_items]
        if not items:
            raise ValueError("No news items provided for summarization")

        prompt = self.build_prompt(items, topic)
        client = self.client

        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt}
                ],
                max_tokens=self.max_tokens,
                temperature=0.3
            )
        except OpenAIError as e:
            logger.error(f"Summary request for '{topic}' failed: {e}")
            raise SummaryGenerationError(f"Model request failed: {e}") from e

        text = ""
        if response.choices and response.choices[0].message.content:
            text = response.choices[0].message.content.strip()
        if not text:
            raise SummaryGenerationError("Model returned an empty summary")

        generation_time = (datetime.now() - start_time).total_seconds()
        logger.info(f"Summarized {len(items)} item(s) for '{topic}' in {generation_time:.2f}s")
        return HeadlineSummary(
            text=text,
            topic=topic,
            items_used=len(items),
            generation_time=generation_time,
            model_used=self.model
        )

    def build_prompt(self, items: List[Dict[str, Any]], topic: str) -> str:
        """
        Build the analysis prompt.

        Args:
            items: News items with ``title`` and ``pubDate`` keys
            topic: Search topic

        Returns:
            Prompt text
        """
        lines = "\n".join(
            f"[Published: {item.get('pubDate') or 'unknown'}] Title: {item.get('title') or ''}"
            for item in items
        )
        return f"""
        Analyze the latest search results about "{topic}".

        Here are the news items with their timestamps:
        {lines}

        Complete the following in {self.config['language']}, within {self.config['max_words']} words:
        1. Core summary: briefly describe the main developments on this topic.
        2. Timeline: using the publish times, describe how the focus of coverage shifted over time.
        3. Key trend: name the single trend or likely direction most worth watching.
        """


_summarizer: Optional[NewsSummarizer] = None


def get_summarizer() -> NewsSummarizer:
    """Get the shared summarizer instance."""
    global _summarizer
    if _summarizer is None:
        _summarizer = NewsSummarizer()
    return _summarizer


async def summarize_news(news: Sequence[Dict[str, Any]], topic: str) -> str:
    """
    Convenience function to summarize news items.

    Args:
        news: Items with ``title`` and ``pubDate`` keys
        topic: Search topic

    Returns:
        Generated analysis text
    """
    summary = await get_summarizer().summarize(news, topic)
    return summary.text
