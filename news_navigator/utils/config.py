"""
Configuration management for the news navigator service.
Handles environment variables, upstream feed settings, and AI model configuration.
"""

from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8000, description="API port")
    DEBUG: bool = Field(default=False, description="Debug mode")
    LOG_LEVEL: str = Field(default="INFO", description="Root log level")

    # Upstream feed configuration
    GOOGLE_NEWS_RSS_URL: str = Field(
        default="https://news.google.com/rss",
        description="Google News RSS base URL"
    )
    NEWS_LANGUAGE: str = Field(default="en-US", description="Feed interface language (hl)")
    NEWS_REGION: str = Field(default="US", description="Feed region (gl)")
    USER_AGENT: str = Field(
        default=(
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
        ),
        description="Browser-like user agent sent upstream"
    )
    FEED_TIMEOUT: float = Field(default=8.0, description="Timeout for one feed request in seconds")
    FEED_ITEMS_PER_REQUEST: int = Field(default=30, ge=1, description="Advisory item ceiling per feed request")

    # Aggregation
    MAX_RESULTS: int = Field(default=300, ge=1, description="Maximum items returned per search")
    DEFAULT_TIME_RANGE: str = Field(default="3d", description="Time range used when none is given")
    UNKNOWN_SOURCE_LABEL: str = Field(default="unknown source", description="Placeholder for a missing source")
    INFER_SOURCE_FROM_TITLE: bool = Field(
        default=False,
        description="Take the source from the title suffix when the feed has no <source>"
    )
    DISPLAY_TIMEZONE: str = Field(default="UTC", description="Timezone for display dates")
    DISPLAY_DATE_FORMAT: str = Field(default="%Y-%m-%d %H:%M", description="strftime pattern for display dates")

    # Link resolution
    RESOLVE_LINKS: bool = Field(default=False, description="Resolve wrapper links by default")
    RESOLVE_TIMEOUT: float = Field(default=4.0, description="Timeout for one link resolution in seconds")
    RESOLVE_CONCURRENCY: int = Field(default=30, ge=1, description="Concurrent link resolutions per search")
    WRAPPER_HOST: str = Field(default="news.google.com", description="Host of the redirect wrapper links")

    # Cache Configuration
    SEARCH_CACHE_MAX_AGE: int = Field(default=1800, description="Edge cache max-age for search responses")

    # AI Model Configuration
    OPENAI_API_KEY: Optional[str] = Field(default=None, description="OpenAI API key")
    OPENAI_BASE_URL: Optional[str] = Field(default=None, description="OpenAI-compatible endpoint override")
    OPENAI_MODEL: str = Field(default="gpt-4o-mini", description="Chat model used for summaries")
    MAX_TOKENS: int = Field(default=1000, description="Maximum tokens for AI responses")
    SUMMARY_MAX_ITEMS: int = Field(default=300, ge=1, description="Maximum news items sent to the model")
    SUMMARY_MAX_WORDS: int = Field(default=350, description="Target summary length in words")
    SUMMARY_LANGUAGE: str = Field(default="English", description="Language of the generated summary")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Global settings instance
settings = Settings()


def get_feed_config() -> dict:
    """Get upstream feed configuration."""
    language = settings.NEWS_LANGUAGE
    return {
        "rss_url": settings.GOOGLE_NEWS_RSS_URL.rstrip("/"),
        "language": language,
        "region": settings.NEWS_REGION,
        "ceid": f"{settings.NEWS_REGION}:{language.split('-')[0]}",
        "user_agent": settings.USER_AGENT,
        "timeout": settings.FEED_TIMEOUT,
        "max_items": settings.FEED_ITEMS_PER_REQUEST,
    }


def get_resolver_config() -> dict:
    """Get link resolution configuration."""
    return {
        "timeout": settings.RESOLVE_TIMEOUT,
        "concurrency": settings.RESOLVE_CONCURRENCY,
        "wrapper_host": settings.WRAPPER_HOST,
        "user_agent": settings.USER_AGENT,
        "language": settings.NEWS_LANGUAGE,
    }


def get_display_config() -> dict:
    """Get normalization and display configuration."""
    return {
        "unknown_source": settings.UNKNOWN_SOURCE_LABEL,
        "infer_source": settings.INFER_SOURCE_FROM_TITLE,
        "timezone": settings.DISPLAY_TIMEZONE,
        "date_format": settings.DISPLAY_DATE_FORMAT,
    }


def get_openai_config() -> dict:
    """Get OpenAI configuration."""
    return {
        "api_key": settings.OPENAI_API_KEY,
        "base_url": settings.OPENAI_BASE_URL,
        "model": settings.OPENAI_MODEL,
        "max_tokens": settings.MAX_TOKENS,
        "max_items": settings.SUMMARY_MAX_ITEMS,
        "max_words": settings.SUMMARY_MAX_WORDS,
        "language": settings.SUMMARY_LANGUAGE,
    }
