"""
FastAPI main application for the news navigator.
Provides REST API endpoints for news search and headline analysis.
"""

import logging
from contextlib import asynccontextmanager
from typing import List, Optional, Dict
from datetime import datetime

from fastapi import FastAPI, HTTPException, Query
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from news_navigator import __version__
from news_navigator.utils.config import settings
from news_navigator.orchestrator import SearchError, SearchRequest, get_orchestrator
from news_navigator.ai.summarizer import (
    SummarizerNotConfiguredError,
    SummaryError,
    get_summarizer,
)

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


# Pydantic models for API requests and responses
class NewsItemModel(BaseModel):
    """A normalized news item."""
    title: str = Field(default="", description="Headline without the source suffix")
    link: str = Field(default="", description="Publisher URL, or the feed link if unresolved")
    pubDate: str = Field(default="", description="Display-formatted publish time")
    source: str = Field(default="", description="Publisher name")


class SummaryRequestModel(BaseModel):
    """Request model for headline analysis."""
    news: List[NewsItemModel] = Field(..., description="Items returned by the search endpoint")
    topic: str = Field(..., description="Topic the items were searched for")


class SummaryResponseModel(BaseModel):
    """Response model for headline analysis."""
    text: str


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    summarizer_configured: bool
    timestamp: datetime


# Application lifecycle
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting news navigator API...")
    if not get_summarizer().is_configured:
        logger.warning("OPENAI_API_KEY is not set; /api/summary will return errors")

    yield

    logger.info("Shutting down news navigator API...")


# Create FastAPI application
app = FastAPI(
    title="News Navigator API",
    description="Google News search with time-windowed aggregation and AI headline analysis",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/", response_model=Dict[str, str])
async def root():
    """Root endpoint with API information."""
    return {
        "message": "News Navigator API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        summarizer_configured=get_summarizer().is_configured,
        timestamp=datetime.now()
    )


@app.get("/api/news", response_model=List[NewsItemModel])
async def search_news(
    q: Optional[str] = Query(default=None, description="Search topic"),
    time_range: Optional[str] = Query(default=None, alias="range", description="Time range: 1d, 3d, 7d, 30d or 1y"),
    resolve: Optional[bool] = Query(default=None, description="Resolve wrapper links to publisher URLs")
) -> JSONResponse:
    """
    Search Google News for a topic within a time range.
    An empty list means nothing was published in the window.
    """
    if not q or not q.strip():
        raise HTTPException(status_code=400, detail="Missing query parameter 'q'")

    try:
        result = await get_orchestrator().search(SearchRequest(
            topic=q,
            time_range=time_range,
            resolve_links=resolve
        ))
    except SearchError as e:
        logger.error(f"Search for '{q}' failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return JSONResponse(
        content=[item.to_dict() for item in result.items],
        headers={
            "Cache-Control": f"s-maxage={settings.SEARCH_CACHE_MAX_AGE}, stale-while-revalidate"
        }
    )


@app.post("/api/summary", response_model=SummaryResponseModel)
async def summarize_headlines(request: SummaryRequestModel) -> JSONResponse:
    """
    Generate an AI analysis of searched headlines.
    Failures here never affect search results already returned.
    """
    if not request.news or not request.topic.strip():
        raise HTTPException(status_code=400, detail="Missing 'news' or 'topic' parameter")

    news = [item.model_dump() for item in request.news]
    try:
        summary = await get_summarizer().summarize(news, request.topic.strip())
    except SummarizerNotConfiguredError as e:
        logger.error(f"Summary unavailable: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    except SummaryError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return JSONResponse(
        content={"text": summary.text},
        headers={"Cache-Control": "no-store"}
    )


# Error handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request, exc):
    """Handle HTTP exceptions, including routing errors such as 405."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.detail,
            "status_code": exc.status_code,
            "timestamp": datetime.now().isoformat()
        },
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc):
    """Report malformed or missing request fields as a client error."""
    fields = ", ".join(
        ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        for error in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content={
            "error": f"Invalid or missing parameters: {fields}" if fields else "Invalid request",
            "status_code": 400,
            "timestamp": datetime.now().isoformat()
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """Handle general exceptions."""
    logger.error(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "status_code": 500,
            "timestamp": datetime.now().isoformat()
        }
    )


if __name__ == "__main__":
    uvicorn.run(
        "news_navigator.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
