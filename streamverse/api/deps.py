"""Dependency injection helpers shared by the API routers."""

import logging

import httpx
from fastapi import Depends, HTTPException
from starlette.requests import HTTPConnection

from ..core.config import settings
from ..core.extraction import VideoExtractor
from ..core.llm import LLMProvider
from ..core.playback import PlaybackStore
from ..core.tmdb import TMDBClient

logger = logging.getLogger("streamverse.api")


def get_playback_store(conn: HTTPConnection) -> PlaybackStore:
    """Get the playback session store from app state."""
    return conn.app.state.playback_store  # type: ignore[no-any-return]


def get_http_client(conn: HTTPConnection) -> httpx.AsyncClient:
    """Get the shared HTTP client from app state."""
    return conn.app.state.http_client  # type: ignore[no-any-return]


def get_tmdb_client(http_client: httpx.AsyncClient = Depends(get_http_client)) -> TMDBClient:
    """TMDB client over the shared HTTP client. 503 when no API key is configured."""
    if not settings.tmdb.api_key:
        raise HTTPException(status_code=503, detail="TMDB API key is not configured. Set tmdb.api_key in config.yml")
    return TMDBClient(
        api_key=settings.tmdb.api_key.get_secret_value(),
        http_client=http_client,
        base_url=settings.tmdb.base_url,
        image_base_url=settings.tmdb.image_base_url,
    )


async def get_llm_provider() -> LLMProvider | None:
    """Get the configured LLM provider, or None when AI features are disabled."""
    if not settings.llm.api_key:
        logger.debug("No LLM API key configured; AI features disabled")
        return None
    api_key = settings.llm.api_key.get_secret_value()

    if settings.llm.provider == "anthropic":
        from ..core.llm.providers.anthropic import AnthropicProvider

        return AnthropicProvider(api_key=api_key, model=settings.llm.model)
    elif settings.llm.provider == "openai":
        from ..core.llm.providers.openai import OpenAIProvider

        return OpenAIProvider(api_key=api_key, model=settings.llm.model)
    else:
        raise ValueError(f"Unsupported LLM provider: {settings.llm.provider}")


def get_extractor() -> VideoExtractor:
    return VideoExtractor(ffmpeg_location=settings.extraction.ffmpeg_location)
