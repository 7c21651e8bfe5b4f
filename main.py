import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from streamverse.api import content, extraction, playback
from streamverse.core.config import settings
from streamverse.core.playback import InMemoryPlaybackStore

logging.basicConfig(
    level=settings.logging.level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("streamverse")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    app.state.http_client = httpx.AsyncClient()
    app.state.playback_store = InMemoryPlaybackStore(
        max_sessions=settings.playback.max_sessions,
        ttl_seconds=settings.playback.ttl_seconds,
    )
    logger.info("Embed providers: %s", ", ".join(settings.sources) or "(none)")
    if not settings.llm.api_key:
        logger.info("No LLM API key configured; AI features are disabled")
    if not settings.tmdb.api_key:
        logger.warning("No TMDB API key configured; metadata endpoints will return 503")
    yield
    await app.state.http_client.aclose()


app = FastAPI(
    title=settings.app.name,
    version=settings.app.version,
    description="Streaming catalog with embed-provider fallback and AI-assisted discovery",
    lifespan=lifespan,
)

cors_origins = settings.app.allowed_origins or [settings.app.hostname]

# Configure CORS based on environment
if settings.app.environment == "production":
    cors_allow_credentials = False
    cors_allow_methods = ["GET", "POST", "PUT", "DELETE"]
    cors_allow_headers = ["Content-Type", "Authorization", "Accept"]
    cors_max_age = 86400  # 24 hours
else:
    cors_allow_credentials = True
    cors_allow_methods = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    cors_allow_headers = ["*"]
    cors_max_age = 0  # No caching in development

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=cors_allow_credentials,
    allow_methods=cors_allow_methods,
    allow_headers=cors_allow_headers,
    max_age=cors_max_age,
)

app.include_router(content.router)
app.include_router(extraction.router)
app.include_router(playback.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.app.debug,
        log_level=settings.logging.level,
    )
