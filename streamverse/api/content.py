"""REST endpoints for sources, discovery, titles and catalog ingestion."""

import functools
import logging
from dataclasses import asdict
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..core.catalog import build_content_entry, identity_from_entry
from ..core.discovery import discover_content
from ..core.embeds import create_embed_url, get_src_from_iframe, is_direct_video_link
from ..core.flows import build_social_kit, generate_hero_summary, resolve_suggestions, suggest_titles, understand_query
from ..core.llm import LLMProvider
from ..core.sources import ContentIdentity, MediaKind, generate_sources
from ..core.tmdb import TitleType, TMDBClient, TMDBError
from .deps import get_llm_provider, get_tmdb_client

logger = logging.getLogger("streamverse.content")

router = APIRouter()


class TitleRequest(BaseModel):
    """A TMDB title reference."""

    tmdb_id: int
    media_type: TitleType = "movie"


class CatalogEntryRequest(TitleRequest):
    embed_url: str = ""
    download_url: str = ""
    is_featured: bool = False


class EmbedRequest(BaseModel):
    value: str


@router.get("/sources/{media_kind}/{tmdb_id}")
async def list_sources(
    media_kind: MediaKind,
    tmdb_id: int,
    season: int | None = None,
    episode: int | None = None,
):
    """Ordered embed candidates for one piece of content."""
    try:
        identity = ContentIdentity(tmdb_id=tmdb_id, media_kind=media_kind, season=season, episode=episode)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    sources = generate_sources(identity)
    return {
        "identity": asdict(identity),
        "sources": [asdict(s) for s in sources],
        "count": len(sources),
    }


@router.get("/search")
async def search(
    q: str,
    media_kind: Literal["movie", "tv"] = "movie",
    ai: bool = True,
    tmdb_client: TMDBClient = Depends(get_tmdb_client),
    provider: LLMProvider | None = Depends(get_llm_provider),
):
    """Free-text content search. AI query understanding runs when enabled and configured."""
    if not q.strip():
        raise HTTPException(status_code=422, detail="Query must not be empty")
    understanding = functools.partial(understand_query, provider) if ai and provider is not None else None
    result = await discover_content(q, tmdb_client, default_media_kind=media_kind, understanding=understanding)
    logger.info("Search %r -> %s (%d result(s))", q, result.success, len(result.results))
    return result.to_dict()


@router.get("/suggestions")
async def suggestions(
    tmdb_client: TMDBClient = Depends(get_tmdb_client),
    provider: LLMProvider | None = Depends(get_llm_provider),
):
    """Featured titles, resolved against TMDB."""
    picks = await suggest_titles(provider)
    results = await resolve_suggestions(picks, tmdb_client)
    return {
        "suggestions": [asdict(s) for s in picks],
        "results": [asdict(r) for r in results],
    }


@router.get("/titles/{media_type}/{tmdb_id}")
async def title_details(
    media_type: TitleType,
    tmdb_id: int,
    tmdb_client: TMDBClient = Depends(get_tmdb_client),
    provider: LLMProvider | None = Depends(get_llm_provider),
):
    """Title details plus a hero banner summary."""
    try:
        details = await tmdb_client.get_details(tmdb_id, media_type)
    except TMDBError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    summary = await generate_hero_summary(provider, details.title, details.description)
    return {**asdict(details), "hero_summary": summary}


@router.post("/catalog/entries")
async def create_catalog_entry(
    request: CatalogEntryRequest,
    tmdb_client: TMDBClient = Depends(get_tmdb_client),
):
    """Build a catalog entry from TMDB details, with its playback candidates."""
    try:
        details = await tmdb_client.get_details(request.tmdb_id, request.media_type)
    except TMDBError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e

    entry = build_content_entry(request.tmdb_id, request.media_type, details)
    entry.embed_url = create_embed_url(get_src_from_iframe(request.embed_url))
    entry.download_url = request.download_url
    entry.is_featured = request.is_featured

    sources = generate_sources(identity_from_entry(entry))
    return {"entry": entry.to_dict(), "sources": [asdict(s) for s in sources]}


@router.post("/social")
async def social_kit(
    request: TitleRequest,
    tmdb_client: TMDBClient = Depends(get_tmdb_client),
    provider: LLMProvider | None = Depends(get_llm_provider),
):
    """Caption, hashtags and images for promoting a title."""
    try:
        kit = await build_social_kit(provider, tmdb_client, request.tmdb_id, request.media_type)
    except TMDBError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    return asdict(kit)


@router.post("/embeds/normalize")
async def normalize_embed(request: EmbedRequest):
    """Turn an iframe snippet or share link into a playable URL."""
    url = create_embed_url(get_src_from_iframe(request.value))
    if not url:
        raise HTTPException(status_code=422, detail="No URL found in the embed value")
    return {"url": url, "player": "video" if is_direct_video_link(url) else "iframe"}
