"""Direct video URL extraction endpoints."""

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..core.extraction import ExtractionError, VideoExtractor
from .deps import get_extractor

router = APIRouter(prefix="/extract")


class ExtractRequest(BaseModel):
    source_url: str
    format: str | None = None


class FormatUrlRequest(BaseModel):
    source_url: str
    format_id: str


class DownloadUrlRequest(BaseModel):
    url: str


@router.post("")
async def extract_video(request: ExtractRequest, extractor: VideoExtractor = Depends(get_extractor)):
    """Resolve a webpage URL to a direct video URL. Failures are reported in `error`."""
    result = await extractor.extract(request.source_url, request.format)
    return asdict(result)


@router.get("/formats")
async def list_formats(url: str, extractor: VideoExtractor = Depends(get_extractor)):
    listing = await extractor.list_formats(url)
    return asdict(listing)


@router.post("/format-url")
async def format_url(request: FormatUrlRequest, extractor: VideoExtractor = Depends(get_extractor)):
    result = await extractor.get_format_url(request.source_url, request.format_id)
    return asdict(result)


@router.post("/download-url")
async def download_url(request: DownloadUrlRequest, extractor: VideoExtractor = Depends(get_extractor)):
    """URL of the largest single-file format."""
    try:
        url = await extractor.get_download_url(request.url)
    except ExtractionError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    return {"download_url": url}
