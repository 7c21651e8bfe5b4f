"""Direct video URL extraction backed by yt-dlp.

yt-dlp is blocking, so every call runs in a worker thread. Failures come
back as an `error` string on the result object; only get_download_url()
raises ExtractionError.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Any

import yt_dlp
import yt_dlp.utils

logger = logging.getLogger("streamverse.extraction")

YOUTUBE_URL = re.compile(r"youtube\.com|youtu\.be")
UNKNOWN_EXTRACTION_ERROR = "An unknown extraction error occurred."


class ExtractionError(Exception):
    """Raised when no playable or downloadable URL can be extracted."""


@dataclass
class ExtractionResult:
    video_url: str | None = None
    error: str | None = None


@dataclass
class VideoFormat:
    format_id: str
    ext: str
    vcodec: str
    acodec: str
    format_note: str | None = None
    resolution: str | None = None
    height: int | None = None
    filesize_approx: int | None = None
    filesize_approx_str: str = "N/A"


@dataclass
class FormatListing:
    formats: list[VideoFormat] | None = None
    error: str | None = None


def clean_error_message(exc: BaseException) -> str:
    """Keep the part of a yt-dlp message after 'ERROR:'."""
    if isinstance(exc, ExtractionError):
        return str(exc)
    parts = str(exc).split("ERROR:", 1)
    if len(parts) == 2 and parts[1].strip():
        return parts[1].strip()
    return UNKNOWN_EXTRACTION_ERROR


def _has_audio_and_video(fmt: dict[str, Any]) -> bool:
    return fmt.get("vcodec", "none") != "none" and fmt.get("acodec", "none") != "none"


class VideoExtractor:
    """Resolves webpage URLs to direct media URLs."""

    def __init__(self, ffmpeg_location: str | None = None) -> None:
        self.ffmpeg_location = ffmpeg_location

    def _build_opts(self, **extra: Any) -> dict[str, Any]:
        opts: dict[str, Any] = {
            "quiet": True,
            "no_warnings": True,
            "noplaylist": True,
            "skip_download": True,
        }
        opts.update(extra)
        return opts

    def _extract_info(self, url: str, opts: dict[str, Any]) -> dict[str, Any]:
        with yt_dlp.YoutubeDL(opts) as ydl:
            info = ydl.extract_info(url, download=False)
        if not isinstance(info, dict):
            raise ExtractionError("yt-dlp returned no metadata for the given URL.")
        return dict(info)

    async def _info(self, url: str, **extra: Any) -> dict[str, Any]:
        return await asyncio.to_thread(self._extract_info, url, self._build_opts(**extra))

    @staticmethod
    def _direct_url(info: dict[str, Any]) -> str | None:
        if info.get("url"):
            return str(info["url"])
        # Merged selections list the video stream first
        for fmt in info.get("requested_formats") or []:
            if fmt.get("url"):
                return str(fmt["url"])
        return None

    async def extract(self, source_url: str, output_format: str | None = None) -> ExtractionResult:
        """Resolve a webpage URL to a direct, playable video URL.

        YouTube links with an output format merge the best video and audio
        streams (requires ffmpeg); everything else takes the best single file.
        """
        if YOUTUBE_URL.search(source_url) and output_format:
            extra: dict[str, Any] = {"format": "bestvideo+bestaudio/best", "merge_output_format": output_format}
            if self.ffmpeg_location:
                extra["ffmpeg_location"] = self.ffmpeg_location
        else:
            extra = {"format": "best"}

        try:
            info = await self._info(source_url, **extra)
        except (yt_dlp.utils.YoutubeDLError, ExtractionError) as e:
            logger.error("yt-dlp error: %s", e)
            return ExtractionResult(error=clean_error_message(e))
        except Exception:
            logger.exception("Unexpected extraction failure for %s", source_url)
            return ExtractionResult(error=UNKNOWN_EXTRACTION_ERROR)

        video_url = self._direct_url(info)
        if not video_url:
            return ExtractionResult(error="Could not extract a valid video URL.")
        return ExtractionResult(video_url=video_url)

    async def list_formats(self, source_url: str) -> FormatListing:
        """MP4 formats that carry both audio and video, lowest resolution first."""
        try:
            info = await self._info(source_url)
        except (yt_dlp.utils.YoutubeDLError, ExtractionError) as e:
            logger.error("yt-dlp error (list formats): %s", e)
            return FormatListing(error=clean_error_message(e))
        except Exception:
            logger.exception("Unexpected failure listing formats for %s", source_url)
            return FormatListing(error=UNKNOWN_EXTRACTION_ERROR)

        formats: list[VideoFormat] = []
        for fmt in info.get("formats") or []:
            if not _has_audio_and_video(fmt) or fmt.get("ext") != "mp4":
                continue
            size = fmt.get("filesize_approx")
            formats.append(
                VideoFormat(
                    format_id=str(fmt.get("format_id", "")),
                    ext=fmt["ext"],
                    vcodec=fmt.get("vcodec", ""),
                    acodec=fmt.get("acodec", ""),
                    format_note=fmt.get("format_note") or fmt.get("resolution"),
                    resolution=fmt.get("resolution"),
                    height=fmt.get("height"),
                    filesize_approx=size,
                    filesize_approx_str=f"{size / 1024 / 1024:.2f} MB" if size else "N/A",
                )
            )
        formats.sort(key=lambda f: f.height or 0)
        return FormatListing(formats=formats)

    async def get_format_url(self, source_url: str, format_id: str) -> ExtractionResult:
        """Direct URL for one specific format id."""
        try:
            info = await self._info(source_url, format=format_id)
        except (yt_dlp.utils.YoutubeDLError, ExtractionError) as e:
            logger.error("yt-dlp error (get format url): %s", e)
            return ExtractionResult(error=clean_error_message(e))
        except Exception:
            logger.exception("Unexpected failure resolving format %s for %s", format_id, source_url)
            return ExtractionResult(error=UNKNOWN_EXTRACTION_ERROR)

        video_url = self._direct_url(info)
        if not video_url:
            return ExtractionResult(error="Could not extract a valid video URL for the selected format.")
        return ExtractionResult(video_url=video_url)

    async def get_download_url(self, url: str) -> str:
        """Largest single-file (audio+video) format URL.

        Raises:
            ExtractionError: If yt-dlp fails or no such format exists.
        """
        try:
            info = await self._info(url)
        except ExtractionError:
            raise
        except yt_dlp.utils.YoutubeDLError as e:
            raise ExtractionError(clean_error_message(e)) from e
        except Exception as e:
            logger.exception("Unexpected failure finding a download URL for %s", url)
            raise ExtractionError(UNKNOWN_EXTRACTION_ERROR) from e

        candidates = [f for f in info.get("formats") or [] if _has_audio_and_video(f) and f.get("url")]
        if not candidates:
            raise ExtractionError("Could not find a downloadable format for the given URL.")
        best = max(candidates, key=lambda f: f.get("filesize") or 0)
        return str(best["url"])
