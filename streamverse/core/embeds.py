"""Helpers for admin-supplied embed links."""

import logging
import re
from urllib.parse import urlsplit

logger = logging.getLogger("streamverse.embeds")

IFRAME_SRC = re.compile(r'src="([^"]+)"')
DIRECT_VIDEO = re.compile(r"\.(mp4|webm|ogg)$", re.IGNORECASE)


def get_src_from_iframe(value: str) -> str:
    """Pull the src URL out of an <iframe> snippet; other strings pass through."""
    if not value:
        return ""
    if value.strip().startswith("<iframe"):
        m = IFRAME_SRC.search(value)
        return m.group(1) if m else ""
    return value


def create_embed_url(url: str) -> str:
    """Turn known share links into their embeddable form.

    DoodStream /d/<id> becomes /e/<id>; Mixdrop /f/<id> becomes
    mixdrop.co/e/<id>. Anything else is returned unchanged.
    """
    if not url:
        return ""
    if url.startswith("//"):
        url = "https:" + url

    try:
        parts = urlsplit(url)
    except ValueError as e:
        logger.warning("Invalid URL for embed conversion: %s (%s)", url, e)
        return url

    hostname = parts.hostname or ""
    path = parts.path

    if "dood" in hostname and path.startswith("/d/"):
        return f"https://{hostname}/e/{path[3:]}"
    if "mixdrop" in hostname and path.startswith("/f/"):
        return f"https://mixdrop.co/e/{path[3:]}"
    return url


def is_direct_video_link(url: str) -> bool:
    """True for links an HTML5 <video> element can play without an iframe."""
    return bool(DIRECT_VIDEO.search(url))
