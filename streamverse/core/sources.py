"""Embed provider registry and playback URL generation.

Templates use literal placeholder tokens ({tmdbId}, {season}, {episode}).
The registry order is a hand-curated reliability ranking and is never
re-sorted at runtime.
"""

import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger("streamverse.sources")

TMDB_ID_TOKEN = "{tmdbId}"
SEASON_TOKEN = "{season}"
EPISODE_TOKEN = "{episode}"


class MediaKind(str, Enum):
    """Kind of content a playback request is for."""

    MOVIE = "movie"
    SERIES = "series"


@dataclass(frozen=True)
class ContentIdentity:
    """What to play: a TMDB id plus, for series, the season and episode."""

    tmdb_id: int
    media_kind: MediaKind
    season: int | None = None
    episode: int | None = None

    def __post_init__(self) -> None:
        if isinstance(self.tmdb_id, bool) or not isinstance(self.tmdb_id, int) or self.tmdb_id <= 0:
            raise ValueError(f"tmdb_id must be a positive integer, got {self.tmdb_id!r}")
        object.__setattr__(self, "media_kind", MediaKind(self.media_kind))
        if self.media_kind is MediaKind.SERIES:
            if self.season is None:
                object.__setattr__(self, "season", 1)
            if self.episode is None:
                object.__setattr__(self, "episode", 1)
        else:
            object.__setattr__(self, "season", None)
            object.__setattr__(self, "episode", None)


@dataclass(frozen=True)
class SourceTemplate:
    """A third-party embed provider and its URL patterns."""

    key: str
    provider_name: str
    movie_url_pattern: str | None = None
    series_url_pattern: str | None = None

    def pattern_for(self, media_kind: MediaKind) -> str | None:
        if media_kind is MediaKind.MOVIE:
            return self.movie_url_pattern
        return self.series_url_pattern


@dataclass(frozen=True)
class ResolvedSource:
    """A concrete embed URL for one provider."""

    provider_name: str
    url: str


# --- Provider Definitions ---

VIDSRC_TO = SourceTemplate(
    key="vidsrc_to",
    provider_name="VidSrc.to",
    movie_url_pattern="https://vidsrc.to/embed/movie/{tmdbId}",
    series_url_pattern="https://vidsrc.to/embed/tv/{tmdbId}/{season}-{episode}",
)

VIDSRC_PRO = SourceTemplate(
    key="vidsrc_pro",
    provider_name="VidSrc.pro",
    movie_url_pattern="https://vidsrc.pro/embed/movie/{tmdbId}",
    series_url_pattern="https://vidsrc.pro/embed/tv/{tmdbId}/{season}-{episode}",
)

SUPEREMBED = SourceTemplate(
    key="superembed",
    provider_name="SuperEmbed",
    movie_url_pattern="https://multiembed.mov/directstream.php?video_id={tmdbId}&tmdb=1",
    series_url_pattern="https://multiembed.mov/directstream.php?video_id={tmdbId}&tmdb=1&s={season}&e={episode}",
)

VIDKING = SourceTemplate(
    key="vidking",
    provider_name="Vidking",
    movie_url_pattern="https://www.vidking.net/embed/movie/{tmdbId}",
    series_url_pattern="https://www.vidking.net/embed/tv/{tmdbId}/{season}/{episode}",
)

# --- Registry and config-driven priority ---

TEMPLATE_REGISTRY: dict[str, SourceTemplate] = {
    tpl.key: tpl for tpl in [VIDSRC_TO, VIDSRC_PRO, SUPEREMBED, VIDKING]
}

_DEFAULT_PRIORITY: list[SourceTemplate] = [
    VIDSRC_TO,
    VIDSRC_PRO,
    SUPEREMBED,
    VIDKING,
]


def get_active_templates() -> list[SourceTemplate]:
    """Return embed providers in the priority order defined by config.

    Providers not listed in config are excluded; an empty list in config
    means no providers. Falls back to the built-in order if config is
    unavailable.
    """
    try:
        from .config import settings

        priority_keys = settings.sources
    except Exception:
        return list(_DEFAULT_PRIORITY)

    result: list[SourceTemplate] = []
    seen: set[str] = set()
    for key in priority_keys:
        if key in seen:
            logger.warning("Duplicate embed provider in config ignored: %s", key)
            continue
        seen.add(key)
        tpl = TEMPLATE_REGISTRY.get(key)
        if tpl is not None:
            result.append(tpl)
        else:
            logger.warning("Unknown embed provider in config: %s", key)
    return result


def fill_template(pattern: str, identity: ContentIdentity) -> str:
    """Substitute identity values into a URL pattern."""
    url = pattern.replace(TMDB_ID_TOKEN, str(identity.tmdb_id))
    if identity.season is not None:
        url = url.replace(SEASON_TOKEN, str(identity.season))
    if identity.episode is not None:
        url = url.replace(EPISODE_TOKEN, str(identity.episode))
    return url


def generate_sources(
    identity: ContentIdentity,
    templates: list[SourceTemplate] | None = None,
) -> list[ResolvedSource]:
    """Build the ordered candidate list for a piece of content.

    Templates without a pattern for the identity's media kind are skipped.
    A URL already in the list is not repeated.
    No network calls are made.
    """
    registry = get_active_templates() if templates is None else templates
    sources: list[ResolvedSource] = []
    seen_urls: set[str] = set()
    for tpl in registry:
        pattern = tpl.pattern_for(identity.media_kind)
        if not pattern:
            continue
        url = fill_template(pattern, identity)
        if url in seen_urls:
            continue
        seen_urls.add(url)
        sources.append(ResolvedSource(provider_name=tpl.provider_name, url=url))
    logger.debug("Resolved %d source(s) for %s %s", len(sources), identity.media_kind.value, identity.tmdb_id)
    return sources
