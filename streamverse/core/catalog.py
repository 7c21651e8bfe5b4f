"""Catalog entries built from TMDB details, and their playback identity."""

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

from .sources import ContentIdentity, MediaKind
from .tmdb import TitleDetails, TitleType

ContentType = Literal["movie", "webseries", "drama"]


@dataclass
class ContentEntry:
    """A document for the "content" collection."""

    title: str
    description: str
    type: ContentType
    banner_image_url: str
    poster_image_url: str = ""
    imdb_rating: float = 0.0
    categories: list[str] = field(default_factory=lambda: list[str]())
    is_featured: bool = False
    tmdb_id: int | None = None
    embed_url: str = ""
    download_url: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def build_content_entry(tmdb_id: int, media_type: TitleType, details: TitleDetails) -> ContentEntry:
    """Shape TMDB details into a new, unfeatured catalog entry."""
    title = f"{details.title} ({details.release_year})" if details.release_year else details.title
    return ContentEntry(
        tmdb_id=tmdb_id,
        title=title,
        description=details.description,
        type="movie" if media_type == "movie" else "webseries",
        banner_image_url=details.banner_image_url,
        poster_image_url=details.poster_image_url or details.banner_image_url,
        imdb_rating=details.rating,
        categories=list(details.categories),
    )


def identity_from_entry(
    entry: ContentEntry,
    season: int | None = None,
    episode: int | None = None,
) -> ContentIdentity:
    """Playback identity for a catalog entry. Web series and dramas play as series."""
    if entry.tmdb_id is None:
        raise ValueError(f"Catalog entry {entry.title!r} has no TMDB id")
    kind = MediaKind.MOVIE if entry.type == "movie" else MediaKind.SERIES
    return ContentIdentity(tmdb_id=entry.tmdb_id, media_kind=kind, season=season, episode=episode)
