"""TMDB (The Movie Database) API client."""

import logging
from dataclasses import dataclass, field
from typing import Any, Literal

import httpx

logger = logging.getLogger("streamverse.tmdb")

TMDB_BASE_URL = "https://api.themoviedb.org/3"
TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/original"
MAX_IMAGES_PER_KIND = 10

SearchType = Literal["movie", "tv", "multi"]
TitleType = Literal["movie", "tv"]


@dataclass
class SearchResult:
    """A single TMDB search hit."""

    id: int
    title: str
    release_date: str | None
    poster_path: str | None
    media_kind: str


@dataclass
class TitleDetails:
    """Catalog-ready details for a movie or TV show."""

    tmdb_id: int
    media_type: str
    title: str
    description: str
    rating: float
    categories: list[str]
    banner_image_url: str
    poster_image_url: str
    release_year: int | None = None


@dataclass
class TitleImage:
    """A poster or backdrop image."""

    file_path: str
    aspect_ratio: float
    type: Literal["poster", "backdrop"]


@dataclass
class TitleImages:
    posters: list[TitleImage] = field(default_factory=lambda: list[TitleImage]())
    backdrops: list[TitleImage] = field(default_factory=lambda: list[TitleImage]())

    def all(self) -> list[TitleImage]:
        return [*self.posters, *self.backdrops]


class TMDBError(Exception):
    """Raised when a TMDB API call fails."""


def _release_year(date: str | None) -> int | None:
    if date and len(date) >= 4 and date[:4].isdigit():
        return int(date[:4])
    return None


class TMDBClient:
    """Async client for the TMDB v3 API."""

    def __init__(
        self,
        api_key: str | None,
        http_client: httpx.AsyncClient | None = None,
        base_url: str = TMDB_BASE_URL,
        image_base_url: str = TMDB_IMAGE_BASE_URL,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.image_base_url = image_base_url.rstrip("/")
        self._http_client = http_client
        self._owns_client = http_client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient()
        return self._http_client

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        if not self.api_key:
            raise TMDBError("TMDB API key is not configured")

        client = self._get_client()
        query: dict[str, Any] = {"api_key": self.api_key, **(params or {})}
        try:
            response = await client.get(f"{self.base_url}{path}", params=query, timeout=10.0)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("TMDB HTTP error: %s %s", e.response.status_code, e.response.text)
            raise TMDBError(f"TMDB returned {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error("TMDB request failed: %s", e)
            raise TMDBError(f"TMDB request failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise TMDBError("TMDB returned an invalid JSON body") from e
        if not isinstance(data, dict):
            raise TMDBError("TMDB returned an unexpected payload")
        return data

    async def search(self, query: str, media_type: SearchType = "multi") -> list[SearchResult]:
        """Search movies and/or TV shows.

        Args:
            query: Free-text search string.
            media_type: "movie", "tv" or "multi".

        Returns:
            Results in the order TMDB ranked them.

        Raises:
            TMDBError: If the API call fails.
        """
        search_type = media_type if media_type in ("movie", "tv") else "multi"
        data = await self._get(f"/search/{search_type}", {"query": query})
        raw_results: list[dict[str, Any]] = data.get("results") or []

        return [
            SearchResult(
                id=item["id"],
                title=item.get("title") or item.get("name") or "",
                release_date=item.get("release_date") or item.get("first_air_date"),
                poster_path=item.get("poster_path"),
                media_kind=item.get("media_type") or search_type,
            )
            for item in raw_results
            if "id" in item
        ]

    async def get_details(self, tmdb_id: int, media_type: TitleType) -> TitleDetails:
        """Fetch full details (with credits and images) for one title."""
        data = await self._get(f"/{media_type}/{tmdb_id}", {"append_to_response": "credits,images"})

        banner = f"{self.image_base_url}{data['poster_path']}" if data.get("poster_path") else ""
        # Landscape backdrop for the hero/player, falling back to the portrait poster
        poster = f"{self.image_base_url}{data['backdrop_path']}" if data.get("backdrop_path") else banner

        vote_average = data.get("vote_average") or 0
        return TitleDetails(
            tmdb_id=tmdb_id,
            media_type=media_type,
            title=data.get("title") or data.get("name") or "",
            description=data.get("overview") or "",
            rating=round(float(vote_average), 1),
            categories=[g["name"] for g in data.get("genres") or [] if g.get("name")],
            banner_image_url=banner,
            poster_image_url=poster,
            release_year=_release_year(data.get("release_date") or data.get("first_air_date")),
        )

    async def get_images(self, tmdb_id: int, media_type: TitleType) -> TitleImages:
        """Fetch promotional posters and backdrops for one title."""
        data = await self._get(f"/{media_type}/{tmdb_id}/images")

        def _convert(raw: list[dict[str, Any]], kind: Literal["poster", "backdrop"]) -> list[TitleImage]:
            return [
                TitleImage(file_path=img["file_path"], aspect_ratio=img.get("aspect_ratio", 0.0), type=kind)
                for img in raw[:MAX_IMAGES_PER_KIND]
                if img.get("file_path")
            ]

        return TitleImages(
            posters=_convert(data.get("posters") or [], "poster"),
            backdrops=_convert(data.get("backdrops") or [], "backdrop"),
        )

    async def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
