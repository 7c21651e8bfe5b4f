"""Content discovery: free-text query -> TMDB search results.

discover_content() optionally runs the query through the model first to pull
out keywords, genre and media kind; without it a substring heuristic picks
movie vs. tv and the raw query is searched as-is.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import asdict, dataclass
from typing import Literal

from .flows import QueryUnderstanding, QueryUnderstandingError
from .tmdb import SearchResult, TMDBClient, TMDBError

logger = logging.getLogger("streamverse.discovery")

MediaHint = Literal["movie", "tv"]
QueryUnderstander = Callable[[str], Awaitable[QueryUnderstanding]]


@dataclass
class DiscoveryResult:
    """Result of a content search."""

    success: bool
    message: str
    query: str
    media_kind: str
    results: list[SearchResult]

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


def guess_media_kind(query: str, default: MediaHint = "movie") -> MediaHint:
    """Pick "tv" when the query mentions a series, else the caller's default."""
    return "tv" if "series" in query.lower() else default


async def discover_content(
    query: str,
    tmdb_client: TMDBClient,
    default_media_kind: MediaHint = "movie",
    understanding: QueryUnderstander | None = None,
) -> DiscoveryResult:
    """Search TMDB for a free-text query.

    Args:
        query: What the user typed.
        tmdb_client: Configured TMDBClient instance.
        default_media_kind: Kind to search when nothing in the query decides it.
        understanding: Optional model-backed query parser. None disables AI.

    Returns:
        DiscoveryResult with results in TMDB's order. Failures are reported
        through success/message with an empty result list.
    """
    if understanding is not None:
        try:
            parsed = await understanding(query)
        except QueryUnderstandingError as e:
            return DiscoveryResult(
                success=False,
                message=f"The AI assistant failed to process your request. {e}",
                query=query,
                media_kind=default_media_kind,
                results=[],
            )
        search_query = parsed.search_query()
        media_kind: str = default_media_kind if parsed.media_kind == "any" else parsed.media_kind
    else:
        search_query = query
        media_kind = guess_media_kind(query, default_media_kind)

    logger.info("Searching TMDB: %r type=%s", search_query, media_kind)
    try:
        results = await tmdb_client.search(search_query, media_kind)  # type: ignore[arg-type]
    except TMDBError as e:
        return DiscoveryResult(
            success=False,
            message=f"Search failed: {e}",
            query=search_query,
            media_kind=media_kind,
            results=[],
        )

    if not results:
        return DiscoveryResult(
            success=False,
            message=f"No results found for: {search_query}",
            query=search_query,
            media_kind=media_kind,
            results=[],
        )

    return DiscoveryResult(
        success=True,
        message=f"Found {len(results)} result(s)",
        query=search_query,
        media_kind=media_kind,
        results=results,
    )
