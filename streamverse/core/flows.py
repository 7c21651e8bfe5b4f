"""Generative flows: query understanding, suggestions, and promo copy.

Each flow forces the model to call a single tool and reads the tool-call
arguments as structured output. Flows that feed the UI directly fall back
to static content when the model is unavailable.
"""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Literal

from .llm import GenerationConfig, LLMProvider, Message, MessageRole, Tool
from .tmdb import SearchResult, TitleDetails, TitleImages, TitleType, TMDBClient, TMDBError

logger = logging.getLogger("streamverse.flows")


class FlowError(Exception):
    """Raised when the model does not return the forced tool call."""


class QueryUnderstandingError(FlowError):
    """Raised when the model cannot turn a query into structured search terms."""


@dataclass
class QueryUnderstanding:
    """Structured search terms extracted from a free-text query."""

    keywords: str
    genre: str | None = None
    media_kind: Literal["movie", "tv", "any"] = "any"

    def search_query(self) -> str:
        return f"{self.keywords} {self.genre}" if self.genre else self.keywords


@dataclass
class TitleSuggestion:
    title: str
    media_kind: Literal["movie", "tv"]


@dataclass
class SocialPost:
    caption: str
    hashtags: list[str]


@dataclass
class SocialKit:
    """Everything needed to promote one title on social media."""

    details: TitleDetails
    post: SocialPost
    images: TitleImages = field(default_factory=TitleImages)


FALLBACK_SUGGESTIONS: list[TitleSuggestion] = [
    TitleSuggestion(title="Inception", media_kind="movie"),
    TitleSuggestion(title="Breaking Bad", media_kind="tv"),
    TitleSuggestion(title="The Dark Knight", media_kind="movie"),
    TitleSuggestion(title="Stranger Things", media_kind="tv"),
    TitleSuggestion(title="Parasite", media_kind="movie"),
]

# --- Tool definitions co-located with the flows that force them ---

SEARCH_CATALOG_TOOL = Tool(
    name="search_catalog",
    description=(
        "Search The Movie Database. Use 'movie' for films, 'tv' for web series, shows "
        "or dramas, and 'any' when the request is ambiguous."
    ),
    input_schema={
        "type": "object",
        "properties": {
            "keywords": {
                "type": "string",
                "description": "Title words, people, years or themes to search for. Keep it short.",
            },
            "genre": {"type": "string", "description": "A single genre if the user asked for one"},
            "media_kind": {"type": "string", "enum": ["movie", "tv", "any"]},
        },
        "required": ["keywords", "media_kind"],
    },
)

SUGGEST_TITLES_TOOL = Tool(
    name="suggest_titles",
    description="Return popular, critically acclaimed movies and web series.",
    input_schema={
        "type": "object",
        "properties": {
            "suggestions": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "title": {"type": "string"},
                        "type": {"type": "string", "enum": ["movie", "tv"]},
                    },
                    "required": ["title", "type"],
                },
            }
        },
        "required": ["suggestions"],
    },
)

HERO_SUMMARY_TOOL = Tool(
    name="hero_summary",
    description="Return a cinematic one or two sentence summary for a hero banner.",
    input_schema={
        "type": "object",
        "properties": {"cinematic_description": {"type": "string"}},
        "required": ["cinematic_description"],
    },
)

SOCIAL_POST_TOOL = Tool(
    name="social_post",
    description="Return a social media caption and 3 to 5 hashtags without the # symbol.",
    input_schema={
        "type": "object",
        "properties": {
            "caption": {"type": "string"},
            "hashtags": {"type": "array", "items": {"type": "string"}},
        },
        "required": ["caption", "hashtags"],
    },
)

QUERY_PROMPT = (
    "You are an expert at parsing user requests to find movies and TV shows. "
    "Translate the user's query into the best possible search for the TMDB API.\n"
    "- If the query mentions 'movie', 'film', or a specific movie title, use 'movie'.\n"
    "- If the query mentions 'series', 'drama', 'show', or a TV show title, use 'tv'.\n"
    "- If it's ambiguous, use 'any'.\n"
    "- Extract keywords, years, and genres to make the search as accurate as possible."
)

SUGGESTIONS_PROMPT = (
    "You are a movie and TV show recommendation engine. Suggest 5 popular and critically "
    "acclaimed movies and web series with a mix of genres and release years. Provide the "
    "title and the correct type ('movie' or 'tv')."
)

HERO_PROMPT = (
    "You are a professional movie trailer editor and copywriter. Write a short, punchy, "
    "cinematic summary for a streaming site's hero banner. One or two sentences at most."
)

SOCIAL_PROMPT = (
    "You are a social media manager for a streaming service called StreamVerse. Write an "
    "exciting post that makes people want to watch the content."
)


_WORD = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|[0-9]+")


def _words(text: str) -> list[str]:
    # Splits on case and digit boundaries too: "StrangerThings2" -> Stranger, Things, 2
    return _WORD.findall(text)


def camel_case(text: str) -> str:
    """'The Dark Knight' -> 'theDarkKnight', 'StrangerThings' -> 'strangerThings'."""
    words = _words(text)
    if not words:
        return ""
    return words[0].lower() + "".join(w.capitalize() for w in words[1:])


def pascal_case(text: str) -> str:
    """'science fiction' -> 'ScienceFiction'."""
    return "".join(w[:1].upper() + w[1:] for w in _words(text))


async def _call_tool(provider: LLMProvider, system_prompt: str, user_prompt: str, tool: Tool) -> dict[str, Any]:
    config = GenerationConfig(system_prompt=system_prompt, tools=[tool], tool_choice=tool.name, temperature=0.2)
    messages = [
        Message(role=MessageRole.SYSTEM, content=system_prompt),
        Message(role=MessageRole.USER, content=user_prompt),
    ]
    _, tool_calls = await provider.generate(messages, config)
    for tc in tool_calls:
        if tc.name == tool.name:
            return tc.arguments
    raise FlowError(f"Model did not call {tool.name}")


async def understand_query(provider: LLMProvider, query: str) -> QueryUnderstanding:
    """Extract keywords, genre and media kind from a natural-language query.

    Raises:
        QueryUnderstandingError: If the model call fails or returns no usable structure.
    """
    try:
        args = await _call_tool(provider, QUERY_PROMPT, f'User Query: "{query}"', SEARCH_CATALOG_TOOL)
    except Exception as e:
        logger.error("Query understanding failed: %s", e)
        raise QueryUnderstandingError(f"AI query understanding failed: {e}") from e

    keywords = str(args.get("keywords") or "").strip()
    if not keywords:
        raise QueryUnderstandingError("Model returned no keywords")
    media_kind = args.get("media_kind")
    if media_kind not in ("movie", "tv", "any"):
        media_kind = "any"
    genre = str(args.get("genre") or "").strip() or None

    logger.info("Understood %r as keywords=%r genre=%r kind=%s", query, keywords, genre, media_kind)
    return QueryUnderstanding(keywords=keywords, genre=genre, media_kind=media_kind)


async def suggest_titles(provider: LLMProvider | None) -> list[TitleSuggestion]:
    """Ask the model for titles to feature; falls back to a static list."""
    if provider is None:
        return list(FALLBACK_SUGGESTIONS)
    try:
        args = await _call_tool(provider, SUGGESTIONS_PROMPT, "Suggest 5 titles.", SUGGEST_TITLES_TOOL)
        suggestions = [
            TitleSuggestion(title=str(item["title"]), media_kind=item["type"])
            for item in args.get("suggestions") or []
            if item.get("title") and item.get("type") in ("movie", "tv")
        ]
    except Exception as e:
        logger.warning("AI suggestion generation failed, falling back to a static list: %s", e)
        return list(FALLBACK_SUGGESTIONS)
    return suggestions or list(FALLBACK_SUGGESTIONS)


async def resolve_suggestions(suggestions: list[TitleSuggestion], tmdb_client: TMDBClient) -> list[SearchResult]:
    """Look every suggestion up on TMDB concurrently, keeping the top hit of each."""

    async def _first_hit(suggestion: TitleSuggestion) -> SearchResult | None:
        try:
            results = await tmdb_client.search(suggestion.title, suggestion.media_kind)
        except TMDBError as e:
            logger.warning("Lookup failed for suggestion %r: %s", suggestion.title, e)
            return None
        return results[0] if results else None

    hits = await asyncio.gather(*(_first_hit(s) for s in suggestions))
    return [hit for hit in hits if hit is not None]


async def generate_hero_summary(provider: LLMProvider | None, title: str, description: str) -> str:
    """Short cinematic summary for a hero banner; the original description on failure."""
    if provider is None:
        return description
    try:
        args = await _call_tool(
            provider,
            HERO_PROMPT,
            f"Movie Title: {title}\nOriginal Description: {description}",
            HERO_SUMMARY_TOOL,
        )
    except Exception as e:
        logger.warning("Hero summary generation failed for %r: %s", title, e)
        return description
    return str(args.get("cinematic_description") or description)


def template_social_post(title: str, description: str, categories: list[str]) -> SocialPost:
    caption = f'Now streaming: "{title}"! Dive into the action. \U0001f37f✨\n\n{description[:150]}...'
    hashtags = [
        f"#{camel_case(title)}",
        "#NowStreaming",
        "#MustWatch",
        *(f"#{pascal_case(cat)}" for cat in categories[:2]),
    ]
    return SocialPost(caption=caption, hashtags=hashtags)


async def generate_social_post(
    provider: LLMProvider | None,
    title: str,
    description: str,
    categories: list[str],
) -> SocialPost:
    """Promotional caption and hashtags; a template post on failure."""
    if provider is None:
        return template_social_post(title, description, categories)
    try:
        args = await _call_tool(
            provider,
            SOCIAL_PROMPT,
            f"Title: {title}\nDescription: {description}\nCategories: {', '.join(categories)}",
            SOCIAL_POST_TOOL,
        )
        caption = str(args["caption"])
        hashtags = [f"#{camel_case(str(tag))}" for tag in args.get("hashtags") or []]
    except Exception as e:
        logger.warning("AI generation for social post failed, falling back to template: %s", e)
        return template_social_post(title, description, categories)
    return SocialPost(caption=caption, hashtags=hashtags)


async def build_social_kit(
    provider: LLMProvider | None,
    tmdb_client: TMDBClient,
    tmdb_id: int,
    media_type: TitleType,
) -> SocialKit:
    """Fetch details, then fetch images and write the post concurrently.

    Raises:
        TMDBError: If the title details cannot be fetched.
    """
    details = await tmdb_client.get_details(tmdb_id, media_type)

    async def _images() -> TitleImages:
        try:
            return await tmdb_client.get_images(tmdb_id, media_type)
        except TMDBError as e:
            logger.warning("Image lookup failed for %s %s: %s", media_type, tmdb_id, e)
            return TitleImages()

    images, post = await asyncio.gather(
        _images(),
        generate_social_post(provider, details.title, details.description, details.categories),
    )
    return SocialKit(details=details, post=post, images=images)
