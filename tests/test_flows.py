"""Tests for the generative flows."""

from unittest.mock import AsyncMock

import pytest

from streamverse.core.flows import (
    FALLBACK_SUGGESTIONS,
    HERO_SUMMARY_TOOL,
    SEARCH_CATALOG_TOOL,
    SOCIAL_POST_TOOL,
    SUGGEST_TITLES_TOOL,
    QueryUnderstandingError,
    TitleSuggestion,
    build_social_kit,
    camel_case,
    generate_hero_summary,
    generate_social_post,
    pascal_case,
    resolve_suggestions,
    suggest_titles,
    template_social_post,
    understand_query,
)
from streamverse.core.llm import GenerationConfig
from streamverse.core.tmdb import TitleImage, TitleImages, TMDBError
from tests.helpers import make_details, make_search_result, tool_response


class TestCaseHelpers:
    def test_camel_case(self) -> None:
        assert camel_case("The Dark Knight") == "theDarkKnight"
        assert camel_case("Spider-Man: No Way Home") == "spiderManNoWayHome"
        assert camel_case("!!!") == ""
        assert camel_case("StrangerThings") == "strangerThings"
        assert camel_case("NowStreaming") == "nowStreaming"
        assert camel_case("HTML5 Tips") == "html5Tips"

    def test_pascal_case(self) -> None:
        assert pascal_case("Science Fiction") == "ScienceFiction"
        assert pascal_case("action") == "Action"


class TestUnderstandQuery:
    @pytest.mark.asyncio
    async def test_forces_search_tool(self, mock_provider: AsyncMock) -> None:
        mock_provider.generate.return_value = tool_response(
            "search_catalog", {"keywords": "Loki", "media_kind": "tv"}
        )

        result = await understand_query(mock_provider, "marvel show about loki")

        assert result.keywords == "Loki"
        assert result.media_kind == "tv"
        assert result.genre is None
        config: GenerationConfig = mock_provider.generate.call_args.args[1]
        assert config.tool_choice == SEARCH_CATALOG_TOOL.name
        assert config.tools == [SEARCH_CATALOG_TOOL]

    @pytest.mark.asyncio
    async def test_invalid_kind_becomes_any(self, mock_provider: AsyncMock) -> None:
        mock_provider.generate.return_value = tool_response(
            "search_catalog", {"keywords": "matrix", "media_kind": "anime", "genre": "action"}
        )

        result = await understand_query(mock_provider, "matrix")

        assert result.media_kind == "any"
        assert result.search_query() == "matrix action"

    @pytest.mark.asyncio
    async def test_missing_tool_call_raises(self, mock_provider: AsyncMock) -> None:
        mock_provider.generate.return_value = ("I can't help with that", [])

        with pytest.raises(QueryUnderstandingError):
            await understand_query(mock_provider, "anything")

    @pytest.mark.asyncio
    async def test_empty_keywords_raise(self, mock_provider: AsyncMock) -> None:
        mock_provider.generate.return_value = tool_response("search_catalog", {"keywords": " ", "media_kind": "movie"})

        with pytest.raises(QueryUnderstandingError):
            await understand_query(mock_provider, "anything")

    @pytest.mark.asyncio
    async def test_provider_error_is_wrapped(self, mock_provider: AsyncMock) -> None:
        mock_provider.generate.side_effect = RuntimeError("rate limited")

        with pytest.raises(QueryUnderstandingError, match="rate limited"):
            await understand_query(mock_provider, "anything")


class TestSuggestions:
    @pytest.mark.asyncio
    async def test_no_provider_uses_static_list(self) -> None:
        assert await suggest_titles(None) == FALLBACK_SUGGESTIONS

    @pytest.mark.asyncio
    async def test_model_suggestions(self, mock_provider: AsyncMock) -> None:
        mock_provider.generate.return_value = tool_response(
            SUGGEST_TITLES_TOOL.name,
            {"suggestions": [{"title": "Dune", "type": "movie"}, {"title": "Bad", "type": "podcast"}]},
        )

        result = await suggest_titles(mock_provider)

        assert result == [TitleSuggestion(title="Dune", media_kind="movie")]

    @pytest.mark.asyncio
    async def test_model_failure_uses_static_list(self, mock_provider: AsyncMock) -> None:
        mock_provider.generate.side_effect = RuntimeError("boom")

        assert await suggest_titles(mock_provider) == FALLBACK_SUGGESTIONS

    @pytest.mark.asyncio
    async def test_resolve_keeps_first_hits_and_drops_misses(self, mock_tmdb_client: AsyncMock) -> None:
        hits = {
            "Inception": [make_search_result(27205, "Inception"), make_search_result(1, "Inception 2")],
            "Nothing": [],
        }

        async def _search(title: str, media_type: str):
            if title == "Broken":
                raise TMDBError("TMDB returned 500")
            return hits[title]

        mock_tmdb_client.search.side_effect = _search
        suggestions = [
            TitleSuggestion("Inception", "movie"),
            TitleSuggestion("Nothing", "tv"),
            TitleSuggestion("Broken", "movie"),
        ]

        result = await resolve_suggestions(suggestions, mock_tmdb_client)

        assert [r.id for r in result] == [27205]


class TestHeroSummary:
    @pytest.mark.asyncio
    async def test_model_summary(self, mock_provider: AsyncMock) -> None:
        mock_provider.generate.return_value = tool_response(
            HERO_SUMMARY_TOOL.name, {"cinematic_description": "Reality is a lie."}
        )

        assert await generate_hero_summary(mock_provider, "The Matrix", "long text") == "Reality is a lie."

    @pytest.mark.asyncio
    async def test_falls_back_to_description(self, mock_provider: AsyncMock) -> None:
        mock_provider.generate.side_effect = RuntimeError("boom")

        assert await generate_hero_summary(mock_provider, "The Matrix", "long text") == "long text"
        assert await generate_hero_summary(None, "The Matrix", "long text") == "long text"


class TestSocialPost:
    def test_template_post(self) -> None:
        post = template_social_post("The Dark Knight", "x" * 200, ["Action", "Crime Drama", "Thriller"])

        assert post.caption.startswith('Now streaming: "The Dark Knight"!')
        assert post.caption.endswith("x" * 150 + "...")
        assert post.hashtags == ["#theDarkKnight", "#NowStreaming", "#MustWatch", "#Action", "#CrimeDrama"]

    @pytest.mark.asyncio
    async def test_model_post_hashtags_are_camel_cased(self, mock_provider: AsyncMock) -> None:
        mock_provider.generate.return_value = tool_response(
            SOCIAL_POST_TOOL.name, {"caption": "Watch now!", "hashtags": ["binge worthy", "sci fi"]}
        )

        post = await generate_social_post(mock_provider, "The Matrix", "desc", ["Action"])

        assert post.caption == "Watch now!"
        assert post.hashtags == ["#bingeWorthy", "#sciFi"]

    @pytest.mark.asyncio
    async def test_model_post_keeps_word_boundaries_in_cased_tags(self, mock_provider: AsyncMock) -> None:
        mock_provider.generate.return_value = tool_response(
            SOCIAL_POST_TOOL.name, {"caption": "Back to Hawkins", "hashtags": ["StrangerThings", "#NowStreaming"]}
        )

        post = await generate_social_post(mock_provider, "Stranger Things", "desc", ["Drama"])

        assert post.hashtags == ["#strangerThings", "#nowStreaming"]

    @pytest.mark.asyncio
    async def test_model_failure_uses_template(self, mock_provider: AsyncMock) -> None:
        mock_provider.generate.return_value = ("", [])

        post = await generate_social_post(mock_provider, "The Matrix", "desc", [])

        assert post == template_social_post("The Matrix", "desc", [])


class TestSocialKit:
    @pytest.mark.asyncio
    async def test_builds_kit(self, mock_tmdb_client: AsyncMock) -> None:
        details = make_details()
        images = TitleImages(posters=[TitleImage(file_path="/p.jpg", aspect_ratio=0.667, type="poster")])
        mock_tmdb_client.get_details.return_value = details
        mock_tmdb_client.get_images.return_value = images

        kit = await build_social_kit(None, mock_tmdb_client, 603, "movie")

        assert kit.details is details
        assert kit.images is images
        assert kit.post.hashtags[0] == "#theMatrix"

    @pytest.mark.asyncio
    async def test_image_failure_gives_empty_images(self, mock_tmdb_client: AsyncMock) -> None:
        mock_tmdb_client.get_details.return_value = make_details()
        mock_tmdb_client.get_images.side_effect = TMDBError("TMDB returned 404")

        kit = await build_social_kit(None, mock_tmdb_client, 603, "movie")

        assert kit.images.all() == []

    @pytest.mark.asyncio
    async def test_details_failure_raises(self, mock_tmdb_client: AsyncMock) -> None:
        mock_tmdb_client.get_details.side_effect = TMDBError("TMDB returned 404")

        with pytest.raises(TMDBError):
            await build_social_kit(None, mock_tmdb_client, 603, "movie")
