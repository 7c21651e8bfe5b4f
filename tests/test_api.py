"""Tests for the REST endpoints."""

from collections.abc import Iterator
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

from streamverse.api.deps import get_extractor, get_llm_provider, get_tmdb_client
from streamverse.core.config import DEFAULT_SOURCES
from streamverse.core.extraction import ExtractionError, ExtractionResult, FormatListing, VideoExtractor, VideoFormat
from streamverse.core.playback import InMemoryPlaybackStore
from streamverse.core.tmdb import TitleImages, TMDBClient, TMDBError
from tests.helpers import make_details, make_search_result


@pytest.fixture
def tmdb() -> AsyncMock:
    return AsyncMock(spec=TMDBClient)


@pytest.fixture
def extractor() -> AsyncMock:
    return AsyncMock(spec=VideoExtractor)


@pytest.fixture
def client(tmdb: AsyncMock, extractor: AsyncMock) -> Iterator[TestClient]:
    from main import app

    app.state.http_client = httpx.AsyncClient()
    app.state.playback_store = InMemoryPlaybackStore(max_sessions=10, ttl_seconds=3600)
    app.dependency_overrides[get_tmdb_client] = lambda: tmdb
    app.dependency_overrides[get_llm_provider] = lambda: None
    app.dependency_overrides[get_extractor] = lambda: extractor
    with patch("streamverse.core.config.settings.sources", list(DEFAULT_SOURCES)):
        yield TestClient(app)
    app.dependency_overrides.clear()


class TestSources:
    def test_movie_sources(self, client: TestClient) -> None:
        response = client.get("/sources/movie/603")
        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 4
        assert data["identity"] == {"tmdb_id": 603, "media_kind": "movie", "season": None, "episode": None}
        assert data["sources"][0] == {"provider_name": "VidSrc.to", "url": "https://vidsrc.to/embed/movie/603"}

    def test_series_defaults(self, client: TestClient) -> None:
        data = client.get("/sources/series/1399").json()
        assert data["identity"]["season"] == 1
        assert data["sources"][3]["url"] == "https://www.vidking.net/embed/tv/1399/1/1"

    def test_series_with_episode(self, client: TestClient) -> None:
        data = client.get("/sources/series/1399", params={"season": 2, "episode": 5}).json()
        assert data["sources"][0]["url"] == "https://vidsrc.to/embed/tv/1399/2-5"

    def test_invalid_id_is_422(self, client: TestClient) -> None:
        assert client.get("/sources/movie/0").status_code == 422

    def test_unknown_kind_is_422(self, client: TestClient) -> None:
        assert client.get("/sources/anime/603").status_code == 422


class TestSearch:
    def test_heuristic_search(self, client: TestClient, tmdb: AsyncMock) -> None:
        tmdb.search.return_value = [make_search_result(84958, "Loki", "tv")]

        response = client.get("/search", params={"q": "Loki series"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["media_kind"] == "tv"
        assert data["results"][0]["id"] == 84958
        tmdb.search.assert_awaited_once_with("Loki series", "tv")

    def test_ai_search_uses_provider(self, client: TestClient, tmdb: AsyncMock) -> None:
        from main import app
        from tests.helpers import tool_response

        provider = AsyncMock()
        provider.generate.return_value = tool_response("search_catalog", {"keywords": "Loki", "media_kind": "tv"})
        app.dependency_overrides[get_llm_provider] = lambda: provider
        tmdb.search.return_value = [make_search_result(84958, "Loki", "tv")]

        data = client.get("/search", params={"q": "the marvel show with loki"}).json()

        assert data["query"] == "Loki"
        tmdb.search.assert_awaited_once_with("Loki", "tv")

    def test_ai_disabled_by_param(self, client: TestClient, tmdb: AsyncMock) -> None:
        from main import app

        provider = AsyncMock()
        app.dependency_overrides[get_llm_provider] = lambda: provider
        tmdb.search.return_value = []

        data = client.get("/search", params={"q": "matrix", "ai": "false"}).json()

        provider.generate.assert_not_awaited()
        assert data["success"] is False

    def test_empty_query_is_422(self, client: TestClient) -> None:
        assert client.get("/search", params={"q": "  "}).status_code == 422

    def test_missing_tmdb_key_is_503(self) -> None:
        from main import app

        app.state.http_client = httpx.AsyncClient()
        with patch("streamverse.api.deps.settings.tmdb.api_key", None):
            response = TestClient(app).get("/search", params={"q": "matrix"})
        assert response.status_code == 503


class TestTitles:
    def test_details_with_hero_summary(self, client: TestClient, tmdb: AsyncMock) -> None:
        tmdb.get_details.return_value = make_details()

        data = client.get("/titles/movie/603").json()

        assert data["title"] == "The Matrix"
        # No provider configured, so the description is reused
        assert data["hero_summary"] == data["description"]

    def test_tmdb_failure_is_502(self, client: TestClient, tmdb: AsyncMock) -> None:
        tmdb.get_details.side_effect = TMDBError("TMDB returned 404")
        assert client.get("/titles/movie/1").status_code == 502

    def test_suggestions_fall_back_to_static_list(self, client: TestClient, tmdb: AsyncMock) -> None:
        tmdb.search.return_value = [make_search_result()]

        data = client.get("/suggestions").json()

        assert [s["title"] for s in data["suggestions"]][:2] == ["Inception", "Breaking Bad"]
        assert len(data["results"]) == 5


class TestCatalogAndSocial:
    def test_create_entry_normalizes_embed(self, client: TestClient, tmdb: AsyncMock) -> None:
        tmdb.get_details.return_value = make_details(title="Loki", release_year=2021)

        response = client.post(
            "/catalog/entries",
            json={"tmdb_id": 84958, "media_type": "tv", "embed_url": '<iframe src="https://dood.watch/d/abc"></iframe>'},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["entry"]["title"] == "Loki (2021)"
        assert data["entry"]["type"] == "webseries"
        assert data["entry"]["embed_url"] == "https://dood.watch/e/abc"
        assert data["sources"][0]["url"] == "https://vidsrc.to/embed/tv/84958/1-1"

    def test_social_kit_template(self, client: TestClient, tmdb: AsyncMock) -> None:
        tmdb.get_details.return_value = make_details()
        tmdb.get_images.return_value = TitleImages()

        data = client.post("/social", json={"tmdb_id": 603, "media_type": "movie"}).json()

        assert data["post"]["hashtags"][:3] == ["#theMatrix", "#NowStreaming", "#MustWatch"]
        assert data["details"]["tmdb_id"] == 603

    def test_normalize_embed(self, client: TestClient) -> None:
        data = client.post("/embeds/normalize", json={"value": "//cdn.example/movie.mp4"}).json()
        assert data == {"url": "https://cdn.example/movie.mp4", "player": "video"}

    def test_normalize_embed_empty_is_422(self, client: TestClient) -> None:
        assert client.post("/embeds/normalize", json={"value": "<iframe></iframe>"}).status_code == 422


class TestExtraction:
    def test_extract(self, client: TestClient, extractor: AsyncMock) -> None:
        extractor.extract.return_value = ExtractionResult(video_url="https://cdn/v.mp4")

        data = client.post("/extract", json={"source_url": "https://youtu.be/abc", "format": "mp4"}).json()

        assert data == {"video_url": "https://cdn/v.mp4", "error": None}
        extractor.extract.assert_awaited_once_with("https://youtu.be/abc", "mp4")

    def test_formats(self, client: TestClient, extractor: AsyncMock) -> None:
        extractor.list_formats.return_value = FormatListing(
            formats=[VideoFormat(format_id="18", ext="mp4", vcodec="avc1", acodec="mp4a", height=360)]
        )

        data = client.get("/extract/formats", params={"url": "https://youtu.be/abc"}).json()

        assert data["formats"][0]["format_id"] == "18"
        assert data["error"] is None

    def test_format_url(self, client: TestClient, extractor: AsyncMock) -> None:
        extractor.get_format_url.return_value = ExtractionResult(error="Video unavailable")

        data = client.post("/extract/format-url", json={"source_url": "https://youtu.be/abc", "format_id": "18"}).json()

        assert data == {"video_url": None, "error": "Video unavailable"}

    def test_download_url_failure_is_502(self, client: TestClient, extractor: AsyncMock) -> None:
        extractor.get_download_url.side_effect = ExtractionError("no formats")

        response = client.post("/extract/download-url", json={"url": "https://example.com/v"})

        assert response.status_code == 502
        assert response.json()["detail"] == "no formats"
