"""Shared test helpers for the test suite."""

from typing import Any
from unittest.mock import MagicMock

import httpx

from streamverse.core.llm import ToolCall
from streamverse.core.tmdb import SearchResult, TitleDetails


def make_mock_response(
    status_code: int = 200,
    json_data: dict[str, object] | None = None,
) -> MagicMock:
    """Create a mock httpx.Response."""
    response = MagicMock(spec=httpx.Response)
    response.status_code = status_code
    response.json.return_value = json_data or {}
    response.text = ""
    if status_code >= 400:
        response.raise_for_status.side_effect = httpx.HTTPStatusError(
            message=f"HTTP {status_code}",
            request=MagicMock(),
            response=response,
        )
    else:
        response.raise_for_status.return_value = None
    return response


def tool_response(name: str, arguments: dict[str, Any]) -> tuple[str, list[ToolCall]]:
    """What LLMProvider.generate returns when the model calls one tool."""
    return "", [ToolCall(id="tc1", name=name, arguments=arguments)]


def make_search_result(id: int = 603, title: str = "The Matrix", media_kind: str = "movie") -> SearchResult:
    return SearchResult(id=id, title=title, release_date="1999-03-30", poster_path="/p.jpg", media_kind=media_kind)


def make_details(**overrides: Any) -> TitleDetails:
    data: dict[str, Any] = {
        "tmdb_id": 603,
        "media_type": "movie",
        "title": "The Matrix",
        "description": "A hacker learns the truth about his reality.",
        "rating": 8.2,
        "categories": ["Action", "Science Fiction"],
        "banner_image_url": "https://image.tmdb.org/t/p/original/poster.jpg",
        "poster_image_url": "https://image.tmdb.org/t/p/original/backdrop.jpg",
        "release_year": 1999,
    }
    data.update(overrides)
    return TitleDetails(**data)
