"""Shared test fixtures for the test suite."""

from unittest.mock import AsyncMock

import httpx
import pytest

from streamverse.core.llm import LLMProvider
from streamverse.core.tmdb import TMDBClient


@pytest.fixture
def mock_http_client() -> AsyncMock:
    return AsyncMock(spec=httpx.AsyncClient)


@pytest.fixture
def mock_tmdb_client() -> AsyncMock:
    return AsyncMock(spec=TMDBClient)


@pytest.fixture
def mock_provider() -> AsyncMock:
    return AsyncMock(spec=LLMProvider)
