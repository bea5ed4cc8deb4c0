"""Shared test fixtures and configuration."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest

from wikisift.config.settings import Settings
from wikisift.models.source import CustomApiSource, FieldMapping, SearchSource

Handler = Callable[[str, dict[str, Any]], httpx.Response]


@pytest.fixture
def json_response() -> Callable[..., httpx.Response]:
    """Factory for real ``httpx.Response`` objects carrying JSON (or raw text)."""

    def _make(
        payload: Any = None,
        status_code: int = 200,
        url: str = "https://example.test/",
        text: str | None = None,
    ) -> httpx.Response:
        request = httpx.Request("GET", url)
        if text is not None:
            return httpx.Response(status_code, text=text, request=request)
        return httpx.Response(status_code, json=payload, request=request)

    return _make


@pytest.fixture
def make_client() -> Callable[[Handler], AsyncMock]:
    """Factory for a mocked ``httpx.AsyncClient`` whose ``get`` is routed to *handler*.

    The handler receives the URL and query params and returns a response or
    an exception instance to raise.
    """

    def _make(handler: Handler) -> AsyncMock:
        def _get(url: str, params: dict[str, Any] | None = None, **kwargs: Any) -> httpx.Response:
            result = handler(str(url), dict(params or {}))
            if isinstance(result, BaseException):
                raise result
            return result

        client = AsyncMock(spec=httpx.AsyncClient)
        client.get.side_effect = _get
        return client

    return _make


@pytest.fixture
def wiki_it_source() -> SearchSource:
    return SearchSource(
        name="Wikipedia IT",
        url="https://it.wikipedia.org/api/rest_v1/page/summary/{query}",
        language="it",
        timeout_seconds=10,
        user_agent="WikiSift-Test/1.0",
    )


@pytest.fixture
def wiki_en_source() -> SearchSource:
    return SearchSource(
        name="Wikipedia EN",
        url="https://en.wikipedia.org/api/rest_v1/page/summary/{query}",
        language="en",
    )


@pytest.fixture
def custom_source() -> CustomApiSource:
    return CustomApiSource(
        name="Books API",
        search_endpoint="https://books.example.com/api/search",
        language="en",
        timeout_seconds=5,
        user_agent="WikiSift-Test/1.0",
        headers={"X-Api-Key": "secret"},
        query_parameters={"lang": "en", "sort": "best match"},
        search_query_param="term",
        response_data_path="data.items",
        max_results=2,
        field_mapping=FieldMapping(
            title_field="volume.title",
            summary_field="volume.description",
            url_field="links.self",
            thumbnail_field="volume.cover",
            custom_fields={"year": "volume.year", "isbn": "volume.isbn"},
        ),
    )


@pytest.fixture
def settings(
    wiki_it_source: SearchSource,
    wiki_en_source: SearchSource,
    custom_source: CustomApiSource,
) -> Settings:
    """Test settings: two Wikipedia sources and one disabled custom API."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        sources=[wiki_it_source, wiki_en_source],
        custom_api_sources=[custom_source.model_copy(update={"enabled": False})],
    )
