"""Base search adapter — Abstract interface for all search backends.

Every backend must implement this interface to take part in a WikiSift
search. The adapter is responsible for:
  1. Executing a query against its backend
  2. Mapping the raw response to ``SearchResult`` records
  3. Reporting whether the backend is reachable

Adapters never raise from ``search()`` or ``is_available()``: backend
failures are logged and turned into an empty result list or ``False``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

from wikisift.models.result import SearchResult
from wikisift.models.source import DEFAULT_USER_AGENT, SearchSource

logger = logging.getLogger(__name__)


class ClientOptions(BaseModel):
    """Per-adapter HTTP settings, fixed at construction.

    The underlying ``httpx.AsyncClient`` may be shared by several adapters,
    so these values are sent with each request instead of being written
    onto the client.
    """

    model_config = ConfigDict(frozen=True)

    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent header")
    headers: dict[str, str] = Field(default_factory=dict, description="Extra request headers")

    @classmethod
    def from_source(cls, source: SearchSource, headers: dict[str, str] | None = None) -> ClientOptions:
        return cls(
            timeout=float(source.timeout_seconds),
            user_agent=source.user_agent,
            headers=dict(headers or {}),
        )

    def request_headers(self) -> dict[str, str]:
        return {**self.headers, "User-Agent": self.user_agent}


class SearchAdapter(ABC):
    """Abstract base class for search adapters.

    All adapters must implement:
      - name: the source name results are attributed to
      - enabled: whether the source takes part in searches
      - search(): run a query and return normalized results
      - is_available(): report backend reachability

    Adapters hold no per-query state and are safe to use from concurrent
    tasks.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique adapter name (the configured source name)."""

    @property
    @abstractmethod
    def enabled(self) -> bool:
        """Whether this adapter should be queried."""

    @abstractmethod
    async def search(self, query: str) -> list[SearchResult]:
        """Execute a search query against the backend.

        Args:
            query: The search query string.

        Returns:
            Normalized results; empty on any backend failure.
        """

    @abstractmethod
    async def is_available(self) -> bool:
        """Check whether the backend answers with a 2xx status."""


class HttpSearchAdapter(SearchAdapter):
    """Shared plumbing for adapters that talk HTTP through ``httpx``.

    Args:
        source: The source descriptor this adapter serves.
        client: A (possibly shared) async HTTP client.
        headers: Extra headers sent with every request of this adapter.
    """

    def __init__(
        self,
        source: SearchSource,
        client: httpx.AsyncClient,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._source = source
        self._client = client
        self._options = ClientOptions.from_source(source, headers)

    @property
    def name(self) -> str:
        return self._source.name

    @property
    def enabled(self) -> bool:
        return self._source.enabled

    @property
    def options(self) -> ClientOptions:
        return self._options

    async def _get(self, url: str, params: dict[str, Any] | None = None) -> httpx.Response:
        return await self._client.get(
            url,
            params=params,
            headers=self._options.request_headers(),
            timeout=self._options.timeout,
        )

    async def _probe(self, url: str) -> bool:
        """GET *url* and report whether it answered with a 2xx status."""
        try:
            response = await self._get(url)
        except Exception as e:
            logger.debug("Health check for '%s' failed: %s", self.name, e)
            return False
        return response.is_success
