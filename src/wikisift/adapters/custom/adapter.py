"""Custom API adapter — Search any JSON HTTP API described by configuration.

The request is a single GET built from the source's ``search_endpoint``:

    <search_endpoint>?<search_query_param>=<query>&<extra params>&limit=<max_results>

The response is walked to ``response_data_path`` (if any) and each element
found there is translated through the source's ``FieldMapping``.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote, urlsplit

import httpx

from wikisift.adapters.base.adapter import HttpSearchAdapter
from wikisift.adapters.base.exceptions import BackendError, FieldMappingError
from wikisift.core.field_mapping import map_fields, resolve_path
from wikisift.models.result import SearchResult
from wikisift.models.source import CustomApiSource

logger = logging.getLogger(__name__)


class CustomApiAdapter(HttpSearchAdapter):
    """Search adapter for a user-defined JSON API.

    Args:
        source: Custom API source descriptor.
        client: Shared async HTTP client.
    """

    def __init__(self, source: CustomApiSource, client: httpx.AsyncClient) -> None:
        super().__init__(source, client, headers=source.headers)
        self._source: CustomApiSource = source

    def build_search_url(self, query: str) -> str:
        """Append the query, extra parameters and result cap to the endpoint."""
        url = self._source.search_endpoint
        separator = "&" if "?" in url else "?"
        url += f"{separator}{self._source.search_query_param}={quote(query, safe='')}"

        for key, value in self._source.query_parameters.items():
            url += f"&{key}={quote(value, safe='')}"

        if self._source.max_results > 0:
            url += f"&limit={self._source.max_results}"
        return url

    # ── Search ───────────────────────────────────────────────────────────

    async def search(self, query: str) -> list[SearchResult]:
        """Query the API and map its response to ``SearchResult`` records."""
        if not self.enabled:
            logger.debug("Source '%s' is disabled", self.name)
            return []

        try:
            payload = await self._fetch(query)
            results = self.parse_results(payload)
        except BackendError as e:
            logger.error("%s: search failed for '%s': %s", self.name, query, e)
            return []
        except Exception:
            logger.error("%s: search failed for '%s'", self.name, query, exc_info=True)
            return []

        logger.info("%s: %d results for '%s'", self.name, len(results), query)
        return results

    async def _fetch(self, query: str) -> Any:
        url = self.build_search_url(query)
        logger.debug("%s: GET %s", self.name, url)
        try:
            response = await self._get(url)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise BackendError(f"Request to {self._source.search_endpoint} failed: {e}") from e

    def parse_results(self, payload: Any) -> list[SearchResult]:
        """Locate the results in *payload* and map each one.

        A JSON array maps element by element (unmappable elements are
        skipped); any other node maps to at most one result. The per-source
        ``max_results`` cap is enforced locally as well as sent upstream.
        """
        node = payload
        path = self._source.response_data_path
        if path:
            found, node = resolve_path(payload, path)
            if not found:
                logger.warning("%s: response data path not found: %s", self.name, path)
                return []

        elements = node if isinstance(node, list) else [node]
        results: list[SearchResult] = []
        for element in elements:
            try:
                results.append(
                    map_fields(
                        element,
                        self._source.field_mapping,
                        source=self.name,
                        language=self._source.language,
                    )
                )
            except FieldMappingError as e:
                logger.warning("%s: skipping result: %s", self.name, e)

        cap = self._source.max_results
        if cap > 0 and len(results) > cap:
            logger.debug("%s: upstream returned %d results, keeping %d", self.name, len(results), cap)
            results = results[:cap]
        return results

    # ── Health ───────────────────────────────────────────────────────────

    async def is_available(self) -> bool:
        """Check that the endpoint's scheme and host answer with a 2xx status."""
        parts = urlsplit(self._source.search_endpoint)
        return await self._probe(f"{parts.scheme}://{parts.netloc}")
