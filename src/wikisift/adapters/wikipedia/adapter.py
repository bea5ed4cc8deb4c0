"""Wikipedia adapter — Search Wikipedia articles via the MediaWiki and REST APIs.

Each query takes two steps:
  1. Full-text search (``/w/api.php?action=query&list=search``) returns up
     to five candidate article titles.
  2. For the first three titles, the REST summary endpoint
     (``/api/rest_v1/page/summary/<title>``) is fetched one title at a time
     and mapped to a ``SearchResult``.

A failed summary only drops its own title; a failed search step yields no
results at all. Nothing is raised to the caller.

Usage::

    async with httpx.AsyncClient(follow_redirects=True) as client:
        adapter = WikipediaAdapter(source, client)
        results = await adapter.search("Leonardo da Vinci")
"""

from __future__ import annotations

import logging
import time
from typing import Any
from urllib.parse import quote

import httpx

from wikisift.adapters.base.adapter import HttpSearchAdapter
from wikisift.adapters.base.exceptions import BackendError
from wikisift.core.field_mapping import resolve_path
from wikisift.models.result import SearchResult
from wikisift.models.source import SearchSource

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://it.wikipedia.org"
SEARCH_LIMIT = 5
SUMMARY_FANOUT = 3
NO_SUMMARY = "No summary available"


class WikipediaAdapter(HttpSearchAdapter):
    """Search adapter for one Wikipedia language edition.

    The base host is taken from the part of ``source.url`` preceding
    ``/api/``; sources without one fall back to the Italian edition.

    Args:
        source: Wikipedia source descriptor.
        client: Shared async HTTP client.
    """

    def __init__(self, source: SearchSource, client: httpx.AsyncClient) -> None:
        super().__init__(source, client)
        self._base_url = self.base_url_for(source.url)

    @property
    def base_url(self) -> str:
        return self._base_url

    @staticmethod
    def base_url_for(url: str) -> str:
        index = url.lower().find("/api/")
        return url[:index] if index > 0 else DEFAULT_BASE_URL

    # ── Search ───────────────────────────────────────────────────────────

    async def search(self, query: str) -> list[SearchResult]:
        """Search Wikipedia and return summaries of the best matching articles."""
        if not self.enabled:
            logger.debug("Source '%s' is disabled", self.name)
            return []

        try:
            start = time.monotonic()
            try:
                titles = await self._search_titles(query)
            except BackendError as e:
                logger.warning("Wikipedia search failed on '%s': %s", self.name, e)
                return []

            if not titles:
                logger.debug("No Wikipedia articles for query: %s", query)
                return []

            results: list[SearchResult] = []
            for title in titles[:SUMMARY_FANOUT]:
                try:
                    result = await self._fetch_summary(title)
                except Exception as e:
                    logger.warning("Failed to fetch summary for '%s': %s", title, e)
                    continue
                if result is not None:
                    results.append(result)

            took_ms = int((time.monotonic() - start) * 1000)
            logger.info(
                "Wikipedia %s: %d results for '%s' in %d ms",
                self._source.language.upper(),
                len(results),
                query,
                took_ms,
            )
            return results
        except Exception:
            logger.error("Wikipedia search failed for query: %s", query, exc_info=True)
            return []

    async def _search_titles(self, query: str) -> list[str]:
        """Run the MediaWiki full-text search and return candidate titles.

        Raises:
            BackendError: On transport errors, non-2xx status or invalid JSON.
        """
        params = {
            "action": "query",
            "list": "search",
            "srsearch": query,
            "format": "json",
            "srlimit": SEARCH_LIMIT,
        }
        try:
            response = await self._get(f"{self._base_url}/w/api.php", params=params)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise BackendError(f"MediaWiki search request failed: {e}") from e

        found, hits = resolve_path(data, "query.search")
        if not found or not isinstance(hits, list):
            return []

        titles = [
            hit["title"]
            for hit in hits
            if isinstance(hit, dict) and isinstance(hit.get("title"), str) and hit["title"].strip()
        ]
        logger.debug("Wikipedia titles for '%s': %s", query, ", ".join(titles))
        return titles[:SEARCH_LIMIT]

    async def _fetch_summary(self, title: str) -> SearchResult | None:
        """Fetch the REST summary of *title*; ``None`` on non-2xx or unusable JSON."""
        url = f"{self._base_url}/api/rest_v1/page/summary/{quote(title, safe='')}"
        response = await self._get(url)

        if not response.is_success:
            logger.debug("HTTP %d fetching summary of '%s'", response.status_code, title)
            return None

        try:
            payload = response.json()
        except ValueError:
            logger.debug("Invalid JSON in summary of '%s'", title)
            return None

        if not isinstance(payload, dict):
            return None
        return self.map_summary(payload, title)

    # ── Schema mapping ───────────────────────────────────────────────────

    def map_summary(self, payload: dict[str, Any], requested_title: str) -> SearchResult:
        """Map a REST summary payload to ``SearchResult``."""
        _, page_url = resolve_path(payload, "content_urls.desktop.page")
        _, thumbnail = resolve_path(payload, "thumbnail.source")
        page_id = payload.get("pageid")

        return SearchResult(
            title=payload.get("title") or requested_title,
            summary=payload.get("extract") or NO_SUMMARY,
            url=page_url or f"{self._base_url}/wiki/{quote(requested_title, safe='')}",
            source=self.name,
            language=self._source.language,
            relevance_score=1.0,
            metadata={
                "pageId": str(page_id) if page_id is not None else "",
                "thumbnail": thumbnail or "",
            },
        )

    # ── Health ───────────────────────────────────────────────────────────

    async def is_available(self) -> bool:
        """Check that the Wikipedia host root answers with a 2xx status."""
        return await self._probe(f"{self._base_url}/")
