"""WikiSift Engine — Core orchestrator for multi-source searches.

The engine owns the active adapters and runs every query as a fan-out:
  1. Select adapters (optional case-insensitive substring filter on name)
  2. Run one search task per enabled adapter and wait for all of them
  3. Drop the contribution of any adapter whose task failed
  4. Merge, sort (relevance desc, source asc) and truncate to the limit
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Iterable
from typing import TYPE_CHECKING

import httpx

from wikisift.adapters.base.adapter import SearchAdapter
from wikisift.adapters.base.exceptions import UnsupportedSourceError
from wikisift.adapters.base.registry import AdapterRegistry, create_adapter
from wikisift.exceptions import InvalidQueryError
from wikisift.models.result import SearchResult

if TYPE_CHECKING:
    from wikisift.config.settings import Settings

logger = logging.getLogger(__name__)


def rank_results(results: Iterable[SearchResult]) -> list[SearchResult]:
    """Sort by relevance score descending, then by source name ascending.

    The sort is stable, so results of the same source keep adapter order.
    """
    return sorted(results, key=lambda r: (-r.relevance_score, r.source))


class SearchEngine:
    """Core orchestrator for WikiSift searches.

    Pipeline:
      query → [registry.select] → enabled adapters
            → [asyncio.gather] → per-adapter result lists (failures → [])
            → [rank_results] → truncated list

    Args:
        settings: Application configuration.
        client: Optional HTTP client shared by all adapters. When omitted the
            engine creates one on ``initialize()`` and closes it on
            ``shutdown()``.

    Attributes:
        settings: Application configuration.
        adapter_registry: Active adapters keyed by source name.
    """

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        self.settings = settings
        self.adapter_registry = AdapterRegistry()
        self._client = client
        self._owns_client = client is None

    async def initialize(self, settings: Settings | None = None) -> None:
        """Build one adapter per enabled source, replacing any previous set.

        A source that cannot be turned into an adapter is logged and
        skipped; the remaining sources are still initialized.
        """
        if settings is not None:
            self.settings = settings

        self.adapter_registry.clear()
        if self._owns_client:
            if self._client is not None:
                await self._client.aclose()
            self._client = httpx.AsyncClient(
                follow_redirects=True,
                timeout=float(self.settings.app.timeout_seconds),
            )

        assert self._client is not None
        for source in [*self.settings.sources, *self.settings.custom_api_sources]:
            if not source.enabled:
                continue
            try:
                adapter = create_adapter(source, self._client)
            except UnsupportedSourceError as e:
                logger.error("Skipping source '%s': %s", source.name, e)
                continue
            except Exception:
                logger.error("Failed to initialize source '%s'", source.name, exc_info=True)
                continue
            self.adapter_registry.add(adapter)
            logger.info("Initialized source: %s", source.name)

        logger.info("WikiSift engine initialized with %d sources", len(self.adapter_registry))

    async def shutdown(self) -> None:
        """Drop all adapters and close the HTTP client if the engine owns it."""
        self.adapter_registry.clear()
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
        logger.info("WikiSift engine shut down")

    # ──────────────────────────────────────────────────────────────────────
    # Search
    # ──────────────────────────────────────────────────────────────────────

    async def search(
        self,
        query: str,
        source: str | None = None,
        limit: int | None = None,
    ) -> list[SearchResult]:
        """Search every matching source concurrently.

        Args:
            query: The search text.
            source: Optional case-insensitive substring of the source names
                to query. Matching no source yields an empty list.
            limit: Maximum number of results; defaults to
                ``settings.app.max_results``.

        Returns:
            Merged results ordered by relevance then source name.

        Raises:
            InvalidQueryError: If *query* is empty or whitespace-only.
        """
        if not query or not query.strip():
            raise InvalidQueryError("Query must not be empty")

        max_results = self.settings.app.max_results if limit is None else limit
        start_time = time.monotonic()

        adapters = [adapter for adapter in self.adapter_registry.select(source) if adapter.enabled]
        logger.info("Searching %d sources for: %s", len(adapters), query)

        merged = await self._gather_results(adapters, query)
        ranked = rank_results(merged)[: max(max_results, 0)]

        logger.info(
            "Search complete: %d results (%d before limit) in %d ms",
            len(ranked),
            len(merged),
            int((time.monotonic() - start_time) * 1000),
        )
        return ranked

    async def _gather_results(self, adapters: list[SearchAdapter], query: str) -> list[SearchResult]:
        """Run all adapter searches and concatenate the successful ones."""
        outcomes = await asyncio.gather(
            *(adapter.search(query) for adapter in adapters),
            return_exceptions=True,
        )

        merged: list[SearchResult] = []
        for adapter, outcome in zip(adapters, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                logger.error("Search failed on source '%s': %r", adapter.name, outcome)
                continue
            logger.debug("Source '%s' returned %d results", adapter.name, len(outcome))
            merged.extend(outcome)
        return merged

    # ──────────────────────────────────────────────────────────────────────
    # Sources
    # ──────────────────────────────────────────────────────────────────────

    def available_sources(self) -> list[str]:
        """Names of all constructed adapters."""
        return self.adapter_registry.active_adapters

    async def source_status(self) -> dict[str, bool]:
        """Health of every constructed adapter, keyed by name."""
        return await self.adapter_registry.status_all()
