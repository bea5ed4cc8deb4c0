"""Adapter Registry — Builds adapters from source descriptors and holds the active set.

The set of backend protocols is closed: standard API sources named like
Wikipedia get a ``WikipediaAdapter`` and custom API sources get a
``CustomApiAdapter``. Anything else is reported as unsupported.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from wikisift.adapters.base.adapter import SearchAdapter
from wikisift.adapters.base.exceptions import UnsupportedSourceError
from wikisift.adapters.custom.adapter import CustomApiAdapter
from wikisift.adapters.wikipedia.adapter import WikipediaAdapter
from wikisift.models.source import CustomApiSource, SearchSource, SourceType

logger = logging.getLogger(__name__)


def create_adapter(source: SearchSource, client: httpx.AsyncClient) -> SearchAdapter:
    """Create the adapter matching *source*.

    Raises:
        UnsupportedSourceError: If no adapter handles this kind of source.
    """
    if isinstance(source, CustomApiSource):
        return CustomApiAdapter(source, client)
    if source.type == SourceType.API and "wikipedia" in source.name.lower():
        return WikipediaAdapter(source, client)
    raise UnsupportedSourceError(f"Unsupported source type '{source.type.value}' for '{source.name}'")


class AdapterRegistry:
    """Active adapters keyed by source name.

    Example:
        >>> registry = AdapterRegistry()
        >>> registry.add(create_adapter(source, client))
        >>> adapters = registry.select("wiki")
    """

    def __init__(self) -> None:
        self._instances: dict[str, SearchAdapter] = {}

    def add(self, adapter: SearchAdapter) -> None:
        """Register an adapter; a later adapter with the same name replaces it."""
        if adapter.name in self._instances:
            logger.warning("Overwriting existing adapter: %s", adapter.name)
        self._instances[adapter.name] = adapter

    def select(self, name_filter: str | None = None) -> list[SearchAdapter]:
        """Return adapters whose name contains *name_filter* (case-insensitive).

        With no filter every adapter is returned. A filter that matches
        nothing returns an empty list.
        """
        if not name_filter:
            return list(self._instances.values())
        needle = name_filter.lower()
        return [adapter for name, adapter in self._instances.items() if needle in name.lower()]

    async def status_all(self) -> dict[str, bool]:
        """Run every adapter's health check concurrently.

        Returns:
            Adapter name -> availability. A check that raises counts as
            unavailable.
        """
        adapters = list(self._instances.values())
        outcomes = await asyncio.gather(
            *(adapter.is_available() for adapter in adapters),
            return_exceptions=True,
        )

        results: dict[str, bool] = {}
        for adapter, outcome in zip(adapters, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                logger.warning("Health check failed on '%s': %s", adapter.name, outcome)
                results[adapter.name] = False
            else:
                results[adapter.name] = bool(outcome)
        return results

    def clear(self) -> None:
        self._instances.clear()

    @property
    def active_adapters(self) -> list[str]:
        """List all active adapter names."""
        return list(self._instances.keys())

    def __len__(self) -> int:
        return len(self._instances)
