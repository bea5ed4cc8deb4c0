"""Base adapter interface — Abstract classes for search backends."""

from wikisift.adapters.base.adapter import ClientOptions, HttpSearchAdapter, SearchAdapter

__all__ = ["ClientOptions", "HttpSearchAdapter", "SearchAdapter"]
