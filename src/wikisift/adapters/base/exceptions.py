"""Adapter-specific exceptions."""

from wikisift.exceptions import WikiSiftError


class AdapterError(WikiSiftError):
    """Base exception for adapter errors."""


class UnsupportedSourceError(AdapterError):
    """Raised when a configured source has no matching adapter."""


class BackendError(AdapterError):
    """Raised when a search backend fails (transport, status code, or payload)."""


class FieldMappingError(AdapterError):
    """Raised when a JSON element cannot be mapped to a search result."""
