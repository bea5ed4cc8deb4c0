"""Exception hierarchy for WikiSift."""


class WikiSiftError(Exception):
    """Base exception for WikiSift."""


class InvalidQueryError(WikiSiftError, ValueError):
    """Raised when a search query is empty or whitespace-only."""


class ConfigurationError(WikiSiftError):
    """Raised when a configuration file cannot be read or validated."""
