"""
Exceptions for pkgsearch.

This module contains the exception hierarchy for pkgsearch operations.
"""


class PkgSearchError(Exception):
    """Base exception for pkgsearch operations."""
    pass


class InvalidSortKey(PkgSearchError):
    """Raised when a sort key is not one of the supported keys."""

    def __init__(self, key):
        super().__init__(f"Invalid sort key: {key!r}")
        self.key = key


class MalformedEngineRange(PkgSearchError):
    """Raised when an engine compatibility range cannot be parsed."""

    def __init__(self, value, reason: str = ""):
        message = f"Malformed engine range: {value!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.value = value


class ConfigurationError(PkgSearchError):
    """Raised when configuration is invalid."""
    pass


class AlgorithmSelectionError(ConfigurationError):
    """Raised when the configured similarity algorithm is unknown."""
    pass


class CatalogError(PkgSearchError):
    """Raised when a catalog document cannot be loaded or validated."""
    pass
