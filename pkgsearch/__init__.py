"""
pkgsearch - discovery queries over a catalog of versioned packages.

This package provides the query pipeline behind package listing and search:
string similarity scoring, relevance ranking, stable sorting, engine
compatibility filtering and pagination.
"""

__version__ = "0.1.0"

from .core.engine import DiscoveryEngine
from .core.configuration import ConfigurationManager, ServerConfig
from .core.exceptions import (
    PkgSearchError, InvalidSortKey, MalformedEngineRange, ConfigurationError, AlgorithmSelectionError, CatalogError
)

__all__ = [
    "DiscoveryEngine",
    "ConfigurationManager",
    "ServerConfig",
    "PkgSearchError",
    "InvalidSortKey",
    "MalformedEngineRange",
    "ConfigurationError",
    "AlgorithmSelectionError",
    "CatalogError",
]
