"""Core components for pkgsearch."""

from .exceptions import (
    PkgSearchError,
    InvalidSortKey,
    MalformedEngineRange,
    ConfigurationError,
    AlgorithmSelectionError,
    CatalogError
)
from .interfaces import (
    PackageRecord,
    VersionRecord,
    ScoredPackage,
    QueryParams,
    PageDescriptor,
    PackageView,
    VersionView,
    QueryResult,
    SimilarityAlgorithm,
    SortKey,
    SortDirection
)
from .configuration import ConfigurationManager, ServerConfig
from .catalog import CatalogLoader, load_catalog
from .engine import DiscoveryEngine

__all__ = [
    "DiscoveryEngine",
    "ConfigurationManager",
    "ServerConfig",
    "CatalogLoader",
    "load_catalog",
    "PackageRecord",
    "VersionRecord",
    "ScoredPackage",
    "QueryParams",
    "PageDescriptor",
    "PackageView",
    "VersionView",
    "QueryResult",
    "SimilarityAlgorithm",
    "SortKey",
    "SortDirection",
    "PkgSearchError",
    "InvalidSortKey",
    "MalformedEngineRange",
    "ConfigurationError",
    "AlgorithmSelectionError",
    "CatalogError"
]
