"""
Core interfaces for pkgsearch.

This module contains the core data models shared by the query pipeline:
catalog records, request parameters, scored packages, pagination metadata and
the pruned views handed back to the serving layer.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Mapping, Optional
from urllib.parse import urlencode

from pkgsearch.core.exceptions import AlgorithmSelectionError, InvalidSortKey
from pkgsearch.core.semver import parse_version


class SimilarityAlgorithm(Enum):
    """
    Similarity algorithms available to the search pipeline.

    Values are the names accepted in configuration files.
    """
    LEVENSHTEIN = "levenshtein_distance"
    WEIGHTED_LEVENSHTEIN = "weighted_levenshtein_distance"
    WSDM = "levenshtein_distance_wsdm"
    LCS = "lcs"

    @classmethod
    def from_config(cls, value) -> "SimilarityAlgorithm":
        """
        Resolve a configured algorithm name.

        Args:
            value: Algorithm name or an existing member.

        Returns:
            The matching algorithm.

        Raises:
            AlgorithmSelectionError: If the name is not a supported algorithm.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value == normalized:
                    return member
        supported = ", ".join(member.value for member in cls)
        raise AlgorithmSelectionError(
            f"Unknown search algorithm {value!r}; expected one of: {supported}"
        )


class SortDirection(Enum):
    """Sort direction."""
    ASC = "asc"
    DESC = "desc"

    def reversed(self) -> "SortDirection":
        return SortDirection.ASC if self is SortDirection.DESC else SortDirection.DESC

    @classmethod
    def parse(cls, value) -> Optional["SortDirection"]:
        """Return the direction for ``value`` or None when it is not a direction."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return None
        return None


class SortKey(Enum):
    """Keys the sorter can order packages by."""
    RELEVANCE = "relevance"
    DOWNLOADS = "downloads"
    STARS = "stars"
    CREATED = "created"
    UPDATED = "updated"

    @property
    def default_direction(self) -> SortDirection:
        return _DEFAULT_DIRECTIONS[self]

    @classmethod
    def parse(cls, value) -> "SortKey":
        """
        Resolve a sort key name.

        Raises:
            InvalidSortKey: If ``value`` does not name a supported key.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            # Historical aliases used by API clients
            normalized = _SORT_ALIASES.get(normalized, normalized)
            for member in cls:
                if member.value == normalized:
                    return member
        raise InvalidSortKey(value)


_DEFAULT_DIRECTIONS = {
    SortKey.RELEVANCE: SortDirection.DESC,
    SortKey.DOWNLOADS: SortDirection.DESC,
    SortKey.STARS: SortDirection.DESC,
    SortKey.CREATED: SortDirection.ASC,
    SortKey.UPDATED: SortDirection.ASC,
}

_SORT_ALIASES = {
    "created_at": "created",
    "updated_at": "updated",
    "stargazers": "stars",
}


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class VersionRecord:
    """
    A single published version of a package.
    """
    version: str
    engine_range: Optional[str] = None
    tarball_url: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PackageRecord:
    """
    Read-only snapshot of a catalog package.

    Timestamps are normalized to UTC so records from different sources compare.
    """
    name: str
    description: str = ""
    versions: Dict[str, VersionRecord] = field(default_factory=dict)
    downloads: int = 0
    stargazers: FrozenSet[str] = frozenset()
    created: Optional[datetime] = None
    updated: Optional[datetime] = None
    latest: Optional[str] = None
    repository: Optional[str] = None

    def __post_init__(self):
        if self.downloads < 0:
            raise ValueError(f"Package {self.name!r} has a negative download count")
        object.__setattr__(self, "stargazers", frozenset(self.stargazers))
        object.__setattr__(self, "created", _as_utc(self.created))
        object.__setattr__(self, "updated", _as_utc(self.updated))

    @property
    def stars_count(self) -> int:
        return len(self.stargazers)

    @property
    def latest_version(self) -> Optional[VersionRecord]:
        if self.latest is None:
            return None
        return self.versions.get(self.latest)


@dataclass(frozen=True)
class ScoredPackage:
    """
    A package paired with its relevance score for the current query.
    """
    package: PackageRecord
    score: float


@dataclass
class QueryParams:
    """
    Parameters of a listing or search request.

    ``sort`` is kept as the raw requested name so the pipeline can apply its
    fallback when the key is unknown.
    """
    page: int = 1
    sort: Optional[str] = None
    direction: Optional[SortDirection] = None
    query: str = ""
    engine: Optional[str] = None

    @classmethod
    def from_mapping(cls, args: Mapping[str, Any]) -> "QueryParams":
        """
        Build parameters from raw request arguments.

        Accepts the query string names used by API clients (``q``, ``page``,
        ``sort``, ``order``/``direction``, ``engine``). Invalid values fall back
        to defaults instead of raising.

        Args:
            args: Mapping of argument names to raw values.

        Returns:
            Parsed query parameters.
        """
        page = 1
        raw_page = args.get("page")
        if raw_page is not None:
            try:
                page = int(str(raw_page).strip())
            except ValueError:
                page = 1
        if page < 1:
            page = 1

        direction = SortDirection.parse(args.get("order", args.get("direction")))

        sort = args.get("sort")
        if isinstance(sort, str):
            sort = sort.strip() or None
        else:
            sort = None

        query = args.get("q", args.get("query")) or ""
        if not isinstance(query, str):
            query = str(query)

        engine = args.get("engine")
        if not isinstance(engine, str) or parse_version(engine) is None:
            engine = None
        else:
            engine = engine.strip()

        return cls(page=page, sort=sort, direction=direction, query=query.strip(), engine=engine)


@dataclass(frozen=True)
class PageDescriptor:
    """
    Pagination metadata for one page of an ordered result set.
    """
    page: int
    page_size: int
    total_count: int
    total_pages: int
    next_page: int
    direction: Optional[SortDirection] = None

    @property
    def last_page(self) -> int:
        return self.total_pages

    def link_pages(self) -> Dict[str, int]:
        """Page numbers for the ``self``, ``last`` and ``next`` links."""
        return {"self": self.page, "last": self.total_pages, "next": self.next_page}


@dataclass
class PackageView:
    """
    Pruned package object returned to the serving layer.

    Short views omit ``versions``; full views carry every retained version.
    """
    name: str
    description: str
    downloads: int
    stargazers_count: int
    latest: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    repository: Optional[str] = None
    versions: Optional[Dict[str, VersionRecord]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "downloads": self.downloads,
            "stargazers_count": self.stargazers_count,
            "releases": {"latest": self.latest},
            "metadata": dict(self.metadata),
            "repository": self.repository,
        }
        if self.versions is not None:
            data["versions"] = {
                version: {
                    "version": record.version,
                    "engines": {"atom": record.engine_range} if record.engine_range else {},
                    "tarball_url": record.tarball_url,
                    "metadata": dict(record.metadata),
                }
                for version, record in self.versions.items()
            }
        return data


@dataclass
class VersionView:
    """
    A single package version with its download link.
    """
    name: str
    version: str
    engine_range: Optional[str]
    tarball: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "engines": {"atom": self.engine_range} if self.engine_range else {},
            "metadata": dict(self.metadata),
            "dist": {"tarball": self.tarball},
        }


@dataclass
class QueryResult:
    """
    One page of a listing or search request.
    """
    items: List[PackageView]
    page: PageDescriptor
    sort_key: SortKey
    direction: SortDirection
    query: str = ""

    def links(self, base_url: str) -> Dict[str, str]:
        """
        Build the pagination link URLs for this page.

        Args:
            base_url: Endpoint URL without a query string.

        Returns:
            Mapping of link relation to URL.
        """
        links = {}
        for rel, page in self.page.link_pages().items():
            params = {}
            if self.query:
                params["q"] = self.query
            params["page"] = page
            params["sort"] = self.sort_key.value
            params["order"] = self.direction.value
            links[rel] = f"{base_url}?{urlencode(params)}"
        return links
