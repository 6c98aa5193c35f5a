"""
Query pipeline engine for pkgsearch.

This module provides the DiscoveryEngine, which runs listing, search and
detail requests through the explicit pipeline:

    snapshot -> engine filter (details only) -> rank (search only) -> sort -> paginate -> prune
"""

import logging
from typing import List, Optional, Sequence, Tuple
from urllib.parse import quote

from pkgsearch.core.configuration import ServerConfig
from pkgsearch.core.exceptions import InvalidSortKey
from pkgsearch.core.interfaces import (
    PackageRecord, PackageView, QueryParams, QueryResult, SortDirection, SortKey, VersionView
)
from pkgsearch.core.semver import parse_version
from pkgsearch.search.compatibility import EngineCompatibilityFilter
from pkgsearch.search.pagination import Paginator
from pkgsearch.search.ranking import SearchRanker
from pkgsearch.search.similarity import SimilarityScorer
from pkgsearch.search.sorting import PackageSorter, SortItem


logger = logging.getLogger(__name__)

# Used when a request names a sort key that does not exist
FALLBACK_SORT = SortKey.DOWNLOADS
FALLBACK_DIRECTION = SortDirection.DESC


class DiscoveryEngine:
    """
    Runs discovery requests against request-scoped catalog snapshots.

    The engine holds no per-request state. Every request copies the snapshot
    it is given into a new list, and records are never mutated, so the
    caller's cached catalog is left untouched and concurrent requests need no
    locking.
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Initialize the discovery engine.

        Args:
            config: Validated startup configuration. Defaults to ServerConfig().
        """
        self.config = config or ServerConfig()
        self.scorer = SimilarityScorer(
            self.config.search_algorithm,
            edit_costs=self.config.edit_costs,
            wsdm_base=self.config.wsdm_base,
        )
        self.ranker = SearchRanker(self.scorer, max_workers=self.config.max_workers)
        self.sorter = PackageSorter()
        self.paginator = Paginator(self.config.paginated_amount)
        self.engine_filter = EngineCompatibilityFilter()
        logger.info(
            f"DiscoveryEngine ready: algorithm={self.config.search_algorithm.value}, "
            f"page size={self.config.paginated_amount}"
        )

    def list_packages(self, catalog: Sequence[PackageRecord], params: QueryParams) -> QueryResult:
        """
        List every package, sorted and paginated.

        A relevance sort is meaningless without a query; it is replaced by the
        configured default sort.

        Args:
            catalog: Catalog snapshot.
            params: Request parameters. ``query`` and ``engine`` are ignored.

        Returns:
            The requested page of short package views.
        """
        snapshot = list(catalog)
        key, direction = self._resolve_sort(params, self.config.default_sort)
        if key is SortKey.RELEVANCE:
            key, direction = self._non_relevance_sort(params)
        return self._sort_and_paginate(snapshot, key, direction, params.page, "")

    def search_packages(self, catalog: Sequence[PackageRecord], params: QueryParams) -> QueryResult:
        """
        Search packages by free text, sorted and paginated.

        Every package appears in the results; ranking only orders them.
        With an empty query the ranking step is skipped and the configured
        default (non-relevance) sort applies.

        Args:
            catalog: Catalog snapshot.
            params: Request parameters.

        Returns:
            The requested page of short package views.
        """
        snapshot = list(catalog)
        key, direction = self._resolve_sort(params, self.config.search_sort)

        if not self.ranker.should_rank(params.query):
            if key is SortKey.RELEVANCE:
                key, direction = self._non_relevance_sort(params)
            return self._sort_and_paginate(snapshot, key, direction, params.page, params.query)

        scored = self.ranker.rank(params.query, snapshot)
        return self._sort_and_paginate(scored, key, direction, params.page, params.query)

    def package_details(self, package: PackageRecord, engine: Optional[str] = None) -> PackageView:
        """
        Build the full view of a single package.

        Args:
            package: Package to show.
            engine: Engine version the client runs. Only versions compatible
                with it are included. Missing or invalid values disable filtering.

        Returns:
            Full package view.
        """
        return self._view(self.engine_filter.filter(package, engine), full=True)

    def featured_packages(self, catalog: Sequence[PackageRecord]) -> List[PackageView]:
        """
        List the configured featured packages, in configured order.

        Names missing from the catalog are skipped.
        """
        by_name = {package.name: package for package in catalog}
        featured = []
        for name in self.config.featured:
            package = by_name.get(name)
            if package is None:
                logger.warning(f"Featured package '{name}' is not in the catalog")
                continue
            featured.append(self._view(package, full=False))
        return featured

    def stargazers(self, package: PackageRecord) -> List[str]:
        """Return the users who starred ``package``, sorted."""
        return sorted(package.stargazers)

    def package_version(self, package: PackageRecord, version: str) -> Optional[VersionView]:
        """
        Look up one version of a package.

        Args:
            package: Package to look in.
            version: Requested version string.

        Returns:
            The version with its tarball link, or None when ``version`` is not
            a valid semver or the package has no such version.
        """
        if parse_version(version) is None:
            return None
        record = package.versions.get(version.strip())
        if record is None:
            return None
        tarball = (
            f"{self.config.server_url}/api/packages/{quote(package.name, safe='')}"
            f"/versions/{quote(record.version, safe='')}/tarball"
        )
        return VersionView(
            name=package.name,
            version=record.version,
            engine_range=record.engine_range,
            tarball=tarball,
            metadata=dict(record.metadata),
        )

    @staticmethod
    def find_package(catalog: Sequence[PackageRecord], name: str) -> Optional[PackageRecord]:
        """Find a package by exact name."""
        for package in catalog:
            if package.name == name:
                return package
        return None

    def _resolve_sort(self, params: QueryParams, default_key: SortKey) -> Tuple[SortKey, SortDirection]:
        if params.sort is None:
            key = default_key
        else:
            try:
                key = SortKey.parse(params.sort)
            except InvalidSortKey as e:
                logger.warning(f"{e}; falling back to {FALLBACK_SORT.value} {FALLBACK_DIRECTION.value}")
                return FALLBACK_SORT, FALLBACK_DIRECTION
        return key, PackageSorter.resolve_direction(key, self._direction_for(key, params))

    def _non_relevance_sort(self, params: QueryParams) -> Tuple[SortKey, SortDirection]:
        key = self.config.default_sort
        logger.debug(f"No query to rank by; sorting by {key.value}")
        return key, PackageSorter.resolve_direction(key, self._direction_for(key, params))

    def _direction_for(self, key: SortKey, params: QueryParams) -> Optional[SortDirection]:
        # The configured direction belongs to default_sort only; other keys use their own default
        if params.direction is not None:
            return params.direction
        if key is self.config.default_sort:
            return self.config.default_direction
        return None

    def _sort_and_paginate(
        self,
        items: Sequence[SortItem],
        key: SortKey,
        direction: SortDirection,
        page: int,
        query: str,
    ) -> QueryResult:
        ordered = self.sorter.sort(items, key, direction)
        page_items, descriptor = self.paginator.paginate(ordered, page, direction=direction)
        views = [self._view(getattr(item, "package", item), full=False) for item in page_items]
        return QueryResult(items=views, page=descriptor, sort_key=key, direction=direction, query=query)

    @staticmethod
    def _view(package: PackageRecord, full: bool) -> PackageView:
        latest = package.latest_version
        return PackageView(
            name=package.name,
            description=package.description,
            downloads=package.downloads,
            stargazers_count=package.stars_count,
            latest=package.latest,
            metadata=dict(latest.metadata) if latest else {},
            repository=package.repository,
            versions=dict(package.versions) if full else None,
        )

