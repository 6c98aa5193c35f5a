"""
Search result ranking.

This module scores every package of a catalog snapshot against a search query.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from pkgsearch.core.interfaces import PackageRecord, ScoredPackage
from pkgsearch.search.normalization import normalize_text
from pkgsearch.search.similarity import SimilarityScorer


logger = logging.getLogger(__name__)

# Weight applied to the description score before comparing it with the name score
DESCRIPTION_WEIGHT = 0.5


class SearchRanker:
    """
    Relevance ranking for package search.

    Each package gets ``max(name_score, DESCRIPTION_WEIGHT * description_score)``.
    Packages are never dropped, whatever their score; filtering on relevance is
    left to the caller.
    """

    def __init__(self, scorer: Optional[SimilarityScorer] = None, max_workers: int = 1):
        """
        Initialize the search ranker.

        Args:
            scorer: Similarity scorer to apply. Defaults to the LCS scorer.
            max_workers: Number of threads scoring packages. 1 scores inline.
        """
        self.scorer = scorer or SimilarityScorer()
        self.max_workers = max(1, int(max_workers))

    @staticmethod
    def should_rank(query: Optional[str]) -> bool:
        """Whether ``query`` carries any text to rank by."""
        return bool(normalize_text(query))

    def calculate_relevance_score(self, package: PackageRecord, query: str) -> float:
        """
        Calculate relevance score for a package.

        Args:
            package: Package to score
            query: Search query

        Returns:
            Relevance score between 0.0 and 1.0
        """
        name_score = self.scorer.score(query, package.name)
        description_score = self.scorer.score(query, package.description)
        return max(name_score, DESCRIPTION_WEIGHT * description_score)

    def rank(self, query: str, catalog: Sequence[PackageRecord]) -> List[ScoredPackage]:
        """
        Score every package against the query.

        The returned list keeps catalog order; ordering by relevance is the
        sorter's job.

        Args:
            query: Search query
            catalog: Catalog snapshot to score

        Returns:
            One scored package per catalog entry.
        """
        packages = list(catalog)
        if self.max_workers > 1 and len(packages) > 1:
            # map() yields in input order regardless of completion order
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                scores = list(executor.map(lambda package: self.calculate_relevance_score(package, query), packages))
        else:
            scores = [self.calculate_relevance_score(package, query) for package in packages]

        logger.debug(f"Ranked {len(packages)} packages for query '{query}'")
        return [ScoredPackage(package=package, score=value) for package, value in zip(packages, scores)]
