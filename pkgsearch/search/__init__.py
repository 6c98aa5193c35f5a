"""
Package search and ordering.

This module provides the similarity scoring, ranking, sorting, pagination and
engine compatibility filtering steps of the query pipeline.
"""

from .similarity import SimilarityScorer, EditCosts
from .ranking import SearchRanker
from .sorting import PackageSorter
from .pagination import Paginator
from .compatibility import EngineCompatibilityFilter

__all__ = [
    'SimilarityScorer',
    'EditCosts',
    'SearchRanker',
    'PackageSorter',
    'Paginator',
    'EngineCompatibilityFilter'
]
