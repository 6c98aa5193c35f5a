"""
String similarity algorithms for package search.

This module provides the edit distance and longest common subsequence
algorithms the search pipeline scores packages with, and the
SimilarityScorer that applies the algorithm selected at startup.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, Union

from pkgsearch.core.exceptions import AlgorithmSelectionError, ConfigurationError
from pkgsearch.core.interfaces import SimilarityAlgorithm
from pkgsearch.search.normalization import normalize_text, split_words


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EditCosts:
    """
    Per-operation costs for the weighted edit distance.
    """
    insertion: float = 1.0
    deletion: float = 1.0
    substitution: float = 2.0

    def __post_init__(self):
        for name in ("insertion", "deletion", "substitution"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0:
                raise ConfigurationError(f"Edit cost '{name}' must be a positive number, got {value!r}")


@dataclass(frozen=True)
class LCSMatch:
    """
    Longest common subsequence of two strings.

    ``positions`` holds one (index in first, index in second) pair per matched
    character, in order.
    """
    subsequence: str
    positions: List[Tuple[int, int]]

    @property
    def length(self) -> int:
        return len(self.subsequence)


def _edit_distance(source: str, target: str, insertion: float, deletion: float, substitution: float) -> float:
    # Keep the shorter string as the row so memory is O(min(n, m))
    if len(target) > len(source):
        source, target = target, source
        insertion, deletion = deletion, insertion

    previous = [j * insertion for j in range(len(target) + 1)]
    for i, source_char in enumerate(source, 1):
        current = [i * deletion]
        for j, target_char in enumerate(target, 1):
            replace = previous[j - 1]
            if source_char != target_char:
                replace += substitution
            current.append(min(replace, previous[j] + deletion, current[j - 1] + insertion))
        previous = current
    return previous[-1]


def levenshtein_distance(source: str, target: str) -> int:
    """
    Classic Levenshtein distance with unit costs.

    Args:
        source: First string
        target: Second string

    Returns:
        Minimum number of single-character insertions, deletions and
        substitutions turning ``source`` into ``target``.
    """
    return int(_edit_distance(source, target, 1, 1, 1))


def weighted_edit_distance(source: str, target: str, costs: Optional[EditCosts] = None) -> float:
    """
    Edit distance with configurable per-operation costs.

    Args:
        source: First string
        target: Second string
        costs: Operation costs; defaults to insertion=deletion=1, substitution=2

    Returns:
        Minimum total cost turning ``source`` into ``target``.
    """
    costs = costs or EditCosts()
    return _edit_distance(source, target, costs.insertion, costs.deletion, costs.substitution)


def lcs_length(first: str, second: str) -> int:
    """Length of the longest common subsequence, using two rolling rows."""
    if len(second) > len(first):
        first, second = second, first

    previous = [0] * (len(second) + 1)
    for first_char in first:
        current = [0]
        for j, second_char in enumerate(second, 1):
            if first_char == second_char:
                current.append(previous[j - 1] + 1)
            else:
                current.append(max(previous[j], current[j - 1]))
        previous = current
    return previous[-1]


def longest_common_subsequence(first: str, second: str) -> LCSMatch:
    """
    Compute the longest common subsequence with its traceback.

    Keeps the full dynamic programming table, so use ``lcs_length`` when only
    the length is needed.

    Args:
        first: First string
        second: Second string

    Returns:
        The matched subsequence and the positions of its characters.
    """
    rows, cols = len(first), len(second)
    table = [[0] * (cols + 1) for _ in range(rows + 1)]
    for i in range(1, rows + 1):
        for j in range(1, cols + 1):
            if first[i - 1] == second[j - 1]:
                table[i][j] = table[i - 1][j - 1] + 1
            else:
                table[i][j] = max(table[i - 1][j], table[i][j - 1])

    positions = []
    i, j = rows, cols
    while i > 0 and j > 0:
        if first[i - 1] == second[j - 1]:
            positions.append((i - 1, j - 1))
            i -= 1
            j -= 1
        elif table[i - 1][j] >= table[i][j - 1]:
            i -= 1
        else:
            j -= 1
    positions.reverse()

    return LCSMatch(
        subsequence="".join(first[index] for index, _ in positions),
        positions=positions,
    )


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


class SimilarityScorer:
    """
    Scores how similar a search query is to a piece of package text.

    The algorithm is resolved once when the scorer is created. Both inputs are
    passed through ``normalize_text`` before the algorithm sees them.
    """

    def __init__(
        self,
        algorithm: Union[SimilarityAlgorithm, str] = SimilarityAlgorithm.LCS,
        edit_costs: Optional[EditCosts] = None,
        wsdm_base: Union[SimilarityAlgorithm, str] = SimilarityAlgorithm.LEVENSHTEIN,
    ):
        """
        Initialize the scorer.

        Args:
            algorithm: Similarity algorithm to use for every score.
            edit_costs: Costs for the weighted edit distance.
            wsdm_base: Edit distance variant comparing words in the word-split
                double-mean algorithm.

        Raises:
            AlgorithmSelectionError: If an algorithm is not supported.
        """
        self.algorithm = SimilarityAlgorithm.from_config(algorithm)
        self.edit_costs = edit_costs or EditCosts()

        base = SimilarityAlgorithm.from_config(wsdm_base)
        if base not in (SimilarityAlgorithm.LEVENSHTEIN, SimilarityAlgorithm.WEIGHTED_LEVENSHTEIN):
            raise AlgorithmSelectionError(
                f"Word-split double-mean needs an edit distance base, got {base.value!r}"
            )
        self.wsdm_base = base

        self._strategy = self._select(self.algorithm)
        self._word_strategy = self._select(self.wsdm_base)
        logger.debug(f"SimilarityScorer using {self.algorithm.value}")

    def _select(self, algorithm: SimilarityAlgorithm) -> Callable[[str, str], float]:
        if algorithm is SimilarityAlgorithm.LEVENSHTEIN:
            return self._levenshtein_similarity
        if algorithm is SimilarityAlgorithm.WEIGHTED_LEVENSHTEIN:
            return self._weighted_similarity
        if algorithm is SimilarityAlgorithm.WSDM:
            return self._wsdm_similarity
        if algorithm is SimilarityAlgorithm.LCS:
            return self._lcs_similarity
        raise AlgorithmSelectionError(f"No implementation for algorithm {algorithm!r}")

    def score(self, query: Optional[str], target: Optional[str]) -> float:
        """
        Calculate similarity between query and target strings.

        Args:
            query: Search query string
            target: Target string to compare against

        Returns:
            Similarity score between 0.0 and 1.0. Two empty strings score 1.0;
            an empty string against a non-empty one scores 0.0.
        """
        query = normalize_text(query)
        target = normalize_text(target)

        if not query and not target:
            return 1.0
        if not query or not target:
            return 0.0
        if query == target:
            return 1.0

        return _clamp(self._strategy(query, target))

    def _levenshtein_similarity(self, query: str, target: str) -> float:
        return 1.0 - levenshtein_distance(query, target) / max(len(query), len(target))

    def _weighted_similarity(self, query: str, target: str) -> float:
        distance = weighted_edit_distance(query, target, self.edit_costs)
        return _clamp(1.0 - distance / (len(query) + len(target)))

    def _lcs_similarity(self, query: str, target: str) -> float:
        return 2.0 * lcs_length(query, target) / (len(query) + len(target))

    def _wsdm_similarity(self, query: str, target: str) -> float:
        query_words = split_words(query)
        target_words = split_words(target)
        if not query_words or not target_words:
            return self._word_strategy(query, target)

        def best_mean(words: List[str], candidates: List[str]) -> float:
            total = 0.0
            for word in words:
                total += max(self._word_score(word, candidate) for candidate in candidates)
            return total / len(words)

        query_mean = best_mean(query_words, target_words)
        target_mean = best_mean(target_words, query_words)
        return (query_mean + target_mean) / 2

    def _word_score(self, word: str, candidate: str) -> float:
        if word == candidate:
            return 1.0
        return self._word_strategy(word, candidate)


def score(
    query: Optional[str],
    target: Optional[str],
    algorithm: Union[SimilarityAlgorithm, str] = SimilarityAlgorithm.LCS,
) -> float:
    """
    Score two strings with a one-off scorer.

    A convenience for scripts and interactive use. It builds a new scorer per
    call and takes the algorithm per call; the query pipeline instead builds
    one SimilarityScorer at startup from the configured algorithm
    (see DiscoveryEngine).

    Args:
        query: Search query string
        target: Target string to compare against
        algorithm: Similarity algorithm to use

    Returns:
        Similarity score between 0.0 and 1.0.
    """
    return SimilarityScorer(algorithm).score(query, target)
