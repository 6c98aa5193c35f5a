"""
Unit tests for search ranking.
"""

import unittest
from unittest.mock import Mock

from pkgsearch.core.interfaces import ScoredPackage, SimilarityAlgorithm
from pkgsearch.search.ranking import SearchRanker
from pkgsearch.search.similarity import SimilarityScorer
from tests.fixtures.sample_data import make_package


class TestSearchRanker(unittest.TestCase):
    """Test cases for SearchRanker."""

    def setUp(self):
        self.catalog = [
            make_package("minimap", description="A preview of the full source code"),
            make_package("zen-theme", description="A calm dark theme"),
            make_package("linter", description="Base linter"),
            make_package("emmet", description=""),
        ]

    def test_combines_name_and_description(self):
        scorer = Mock()
        scores = {"pkg": 0.2, "some description": 0.8}
        scorer.score.side_effect = lambda query, target: scores.get(target, 0.0)
        ranker = SearchRanker(scorer)

        package = make_package("pkg", description="some description")
        self.assertAlmostEqual(ranker.calculate_relevance_score(package, "query"), 0.4)

        scores["pkg"] = 0.6
        self.assertAlmostEqual(ranker.calculate_relevance_score(package, "query"), 0.6)

    def test_keeps_every_package_in_order(self):
        ranker = SearchRanker(SimilarityScorer(SimilarityAlgorithm.LCS))
        ranked = ranker.rank("zen", self.catalog)

        self.assertEqual([item.package.name for item in ranked], [p.name for p in self.catalog])
        self.assertTrue(all(isinstance(item, ScoredPackage) for item in ranked))
        for item in ranked:
            self.assertGreaterEqual(item.score, 0.0)
            self.assertLessEqual(item.score, 1.0)

    def test_zero_scores_are_kept(self):
        ranker = SearchRanker(SimilarityScorer(SimilarityAlgorithm.LEVENSHTEIN))
        ranked = ranker.rank("qqqqqqqq", [make_package("ab")])
        self.assertEqual(len(ranked), 1)
        self.assertEqual(ranked[0].score, 0.0)

    def test_best_match_scores_highest(self):
        ranker = SearchRanker(SimilarityScorer(SimilarityAlgorithm.WSDM))
        ranked = ranker.rank("zen theme", self.catalog)
        best = max(ranked, key=lambda item: item.score)
        self.assertEqual(best.package.name, "zen-theme")
        self.assertEqual(best.score, 1.0)

    def test_parallel_matches_sequential(self):
        catalog = [make_package(f"package-{i}", description=f"tool number {i}") for i in range(25)]
        sequential = SearchRanker(SimilarityScorer(), max_workers=1).rank("package-7", catalog)
        parallel = SearchRanker(SimilarityScorer(), max_workers=4).rank("package-7", catalog)
        self.assertEqual(sequential, parallel)

    def test_should_rank(self):
        self.assertTrue(SearchRanker.should_rank("zen"))
        self.assertFalse(SearchRanker.should_rank(""))
        self.assertFalse(SearchRanker.should_rank("   "))
        self.assertFalse(SearchRanker.should_rank(None))

    def test_empty_catalog(self):
        self.assertEqual(SearchRanker().rank("zen", []), [])


if __name__ == '__main__':
    unittest.main()
