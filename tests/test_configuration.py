"""
Tests for configuration loading.
"""

import pytest
import yaml

from pkgsearch.core.configuration import ConfigurationManager, ServerConfig
from pkgsearch.core.exceptions import AlgorithmSelectionError, ConfigurationError
from pkgsearch.core.interfaces import SimilarityAlgorithm, SortDirection, SortKey
from pkgsearch.search.similarity import EditCosts


def write_config(temp_dir, data):
    path = temp_dir / "pkgsearch.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


class TestConfigurationManager:
    """Test ConfigurationManager."""

    def test_defaults(self):
        config = ConfigurationManager(environ={}).load()
        assert config == ServerConfig()
        assert config.search_algorithm is SimilarityAlgorithm.LCS
        assert config.paginated_amount == 30
        assert config.default_sort is SortKey.DOWNLOADS
        assert config.search_sort is SortKey.RELEVANCE
        assert config.default_direction is None

    def test_load_from_file(self, temp_dir):
        path = write_config(temp_dir, {
            "search_algorithm": "levenshtein_distance_wsdm",
            "wsdm_base": "weighted_levenshtein_distance",
            "paginated_amount": 10,
            "server_url": "https://packages.example.com/",
            "default_sort": "stars",
            "default_direction": "asc",
            "edit_costs": {"substitution": 3},
            "max_workers": 4,
            "featured": ["zen-theme"],
        })
        config = ConfigurationManager(path, environ={}).load()

        assert config.search_algorithm is SimilarityAlgorithm.WSDM
        assert config.wsdm_base is SimilarityAlgorithm.WEIGHTED_LEVENSHTEIN
        assert config.paginated_amount == 10
        assert config.server_url == "https://packages.example.com"
        assert config.default_sort is SortKey.STARS
        assert config.default_direction is SortDirection.ASC
        assert config.edit_costs == EditCosts(substitution=3)
        assert config.max_workers == 4
        assert config.featured == ["zen-theme"]

    def test_environment_overrides(self, temp_dir):
        path = write_config(temp_dir, {"search_algorithm": "lcs", "paginated_amount": 10})
        environ = {
            "PKGSEARCH_SEARCH_ALGORITHM": "levenshtein_distance",
            "PKGSEARCH_PAGINATE": "25",
            "PKGSEARCH_SERVER_URL": "http://env.example.com",
        }
        config = ConfigurationManager(path, environ=environ).load()

        assert config.search_algorithm is SimilarityAlgorithm.LEVENSHTEIN
        assert config.paginated_amount == 25
        assert config.server_url == "http://env.example.com"

    def test_unknown_algorithm_is_fatal(self, temp_dir):
        path = write_config(temp_dir, {"search_algorithm": "soundex"})
        with pytest.raises(AlgorithmSelectionError):
            ConfigurationManager(path, environ={}).load()

    def test_unknown_algorithm_from_environment(self):
        with pytest.raises(AlgorithmSelectionError):
            ConfigurationManager(environ={"PKGSEARCH_SEARCH_ALGORITHM": "bm25"}).load()

    def test_algorithm_error_is_configuration_error(self):
        assert issubclass(AlgorithmSelectionError, ConfigurationError)

    def test_wsdm_base_must_be_edit_distance(self):
        with pytest.raises(AlgorithmSelectionError):
            ConfigurationManager.from_dict({"wsdm_base": "lcs"})

    @pytest.mark.parametrize("raw", [
        {"paginated_amount": 0},
        {"paginated_amount": "many"},
        {"paginated_amount": 2.5},
        {"max_workers": -1},
        {"server_url": ""},
        {"default_sort": "popularity"},
        {"default_sort": "relevance"},
        {"default_direction": "sideways"},
        {"edit_costs": {"transposition": 1}},
        {"edit_costs": {"insertion": 0}},
        {"edit_costs": [1, 2]},
        {"featured": "zen-theme"},
    ])
    def test_invalid_values(self, raw):
        with pytest.raises(ConfigurationError):
            ConfigurationManager.from_dict(raw)

    def test_missing_file(self, temp_dir):
        with pytest.raises(ConfigurationError):
            ConfigurationManager(temp_dir / "missing.yaml", environ={}).load()

    def test_invalid_yaml(self, temp_dir):
        path = temp_dir / "broken.yaml"
        path.write_text("search_algorithm: [unclosed")
        with pytest.raises(ConfigurationError):
            ConfigurationManager(path, environ={}).load()

    def test_non_mapping_document(self, temp_dir):
        path = temp_dir / "list.yaml"
        path.write_text("- lcs\n")
        with pytest.raises(ConfigurationError):
            ConfigurationManager(path, environ={}).load()

    def test_unknown_keys_are_ignored(self, caplog):
        config = ConfigurationManager.from_dict({"cache_time": 600000})
        assert config == ServerConfig()
        assert "cache_time" in caplog.text

    def test_cache(self, temp_dir):
        path = write_config(temp_dir, {"paginated_amount": 10})
        manager = ConfigurationManager(path, environ={})
        first = manager.load()
        write_config(temp_dir, {"paginated_amount": 20})
        assert manager.load() is first

        manager.clear_cache()
        assert manager.load().paginated_amount == 20
