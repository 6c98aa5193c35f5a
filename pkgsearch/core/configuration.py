"""
Configuration management for pkgsearch.

This module provides the ServerConfig settings object and the
ConfigurationManager that loads it from YAML, applies environment variable
overrides and validates every value once, at startup.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml

from pkgsearch.core.exceptions import AlgorithmSelectionError, ConfigurationError, InvalidSortKey
from pkgsearch.core.interfaces import SimilarityAlgorithm, SortDirection, SortKey
from pkgsearch.search.similarity import EditCosts


logger = logging.getLogger(__name__)


# Environment variable -> configuration key
ENV_OVERRIDES = {
    "PKGSEARCH_SEARCH_ALGORITHM": "search_algorithm",
    "PKGSEARCH_PAGINATE": "paginated_amount",
    "PKGSEARCH_SERVER_URL": "server_url",
    "PKGSEARCH_MAX_WORKERS": "max_workers",
}


@dataclass(frozen=True)
class ServerConfig:
    """
    Validated startup configuration for the query pipeline.
    """
    search_algorithm: SimilarityAlgorithm = SimilarityAlgorithm.LCS
    paginated_amount: int = 30
    server_url: str = "http://localhost:8080"
    default_sort: SortKey = SortKey.DOWNLOADS
    default_direction: Optional[SortDirection] = None
    search_sort: SortKey = SortKey.RELEVANCE
    wsdm_base: SimilarityAlgorithm = SimilarityAlgorithm.LEVENSHTEIN
    edit_costs: EditCosts = field(default_factory=EditCosts)
    max_workers: int = 1
    featured: List[str] = field(default_factory=list)


class ConfigurationManager:
    """
    Loads and validates pkgsearch configuration.

    Values are read from an optional YAML file, then overridden by environment
    variables (see ``ENV_OVERRIDES``).
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None, environ: Optional[Mapping[str, str]] = None):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to a YAML configuration file. If None, only
                defaults and environment variables are used.
            environ: Environment to read overrides from. Defaults to os.environ.
        """
        self.config_path = Path(config_path).expanduser() if config_path else None
        self.environ = os.environ if environ is None else environ
        self._config_cache: Optional[ServerConfig] = None

    def load(self) -> ServerConfig:
        """
        Load the configuration.

        Returns:
            The validated configuration.

        Raises:
            ConfigurationError: If the file cannot be read or a value is invalid.
            AlgorithmSelectionError: If the search algorithm is not supported.
        """
        if self._config_cache is not None:
            return self._config_cache

        raw = self._read_file()
        for env_name, key in ENV_OVERRIDES.items():
            value = self.environ.get(env_name)
            if value:
                logger.debug(f"Configuration '{key}' overridden by {env_name}")
                raw[key] = value

        self._config_cache = self.from_dict(raw)
        logger.debug(
            f"Loaded configuration: algorithm={self._config_cache.search_algorithm.value}, "
            f"page size={self._config_cache.paginated_amount}"
        )
        return self._config_cache

    def clear_cache(self) -> None:
        """Clear the cached configuration to force reloading."""
        self._config_cache = None

    def _read_file(self) -> Dict[str, Any]:
        if self.config_path is None:
            return {}
        if not self.config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Error parsing configuration YAML: {e}")
        except IOError as e:
            raise ConfigurationError(f"Error reading configuration file: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file must contain a mapping: {self.config_path}")
        logger.debug(f"Read configuration from {self.config_path}")
        return dict(data)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> ServerConfig:
        """
        Validate a raw configuration mapping.

        Args:
            raw: Configuration values keyed by ServerConfig field name.

        Returns:
            The validated configuration.
        """
        known = set(ServerConfig.__dataclass_fields__)
        unknown = sorted(set(raw) - known)
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {', '.join(unknown)}")

        defaults = ServerConfig()
        values: Dict[str, Any] = {}

        # Algorithm errors are fatal and must surface as AlgorithmSelectionError
        values["search_algorithm"] = SimilarityAlgorithm.from_config(
            raw.get("search_algorithm", defaults.search_algorithm)
        )
        values["wsdm_base"] = SimilarityAlgorithm.from_config(raw.get("wsdm_base", defaults.wsdm_base))
        if values["wsdm_base"] not in (SimilarityAlgorithm.LEVENSHTEIN, SimilarityAlgorithm.WEIGHTED_LEVENSHTEIN):
            raise AlgorithmSelectionError(
                f"wsdm_base must be an edit distance algorithm, got {values['wsdm_base'].value!r}"
            )

        values["paginated_amount"] = cls._positive_int("paginated_amount", raw.get("paginated_amount", defaults.paginated_amount))
        values["max_workers"] = cls._positive_int("max_workers", raw.get("max_workers", defaults.max_workers))

        server_url = raw.get("server_url", defaults.server_url)
        if not isinstance(server_url, str) or not server_url.strip():
            raise ConfigurationError(f"server_url must be a non-empty string, got {server_url!r}")
        values["server_url"] = server_url.strip().rstrip("/")

        values["default_sort"] = cls._sort_key("default_sort", raw.get("default_sort", defaults.default_sort))
        if values["default_sort"] is SortKey.RELEVANCE:
            raise ConfigurationError("default_sort cannot be relevance; listings have no query to rank by")
        values["search_sort"] = cls._sort_key("search_sort", raw.get("search_sort", defaults.search_sort))

        direction = raw.get("default_direction")
        if direction is not None:
            parsed = SortDirection.parse(direction)
            if parsed is None:
                raise ConfigurationError(f"default_direction must be 'asc' or 'desc', got {direction!r}")
            values["default_direction"] = parsed

        costs = raw.get("edit_costs") or {}
        if not isinstance(costs, dict):
            raise ConfigurationError(f"edit_costs must be a mapping, got {costs!r}")
        unknown_costs = set(costs) - {"insertion", "deletion", "substitution"}
        if unknown_costs:
            raise ConfigurationError(f"Unknown edit costs: {', '.join(sorted(unknown_costs))}")
        values["edit_costs"] = EditCosts(**costs)

        featured = raw.get("featured") or []
        if not isinstance(featured, list) or not all(isinstance(name, str) for name in featured):
            raise ConfigurationError("featured must be a list of package names")
        values["featured"] = list(featured)

        return ServerConfig(**values)

    @staticmethod
    def _positive_int(name: str, value: Any) -> int:
        try:
            number = int(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
        if isinstance(value, bool) or number < 1 or (isinstance(value, float) and not value.is_integer()):
            raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
        return number

    @staticmethod
    def _sort_key(name: str, value: Any) -> SortKey:
        try:
            return SortKey.parse(value)
        except InvalidSortKey:
            raise ConfigurationError(f"{name} is not a valid sort key: {value!r}")
