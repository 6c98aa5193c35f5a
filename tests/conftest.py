"""
Pytest configuration and fixtures for pkgsearch tests.
"""

import tempfile
from pathlib import Path

import pytest
import yaml

from pkgsearch.core.catalog import CatalogLoader
from pkgsearch.core.configuration import ServerConfig
from pkgsearch.core.engine import DiscoveryEngine
from tests.fixtures.sample_data import SAMPLE_CATALOG_DOCUMENT, make_package


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_catalog():
    """Catalog records built from the sample document."""
    return CatalogLoader().load_document(SAMPLE_CATALOG_DOCUMENT)


@pytest.fixture
def catalog_file(temp_dir):
    """The sample catalog written to a YAML file."""
    path = temp_dir / "catalog.yaml"
    path.write_text(yaml.safe_dump(SAMPLE_CATALOG_DOCUMENT))
    return path


@pytest.fixture
def seven_packages():
    """Seven packages with distinct download counts, in no particular order."""
    downloads = [40, 700, 10, 300, 550, 90, 120]
    return [make_package(f"package-{i}", downloads=count) for i, count in enumerate(downloads)]


@pytest.fixture
def engine_config():
    """Configuration with a small page size for pagination tests."""
    return ServerConfig(paginated_amount=2, featured=["minimap", "missing-package", "zen-theme"])


@pytest.fixture
def engine(engine_config):
    """Discovery engine using the test configuration."""
    return DiscoveryEngine(engine_config)
