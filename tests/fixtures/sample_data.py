"""
Sample data fixtures for testing.
"""

from datetime import datetime, timezone
from typing import Dict, Any

from pkgsearch.core.interfaces import PackageRecord, VersionRecord


# Catalog document in the format read by CatalogLoader
SAMPLE_CATALOG_DOCUMENT: Dict[str, Any] = {
    "packages": [
        {
            "name": "zen-theme",
            "description": "A calm dark theme for the editor",
            "downloads": 500,
            "stargazers": ["alice", "bob", "carol"],
            "created": "2022-01-05T10:00:00Z",
            "updated": "2023-02-01T08:30:00Z",
            "repository": "https://github.com/example/zen-theme",
            "releases": {"latest": "2.0.0"},
            "versions": {
                "1.0.0": {
                    "engines": {"atom": "^1.0.0"},
                    "tarball_url": "https://example.com/zen-theme/1.0.0.tgz",
                    "metadata": {"theme": "ui"},
                },
                "1.5.0": {
                    "engines": {"atom": "^1.2.0"},
                    "tarball_url": "https://example.com/zen-theme/1.5.0.tgz",
                    "metadata": {"theme": "ui"},
                },
                "2.0.0": {
                    "engines": {"atom": ">=2.0.0"},
                    "tarball_url": "https://example.com/zen-theme/2.0.0.tgz",
                    "metadata": {"theme": "ui", "license": "MIT"},
                },
            },
        },
        {
            "name": "linter",
            "description": "Base linter for the editor",
            "downloads": 1200,
            "stargazers": ["alice"],
            "created": "2021-03-01T00:00:00Z",
            "updated": "2023-05-01T00:00:00Z",
            "releases": {"latest": "3.1.0"},
            "versions": {
                "3.1.0": {
                    "engines": {"atom": ">=1.0.0 <2.0.0"},
                    "tarball_url": "https://example.com/linter/3.1.0.tgz",
                },
            },
        },
        {
            "name": "minimap",
            "description": "A preview of the full source code",
            "downloads": 800,
            "stargazers": ["bob", "dave"],
            "created": "2020-07-11T00:00:00Z",
            "updated": "2022-12-24T00:00:00Z",
            "releases": {"latest": "4.40.0"},
            "versions": {
                "4.40.0": {"tarball_url": "https://example.com/minimap/4.40.0.tgz"},
            },
        },
        {
            "name": "emmet",
            "description": "Emmet expands abbreviations",
            "downloads": 50,
            "stargazers": [],
            "created": "2023-01-01T00:00:00Z",
            "updated": "2023-01-02T00:00:00Z",
            "releases": {"latest": "1.0.0"},
            "versions": {
                "1.0.0": {"engines": {"atom": "not a range"}},
            },
        },
        {
            "name": "file-icons",
            "description": "Assign file extension icons and colours",
            "downloads": 800,
            "stargazers": ["carol"],
            "created": "2019-05-05T00:00:00Z",
            "updated": "2023-06-06T00:00:00Z",
        },
    ]
}


def make_package(name: str, downloads: int = 0, stars: int = 0, description: str = "", **kwargs) -> PackageRecord:
    """Build a package record with ``stars`` distinct stargazers."""
    return PackageRecord(
        name=name,
        description=description,
        downloads=downloads,
        stargazers=frozenset(f"user{i}" for i in range(stars)),
        **kwargs
    )


def make_versioned_package(name: str, ranges: Dict[str, str], latest: str = None) -> PackageRecord:
    """Build a package whose versions declare the given engine ranges."""
    versions = {
        version: VersionRecord(version=version, engine_range=engine_range)
        for version, engine_range in ranges.items()
    }
    return PackageRecord(name=name, versions=versions, latest=latest)


def timestamp(year: int, month: int = 1, day: int = 1) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)
