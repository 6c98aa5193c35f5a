"""
Engine compatibility filtering for package detail views.
"""

import logging
from dataclasses import replace
from typing import Optional

from pkgsearch.core.exceptions import MalformedEngineRange
from pkgsearch.core.interfaces import PackageRecord, VersionRecord
from pkgsearch.core.semver import parse_range, parse_version


logger = logging.getLogger(__name__)


class EngineCompatibilityFilter:
    """
    Keeps only the versions of a package that support a given engine version.

    Only single-package views are filtered; listings and searches show every
    package regardless of engine.
    """

    def filter(self, package: PackageRecord, requested_version: Optional[str]) -> PackageRecord:
        """
        Filter a package's versions by engine compatibility.

        Args:
            package: Package to filter.
            requested_version: Engine version requested by the client.

        Returns:
            A package holding only compatible versions, with ``latest`` pointing
            at the highest of them. The package itself is returned unchanged
            when the requested version is missing or not a semver.
        """
        engine = parse_version(requested_version) if requested_version else None
        if engine is None:
            if requested_version:
                logger.debug(f"Ignoring engine filter with invalid version '{requested_version}'")
            return package

        versions = {
            name: record
            for name, record in package.versions.items()
            if self.is_compatible(package.name, record, engine)
        }

        latest = package.latest
        if latest not in versions:
            parsed = [(parse_version(name), name) for name in versions]
            parsed = [(version, name) for version, name in parsed if version is not None]
            latest = max(parsed)[1] if parsed else None

        return replace(package, versions=versions, latest=latest)

    def is_compatible(self, package_name: str, record: VersionRecord, engine) -> bool:
        """
        Check whether a version declares support for ``engine``.

        Versions declaring no range, or a range that cannot be parsed, are kept.
        """
        if not record.engine_range:
            return True
        try:
            return parse_range(record.engine_range).contains(engine)
        except MalformedEngineRange as e:
            logger.warning(f"Keeping {package_name}@{record.version}: {e}")
            return True
