"""
Catalog document loading.

Reads YAML or JSON catalog documents, validates them against the catalog
schema and builds the immutable records the query pipeline consumes.
"""

import logging
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import jsonschema
import yaml

from pkgsearch.core.exceptions import CatalogError
from pkgsearch.core.interfaces import PackageRecord, VersionRecord


logger = logging.getLogger(__name__)


CATALOG_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["packages"],
    "properties": {
        "packages": {
            "type": "array",
            "items": {"$ref": "#/definitions/package"},
        },
    },
    "definitions": {
        "package": {
            "type": "object",
            "required": ["name"],
            "properties": {
                "name": {"type": "string", "minLength": 1},
                "description": {"type": ["string", "null"]},
                "downloads": {"type": "integer", "minimum": 0},
                "stargazers": {"type": "array", "items": {"type": "string"}},
                "repository": {"type": ["string", "null"]},
                "releases": {
                    "type": "object",
                    "properties": {"latest": {"type": ["string", "null"]}},
                },
                "versions": {
                    "type": "object",
                    "additionalProperties": {"$ref": "#/definitions/version"},
                },
            },
        },
        "version": {
            "type": "object",
            "properties": {
                "engines": {
                    "type": "object",
                    "additionalProperties": {"type": "string"},
                },
                "tarball_url": {"type": ["string", "null"]},
                "metadata": {"type": "object"},
            },
        },
    },
}

# Key in a version's "engines" mapping holding the editor compatibility range
ENGINE_NAME = "atom"


class CatalogLoader:
    """
    Loads catalog snapshots from YAML or JSON documents.
    """

    def __init__(self, schema: Optional[Dict[str, Any]] = None):
        self.schema = schema or CATALOG_SCHEMA
        self.validator = jsonschema.Draft7Validator(self.schema)

    def load_file(self, path: Union[str, Path]) -> List[PackageRecord]:
        """
        Load a catalog document from disk.

        Args:
            path: Path to a YAML or JSON catalog file.

        Returns:
            Catalog records in document order.

        Raises:
            CatalogError: If the file cannot be read, parsed or validated.
        """
        path = Path(path).expanduser()
        try:
            with open(path, 'r', encoding='utf-8') as f:
                document = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise CatalogError(f"Error parsing catalog {path}: {e}")
        except IOError as e:
            raise CatalogError(f"Error reading catalog {path}: {e}")

        packages = self.load_document(document)
        logger.debug(f"Loaded {len(packages)} packages from {path}")
        return packages

    def load_document(self, document: Any) -> List[PackageRecord]:
        """
        Build records from an already parsed catalog document.

        Raises:
            CatalogError: If the document does not match the catalog schema.
        """
        if document is None:
            document = {"packages": []}

        errors = sorted(self.validator.iter_errors(document), key=lambda error: list(error.absolute_path))
        if errors:
            details = "; ".join(
                f"{'/'.join(str(part) for part in error.absolute_path) or '<root>'}: {error.message}"
                for error in errors[:5]
            )
            raise CatalogError(f"Catalog failed validation: {details}")

        packages = []
        seen = set()
        for entry in document["packages"]:
            record = self._build_package(entry)
            if record.name in seen:
                raise CatalogError(f"Duplicate package name in catalog: {record.name}")
            seen.add(record.name)
            packages.append(record)
        return packages

    def _build_package(self, entry: Dict[str, Any]) -> PackageRecord:
        name = entry["name"]
        versions = {}
        for version, data in (entry.get("versions") or {}).items():
            version = str(version)
            versions[version] = VersionRecord(
                version=version,
                engine_range=(data.get("engines") or {}).get(ENGINE_NAME),
                tarball_url=data.get("tarball_url"),
                metadata=dict(data.get("metadata") or {}),
            )

        latest = (entry.get("releases") or {}).get("latest")
        if latest is not None and latest not in versions:
            logger.warning(f"Package {name} points its latest release at unknown version {latest}")

        return PackageRecord(
            name=name,
            description=entry.get("description") or "",
            versions=versions,
            downloads=entry.get("downloads", 0),
            stargazers=frozenset(entry.get("stargazers") or []),
            created=self._parse_timestamp(name, "created", entry.get("created")),
            updated=self._parse_timestamp(name, "updated", entry.get("updated")),
            latest=latest,
            repository=entry.get("repository"),
        )

    @staticmethod
    def _parse_timestamp(name: str, field_name: str, value: Any) -> Optional[datetime]:
        # YAML turns unquoted ISO timestamps into datetime/date objects already
        if value is None:
            return None
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime.combine(value, time.min, tzinfo=timezone.utc)
        if isinstance(value, str):
            text = value.strip()
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            try:
                return datetime.fromisoformat(text)
            except ValueError:
                pass
        raise CatalogError(f"Package {name} has an invalid '{field_name}' timestamp: {value!r}")


def load_catalog(path: Union[str, Path]) -> List[PackageRecord]:
    """Load a catalog file with the default schema."""
    return CatalogLoader().load_file(path)
