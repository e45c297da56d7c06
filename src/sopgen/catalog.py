"""SOP catalog loading.

The catalog is a directory of static JSON files:

    data/
      departments.json          {"departments": [{"key": ..., "name": ...}]}
      <department>/index.json   {"instruments": [{"key": ..., "name": ...}]}
      <department>/<sop>.json   {"meta": {"title": ...}, "sections": {...}}
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sopgen.models.sop import SOPRecord

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Raised when catalog data is missing or malformed."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        super().__init__(message)


@dataclass
class CatalogEntry:
    """A selectable department or SOP.

    Attributes:
        key: Identifier used in file paths
        name: Display name
    """

    key: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"key": self.key, "name": self.name}


def _check_key(key: str) -> str:
    if not key or "/" in key or "\\" in key or key in {".", ".."}:
        raise CatalogError(f"Invalid catalog key: {key!r}")
    return key


class Catalog:
    """Reads departments and SOP documents from a data directory.

    Usage:
        catalog = Catalog(Path("data"))
        for dept in catalog.departments():
            print(dept.name)
        record = catalog.load_record("biotech", "autoclave")
    """

    def __init__(self, data_dir: Path) -> None:
        """Initialize catalog.

        Args:
            data_dir: Root directory of the catalog
        """
        self.data_dir = data_dir

    def departments(self) -> list[CatalogEntry]:
        """List departments.

        Returns:
            Departments in file order

        Raises:
            CatalogError: If departments.json is missing or malformed
        """
        data = self._read_json(self.data_dir / "departments.json")
        return self._entries(data, "departments", self.data_dir / "departments.json")

    def sops(self, department: str) -> list[CatalogEntry]:
        """List the SOPs of a department.

        Args:
            department: Department key

        Returns:
            SOP entries in file order
        """
        path = self.data_dir / _check_key(department) / "index.json"
        return self._entries(self._read_json(path), "instruments", path)

    def load_sop(self, department: str, key: str) -> dict[str, Any]:
        """Load the raw JSON document of an SOP.

        Args:
            department: Department key
            key: SOP key

        Returns:
            Parsed JSON object
        """
        path = self.data_dir / _check_key(department) / f"{_check_key(key)}.json"
        data = self._read_json(path)
        if not isinstance(data, dict):
            raise CatalogError(f"SOP document must be a JSON object: {path}", path)

        for name in ("meta", "sections"):
            if data.get(name) is not None and not isinstance(data[name], dict):
                raise CatalogError(f"Expected '{name}' to be an object in {path}", path)

        procedure = (data.get("sections") or {}).get("procedure")
        if procedure is not None and not isinstance(procedure, str | list):
            raise CatalogError(f"Expected 'sections.procedure' to be text or a list in {path}", path)

        return data

    def load_record(
        self,
        department: str,
        key: str,
        defaults: dict[str, str] | None = None,
    ) -> SOPRecord:
        """Load an SOP and normalize it into a record.

        Args:
            department: Department key
            key: SOP key
            defaults: Initial values for fields not in the SOP document

        Returns:
            New SOPRecord
        """
        record = SOPRecord.from_raw(department, self.load_sop(department, key), defaults)
        logger.info("Loaded SOP %s/%s: %s", department, key, record.title or "(untitled)")
        return record

    def _read_json(self, path: Path) -> Any:
        if not path.is_file():
            raise CatalogError(f"Catalog file not found: {path}", path)

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise CatalogError(f"Invalid JSON in {path}: {e}", path) from e

        logger.debug("Read catalog file %s", path)
        return data

    def _entries(self, data: Any, list_key: str, path: Path) -> list[CatalogEntry]:
        items = data.get(list_key) if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise CatalogError(f"Expected a '{list_key}' list in {path}", path)

        entries: list[CatalogEntry] = []
        for item in items:
            if not isinstance(item, dict) or not item.get("key"):
                logger.warning("Skipping malformed entry in %s: %r", path, item)
                continue
            entries.append(CatalogEntry(key=str(item["key"]), name=str(item.get("name") or item["key"])))

        return entries
