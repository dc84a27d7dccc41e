"""
Flat-file persistence: one pretty-printed JSON array per resource type.

Every operation loads the whole array from disk and every mutation rewrites
the whole file. Nothing is cached between operations.
"""

import json
import logging
import os
import threading
from typing import Any, Dict, Iterable, List, Optional

from ..core.entities import RESOURCES, ResourceDefinition
from ..core.enums import StorageBackend
from ..core.exceptions import PersistenceError
from ..core.interfaces import Record, RecordStore, Repository

logger = logging.getLogger(__name__)


class JsonFileRepository(Repository):
    """File-based repository holding one resource type in ``<base_path>/<resource>.json``."""

    def __init__(self, definition: ResourceDefinition, base_path: str = "data"):
        super().__init__(definition)
        self._path = os.path.join(base_path, f"{definition.name}.json")
        self._lock = threading.RLock()

    @property
    def path(self) -> str:
        return self._path

    def _load(self) -> List[Record]:
        """Load the full array; a missing file is an empty collection."""
        if not os.path.exists(self._path):
            return []

        try:
            with open(self._path, "r", encoding="utf-8") as f:
                records = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Failed to read {self._path}: {str(e)}")

        if not isinstance(records, list):
            raise PersistenceError(f"Failed to read {self._path}: expected a JSON array")
        return records

    def _save(self, records: List[Record]) -> None:
        try:
            with open(self._path, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2)
        except OSError as e:
            raise PersistenceError(f"Failed to write {self._path}: {str(e)}")

    @staticmethod
    def _coerce_id(value: Any) -> Optional[int]:
        """Parse an id the way it arrives from a path or a body; None if it is not one."""
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                return None
        return None

    @staticmethod
    def _next_id(records: List[Record]) -> int:
        if not records:
            return 1
        return max(record["id"] for record in records) + 1

    def _normalize_references(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        for field in self._definition.reference_fields:
            if field in fields:
                coerced = self._coerce_id(fields[field])
                if coerced is not None:
                    fields[field] = coerced
        return fields

    def _index_of(self, records: List[Record], record_id: Any) -> int:
        wanted = self._coerce_id(record_id)
        if wanted is not None:
            for index, record in enumerate(records):
                if record.get("id") == wanted:
                    return index
        return -1

    def list(self) -> List[Record]:
        with self._lock:
            return self._load()

    def get(self, record_id: Any) -> Record:
        with self._lock:
            records = self._load()
            index = self._index_of(records, record_id)
            if index == -1:
                raise self._not_found()
            return records[index]

    def create(self, fields: Dict[str, Any]) -> Record:
        with self._lock:
            records = self._load()
            fields = {name: value for name, value in fields.items() if name != "id"}
            record = {"id": self._next_id(records)}
            record.update(self._normalize_references(fields))

            records.append(record)
            self._save(records)
            return record

    def update(self, record_id: Any, patch: Dict[str, Any]) -> Record:
        with self._lock:
            records = self._load()
            index = self._index_of(records, record_id)
            if index == -1:
                raise self._not_found()

            current = records[index]
            merged = dict(current)
            merged.update(self._normalize_references(dict(patch)))
            merged["id"] = current["id"]

            records[index] = merged
            self._save(records)
            return merged

    def delete(self, record_id: Any) -> None:
        with self._lock:
            records = self._load()
            index = self._index_of(records, record_id)
            if index == -1:
                raise self._not_found()

            del records[index]
            self._save(records)

    def find_by(self, field: str, value: Any) -> List[Record]:
        if field in self._definition.reference_fields:
            value = self._coerce_id(value)
        with self._lock:
            return [record for record in self._load() if record.get(field) == value]

    def get_many(self, record_ids: Iterable[Any]) -> Dict[Any, Record]:
        wanted = {self._coerce_id(record_id) for record_id in record_ids}
        wanted.discard(None)
        if not wanted:
            return {}
        with self._lock:
            return {record["id"]: record for record in self._load() if record.get("id") in wanted}


class FileRecordStore(RecordStore):
    """Record store backed by a directory of JSON files."""

    backend = StorageBackend.FILE
    expand_by_default = False

    def __init__(self, base_path: str = "data"):
        super().__init__()
        self._base_path = base_path
        self._ensure_directory_exists()

        for resource_type, definition in RESOURCES.items():
            self._repositories[resource_type] = JsonFileRepository(definition, base_path)

        logger.info("File record store initialized at %s", os.path.abspath(base_path))

    @property
    def base_path(self) -> str:
        return self._base_path

    def _ensure_directory_exists(self) -> None:
        """Ensure the data directory exists."""
        try:
            os.makedirs(self._base_path, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"Failed to create data directory {self._base_path}: {str(e)}")
