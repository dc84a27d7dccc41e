"""
Core interfaces and abstract base classes for the Registrar service.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List

from .entities import ResourceDefinition
from .enums import ResourceType, StorageBackend
from .exceptions import ConfigurationError, ResourceNotFoundError


Record = Dict[str, Any]


class Repository(ABC):
    """Abstract base class for the per-resource stores.

    Records are plain JSON-ready dicts carrying an ``id`` key. Ids arrive
    from the outside world as raw values (path segments, body fields), so
    every method taking an id must cope with one the backend cannot parse
    and treat it as absent.
    """

    def __init__(self, definition: ResourceDefinition):
        self._definition = definition

    @property
    def definition(self) -> ResourceDefinition:
        return self._definition

    @abstractmethod
    def list(self) -> List[Record]:
        """Return every record."""
        pass

    @abstractmethod
    def get(self, record_id: Any) -> Record:
        """Return one record or raise ResourceNotFoundError."""
        pass

    @abstractmethod
    def create(self, fields: Dict[str, Any]) -> Record:
        """Persist a new record under a freshly assigned id."""
        pass

    @abstractmethod
    def update(self, record_id: Any, patch: Dict[str, Any]) -> Record:
        """Merge ``patch`` onto an existing record; the id is never overwritten."""
        pass

    @abstractmethod
    def delete(self, record_id: Any) -> None:
        """Remove a record or raise ResourceNotFoundError."""
        pass

    @abstractmethod
    def find_by(self, field: str, value: Any) -> List[Record]:
        """Return the records whose ``field`` equals ``value``."""
        pass

    @abstractmethod
    def get_many(self, record_ids: Iterable[Any]) -> Dict[Any, Record]:
        """Return the existing records among ``record_ids``, keyed by id."""
        pass

    def exists(self, record_id: Any) -> bool:
        try:
            self.get(record_id)
        except ResourceNotFoundError:
            return False
        return True

    def populate(self, records: List[Record], field: str, target: "Repository") -> List[Record]:
        """Replace ``field`` on each record with the record of ``target`` it references.

        References that no longer resolve are left as raw ids.
        """
        referenced = target.get_many(record[field] for record in records if record.get(field) is not None)
        populated = []
        for record in records:
            value = record.get(field)
            if value is not None and value in referenced:
                record = dict(record, **{field: referenced[value]})
            populated.append(record)
        return populated

    def _not_found(self) -> ResourceNotFoundError:
        return ResourceNotFoundError(self._definition.not_found_message, error_code="not_found")


class RecordStore(ABC):
    """The four repositories of one persistence backend."""

    backend: StorageBackend
    expand_by_default = False

    def __init__(self):
        self._repositories: Dict[ResourceType, Repository] = {}

    def repository(self, resource_type: ResourceType) -> Repository:
        try:
            return self._repositories[resource_type]
        except KeyError:
            raise ConfigurationError(f"No repository registered for {resource_type.value}")

    def close(self) -> None:
        """Release backend resources."""
        pass
