"""
Per-resource orchestration of validation, persistence and expansion.
"""

import logging
from typing import Any, Dict, List, Optional

from ..core.entities import get_definition
from ..core.enums import ResourceType
from ..core.interfaces import Record, RecordStore
from .integrity import ReferentialIntegrityValidator

logger = logging.getLogger(__name__)


class RecordService:
    """CRUD operations for one resource type.

    ``fields`` and ``patch`` arguments are already typed and checked for
    presence by the resource's pydantic models; this layer adds the
    cross-resource rules.
    """

    def __init__(self, store: RecordStore, resource_type: ResourceType,
                 validator: Optional[ReferentialIntegrityValidator] = None):
        self._store = store
        self._definition = get_definition(resource_type)
        self._repository = store.repository(resource_type)
        self._validator = validator or ReferentialIntegrityValidator(store)

    @property
    def definition(self):
        return self._definition

    def _expand(self, records: List[Record]) -> List[Record]:
        for reference in self._definition.references:
            target = self._store.repository(reference.target)
            records = self._repository.populate(records, reference.field, target)
        return records

    def list(self, expand: bool = False) -> List[Record]:
        records = self._repository.list()
        if expand:
            records = self._expand(records)
        return records

    def get(self, record_id: Any, expand: bool = False) -> Record:
        record = self._repository.get(record_id)
        if expand:
            record = self._expand([record])[0]
        return record

    def create(self, fields: Dict[str, Any]) -> Record:
        self._validator.check_references(self._definition, fields)
        record = self._repository.create(fields)
        logger.info("Created %s %s", self._definition.label.lower(), record["id"])
        return record

    def update(self, record_id: Any, patch: Dict[str, Any]) -> Record:
        # 404 takes precedence over an invalid reference
        self._repository.get(record_id)
        self._validator.check_references(self._definition, patch)
        record = self._repository.update(record_id, patch)
        logger.debug("Updated %s %s: %s", self._definition.label.lower(), record["id"], sorted(patch))
        return record

    def delete(self, record_id: Any) -> None:
        record = self._repository.get(record_id)
        self._validator.check_dependents(self._definition, record["id"])
        self._repository.delete(record["id"])
        logger.info("Deleted %s %s", self._definition.label.lower(), record["id"])
