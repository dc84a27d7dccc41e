"""
Referential integrity between resources.

References are checked at write time against the referenced repository;
dependency guards are checked before a delete against the repositories that
may point at the record.
"""

import logging
from typing import Any, Dict

from ..core.entities import ResourceDefinition
from ..core.exceptions import DependencyError, ValidationError
from ..core.interfaces import RecordStore

logger = logging.getLogger(__name__)


class ReferentialIntegrityValidator:
    """Checks foreign-key-like constraints across the repositories of one store."""

    def __init__(self, store: RecordStore):
        self._store = store

    def check_references(self, definition: ResourceDefinition, fields: Dict[str, Any]) -> None:
        """Raise ValidationError("Invalid <field>") for the first reference in ``fields`` that does not resolve.

        Only reference fields present in ``fields`` are checked, so a partial
        update that leaves a reference alone does not re-validate it.
        """
        for reference in definition.references:
            if reference.field not in fields:
                continue
            target = self._store.repository(reference.target)
            if not target.exists(fields[reference.field]):
                raise ValidationError(f"Invalid {reference.field}", error_code="invalid_reference")

    def check_dependents(self, definition: ResourceDefinition, record_id: Any) -> None:
        """Raise DependencyError if any record still references ``record_id``."""
        for guard in definition.guards:
            dependents = self._store.repository(guard.dependent).find_by(guard.field, record_id)
            if dependents:
                logger.info(
                    "Blocked delete of %s %s: referenced by %d %s",
                    definition.label.lower(), record_id, len(dependents), guard.dependent.value,
                )
                raise DependencyError(guard.message, error_code="has_dependents")
