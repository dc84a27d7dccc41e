"""
Core module containing the data model, contracts and error taxonomy.
"""

from .entities import (
    RESOURCES, Reference, DependencyGuard, ResourceDefinition,
    get_definition, create_fields, patch_fields,
)
from .enums import ResourceType, StorageBackend
from .exceptions import (
    RegistrarException, ValidationError, ResourceNotFoundError,
    DependencyError, PersistenceError, ConfigurationError,
)
from .interfaces import Record, Repository, RecordStore

__all__ = [
    # Data model
    "RESOURCES",
    "Reference",
    "DependencyGuard",
    "ResourceDefinition",
    "get_definition",
    "create_fields",
    "patch_fields",

    # Enums
    "ResourceType",
    "StorageBackend",

    # Exceptions
    "RegistrarException",
    "ValidationError",
    "ResourceNotFoundError",
    "DependencyError",
    "PersistenceError",
    "ConfigurationError",

    # Interfaces
    "Record",
    "Repository",
    "RecordStore",
]
