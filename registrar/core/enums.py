"""
Enumerations and constants for the Registrar service.
"""

from enum import Enum


class ResourceType(Enum):
    """Resource types exposed by the API; values double as route and storage names."""
    TEACHER = "teachers"
    COURSE = "courses"
    STUDENT = "students"
    TEST = "tests"


class StorageBackend(Enum):
    """Supported persistence backends."""
    FILE = "file"
    MONGO = "mongo"
