"""
Factory for building the record store selected by configuration.
"""

from typing import Union

from ..core.enums import StorageBackend
from ..core.exceptions import ConfigurationError
from ..core.interfaces import RecordStore


class StoreFactory:
    """Factory for creating record store instances."""

    @staticmethod
    def create_store(backend: Union[str, StorageBackend], **kwargs) -> RecordStore:
        """Create a record store based on backend name."""
        try:
            backend = StorageBackend(backend.lower() if isinstance(backend, str) else backend)
        except ValueError:
            raise ConfigurationError(f"Unsupported storage backend: {backend}")

        if backend is StorageBackend.FILE:
            from .file_store import FileRecordStore
            return FileRecordStore(**kwargs)
        elif backend is StorageBackend.MONGO:
            from .document_store import MongoRecordStore
            return MongoRecordStore(**kwargs)
        else:
            raise ConfigurationError(f"Unsupported storage backend: {backend}")
