"""
Persistence module: the file and MongoDB record stores.
"""

from .factory import StoreFactory
from .file_store import JsonFileRepository, FileRecordStore

__all__ = [
    "StoreFactory",
    "JsonFileRepository",
    "FileRecordStore",
]
