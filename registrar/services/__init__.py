"""
Services module: referential integrity and per-resource record operations.
"""

from .integrity import ReferentialIntegrityValidator
from .record_service import RecordService

__all__ = [
    "ReferentialIntegrityValidator",
    "RecordService",
]
