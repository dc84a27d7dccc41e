"""
MongoDB persistence: one collection per resource type.

Records are exposed with a string ``id`` (the hex form of the document's
``ObjectId``); reference fields are stored as ``ObjectId`` so that they can be
resolved with a single ``$in`` query when a read asks for expansion.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from pymongo import ASCENDING, MongoClient, ReturnDocument
from pymongo.database import Database
from pymongo.errors import PyMongoError

from ..core.entities import RESOURCES, ResourceDefinition
from ..core.enums import StorageBackend
from ..core.exceptions import ConfigurationError, PersistenceError
from ..core.interfaces import Record, RecordStore, Repository

logger = logging.getLogger(__name__)


class MongoRepository(Repository):
    """Collection-backed repository for one resource type."""

    def __init__(self, definition: ResourceDefinition, database: Database):
        super().__init__(definition)
        self._collection = database[definition.name]

    @contextmanager
    def _translate_errors(self, action: str):
        try:
            yield
        except PyMongoError as e:
            raise PersistenceError(f"Failed to {action} {self._definition.name}: {str(e)}")

    @staticmethod
    def _coerce_id(value: Any) -> Optional[ObjectId]:
        if isinstance(value, ObjectId):
            return value
        if isinstance(value, str) and ObjectId.is_valid(value):
            return ObjectId(value)
        return None

    def _to_document(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        document = {name: value for name, value in fields.items() if name not in ("id", "_id")}
        for field in self._definition.reference_fields:
            if field in document:
                coerced = self._coerce_id(document[field])
                if coerced is not None:
                    document[field] = coerced
        return document

    @staticmethod
    def _to_record(document: Dict[str, Any]) -> Record:
        record = {"id": str(document["_id"])}
        for name, value in document.items():
            if name == "_id":
                continue
            record[name] = str(value) if isinstance(value, ObjectId) else value
        return record

    def list(self) -> List[Record]:
        with self._translate_errors("list"):
            return [self._to_record(doc) for doc in self._collection.find().sort("_id", ASCENDING)]

    def get(self, record_id: Any) -> Record:
        oid = self._coerce_id(record_id)
        if oid is None:
            raise self._not_found()

        with self._translate_errors("read"):
            document = self._collection.find_one({"_id": oid})
        if document is None:
            raise self._not_found()
        return self._to_record(document)

    def create(self, fields: Dict[str, Any]) -> Record:
        document = self._to_document(fields)
        with self._translate_errors("create"):
            result = self._collection.insert_one(document)
        document["_id"] = result.inserted_id
        return self._to_record(document)

    def update(self, record_id: Any, patch: Dict[str, Any]) -> Record:
        oid = self._coerce_id(record_id)
        if oid is None:
            raise self._not_found()

        changes = self._to_document(patch)
        if not changes:
            return self.get(oid)

        with self._translate_errors("update"):
            document = self._collection.find_one_and_update(
                {"_id": oid},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        if document is None:
            raise self._not_found()
        return self._to_record(document)

    def delete(self, record_id: Any) -> None:
        oid = self._coerce_id(record_id)
        if oid is None:
            raise self._not_found()

        with self._translate_errors("delete"):
            result = self._collection.delete_one({"_id": oid})
        if result.deleted_count == 0:
            raise self._not_found()

    def find_by(self, field: str, value: Any) -> List[Record]:
        if field in self._definition.reference_fields:
            value = self._coerce_id(value)
            if value is None:
                return []

        with self._translate_errors("query"):
            return [self._to_record(doc) for doc in self._collection.find({field: value})]

    def get_many(self, record_ids: Iterable[Any]) -> Dict[Any, Record]:
        oids = {self._coerce_id(record_id) for record_id in record_ids}
        oids.discard(None)
        if not oids:
            return {}

        with self._translate_errors("read"):
            documents = self._collection.find({"_id": {"$in": list(oids)}})
            return {str(doc["_id"]): self._to_record(doc) for doc in documents}

    def ensure_indexes(self) -> None:
        """Index reference fields; dependency guards query them on every delete."""
        with self._translate_errors("index"):
            for field in self._definition.reference_fields:
                self._collection.create_index(field)


class MongoRecordStore(RecordStore):
    """Record store backed by a MongoDB database.

    Pass either a connection ``uri`` or an already opened ``database``
    (any object speaking the pymongo ``Database`` API).
    """

    backend = StorageBackend.MONGO
    expand_by_default = True

    def __init__(self, uri: Optional[str] = None, database_name: str = "registrar",
                 database: Optional[Database] = None):
        super().__init__()
        self._client = None

        if database is None:
            if not uri:
                raise ConfigurationError("A MongoDB URI is required for the mongo backend")
            self._client = MongoClient(uri)
            database = self._client[database_name]
        self._database = database

        for resource_type, definition in RESOURCES.items():
            repository = MongoRepository(definition, database)
            repository.ensure_indexes()
            self._repositories[resource_type] = repository

        logger.info("MongoDB record store initialized on database %s", database.name)

    @property
    def database(self) -> Database:
        return self._database

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.info("MongoDB connection closed")
