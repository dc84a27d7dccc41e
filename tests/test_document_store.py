"""Tests for the MongoDB repositories, run against mongomock."""

import mongomock
import pytest
from bson import ObjectId

from registrar.core.enums import ResourceType, StorageBackend
from registrar.core.exceptions import ConfigurationError, ResourceNotFoundError
from registrar.persistence.document_store import MongoRecordStore


def _teacher(name="A"):
    return {"firstName": name, "lastName": "B", "email": f"{name.lower()}@b.com", "department": "Math", "room": ""}


def _course(teacher_id, code="M101"):
    return {"code": code, "name": "Algebra", "teacherId": teacher_id, "semester": "F24", "room": "101",
            "schedule": ""}


@pytest.fixture
def teachers(mongo_store):
    return mongo_store.repository(ResourceType.TEACHER)


@pytest.fixture
def courses(mongo_store):
    return mongo_store.repository(ResourceType.COURSE)


class TestStore:
    def test_backend(self, mongo_store):
        assert mongo_store.backend is StorageBackend.MONGO
        assert mongo_store.expand_by_default is True

    def test_one_collection_per_resource(self, mongo_store, teachers):
        teachers.create(_teacher())
        assert "teachers" in mongo_store.database.list_collection_names()
        assert mongo_store.database["teachers"].count_documents({}) == 1

    def test_uri_required_without_database(self):
        with pytest.raises(ConfigurationError):
            MongoRecordStore(uri=None)

    def test_reference_fields_indexed(self, mongo_store):
        indexes = mongo_store.database["tests"].index_information()
        assert "studentId_1" in indexes
        assert "courseId_1" in indexes


class TestOperations:
    def test_create_exposes_string_id(self, teachers):
        record = teachers.create(_teacher())
        assert isinstance(record["id"], str)
        assert ObjectId.is_valid(record["id"])
        assert "_id" not in record
        assert teachers.get(record["id"]) == record

    def test_ids_unique(self, teachers):
        ids = {teachers.create(_teacher(name))["id"] for name in ("A", "B", "C")}
        assert len(ids) == 3

    def test_list_in_creation_order(self, teachers):
        for name in ("A", "B", "C"):
            teachers.create(_teacher(name))
        assert [t["firstName"] for t in teachers.list()] == ["A", "B", "C"]

    @pytest.mark.parametrize("record_id", ["999", "not-an-id", None, 1, str(ObjectId())])
    def test_get_unknown_or_unparseable_id(self, teachers, record_id):
        with pytest.raises(ResourceNotFoundError, match="Teacher not found"):
            teachers.get(record_id)

    def test_update_merges_and_keeps_id(self, teachers):
        record = teachers.create(_teacher())
        updated = teachers.update(record["id"], {"room": "B12", "id": "ignored"})
        assert updated == dict(record, room="B12")

    def test_update_with_empty_patch(self, teachers):
        record = teachers.create(_teacher())
        assert teachers.update(record["id"], {}) == record

    def test_update_missing_record(self, teachers):
        with pytest.raises(ResourceNotFoundError):
            teachers.update(str(ObjectId()), {"room": "B12"})

    def test_delete(self, teachers):
        record = teachers.create(_teacher())
        teachers.delete(record["id"])
        assert not teachers.exists(record["id"])
        with pytest.raises(ResourceNotFoundError):
            teachers.delete(record["id"])

    def test_reference_stored_as_object_id(self, mongo_store, teachers, courses):
        teacher = teachers.create(_teacher())
        course = courses.create(_course(teacher["id"]))
        assert course["teacherId"] == teacher["id"]

        raw = mongo_store.database["courses"].find_one({"_id": ObjectId(course["id"])})
        assert raw["teacherId"] == ObjectId(teacher["id"])

    def test_find_by_reference(self, teachers, courses):
        first = teachers.create(_teacher("A"))
        second = teachers.create(_teacher("B"))
        courses.create(_course(first["id"], "M101"))
        courses.create(_course(second["id"], "M102"))

        assert [c["code"] for c in courses.find_by("teacherId", first["id"])] == ["M101"]
        assert courses.find_by("teacherId", "garbage") == []

    def test_populate_replaces_reference(self, teachers, courses):
        teacher = teachers.create(_teacher())
        courses.create(_course(teacher["id"]))

        populated = courses.populate(courses.list(), "teacherId", teachers)
        assert populated[0]["teacherId"] == teacher

    def test_get_many_ignores_unknown(self, teachers):
        teacher = teachers.create(_teacher())
        found = teachers.get_many([teacher["id"], str(ObjectId()), "junk"])
        assert list(found) == [teacher["id"]]


def test_store_over_separate_client_databases():
    client = mongomock.MongoClient()
    first = MongoRecordStore(database=client["one"])
    second = MongoRecordStore(database=client["two"])
    first.repository(ResourceType.STUDENT).create(
        {"firstName": "G", "lastName": "H", "grade": 11, "studentNumber": "S1", "homeroom": ""}
    )
    assert second.repository(ResourceType.STUDENT).list() == []
