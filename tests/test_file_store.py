"""Tests for the JSON file repositories."""

import json
import os

import pytest

from registrar.core.enums import ResourceType, StorageBackend
from registrar.core.exceptions import PersistenceError, ResourceNotFoundError
from registrar.persistence.file_store import FileRecordStore


def _teacher(name="A"):
    return {"firstName": name, "lastName": "B", "email": f"{name.lower()}@b.com", "department": "Math", "room": ""}


@pytest.fixture
def teachers(file_store):
    return file_store.repository(ResourceType.TEACHER)


@pytest.fixture
def courses(file_store):
    return file_store.repository(ResourceType.COURSE)


class TestIdentifierAssignment:
    def test_sequential_ids_from_one(self, teachers):
        ids = [teachers.create(_teacher(name))["id"] for name in ("A", "B", "C", "D")]
        assert ids == [1, 2, 3, 4]

    def test_interior_delete_does_not_reuse_id(self, teachers):
        for name in ("A", "B", "C"):
            teachers.create(_teacher(name))
        teachers.delete(2)
        assert teachers.create(_teacher("D"))["id"] == 4

    def test_deleting_the_maximum_frees_its_id(self, teachers):
        teachers.create(_teacher("A"))
        teachers.create(_teacher("B"))
        teachers.delete(2)
        assert teachers.create(_teacher("C"))["id"] == 2

    def test_id_in_fields_is_ignored(self, teachers):
        fields = dict(_teacher(), id=99)
        assert teachers.create(fields)["id"] == 1


class TestFileLayout:
    def test_store_reports_backend(self, file_store):
        assert file_store.backend is StorageBackend.FILE
        assert file_store.expand_by_default is False

    def test_data_directory_created(self, tmp_path):
        FileRecordStore(str(tmp_path / "nested" / "data"))
        assert (tmp_path / "nested" / "data").is_dir()

    def test_missing_file_is_empty_collection(self, teachers):
        assert not os.path.exists(teachers.path)
        assert teachers.list() == []

    def test_one_pretty_printed_array_per_resource(self, file_store, teachers):
        teachers.create(_teacher())
        path = os.path.join(file_store.base_path, "teachers.json")
        assert teachers.path == path

        with open(path, encoding="utf-8") as f:
            text = f.read()
        assert text.startswith("[\n  {\n")
        assert json.loads(text) == [dict(_teacher(), id=1)]

    def test_every_mutation_rewrites_the_file(self, teachers):
        teachers.create(_teacher("A"))
        teachers.create(_teacher("B"))
        teachers.update(1, {"room": "B12"})
        teachers.delete(2)

        with open(teachers.path, encoding="utf-8") as f:
            on_disk = json.load(f)
        assert on_disk == [dict(_teacher("A"), id=1, room="B12")]

    def test_external_edits_are_seen(self, teachers):
        teachers.create(_teacher())
        with open(teachers.path, "w", encoding="utf-8") as f:
            json.dump([dict(_teacher("Z"), id=7)], f)
        assert teachers.get(7)["firstName"] == "Z"
        assert teachers.create(_teacher())["id"] == 8

    def test_corrupt_file_raises_persistence_error(self, teachers):
        with open(teachers.path, "w", encoding="utf-8") as f:
            f.write("{not json")
        with pytest.raises(PersistenceError):
            teachers.list()

    def test_non_array_file_raises_persistence_error(self, teachers):
        with open(teachers.path, "w", encoding="utf-8") as f:
            json.dump({"id": 1}, f)
        with pytest.raises(PersistenceError):
            teachers.list()


class TestOperations:
    def test_get_accepts_string_ids(self, teachers):
        teachers.create(_teacher())
        assert teachers.get("1")["id"] == 1

    @pytest.mark.parametrize("record_id", [5, "5", "abc", None, "1.5"])
    def test_get_unknown_or_unparseable_id(self, teachers, record_id):
        teachers.create(_teacher())
        with pytest.raises(ResourceNotFoundError, match="Teacher not found"):
            teachers.get(record_id)

    def test_update_merges_and_keeps_id(self, teachers):
        teachers.create(_teacher())
        updated = teachers.update("1", {"room": "B12", "id": 50})
        assert updated == dict(_teacher(), id=1, room="B12")

    def test_update_missing_record(self, teachers):
        with pytest.raises(ResourceNotFoundError):
            teachers.update(1, {"room": "B12"})

    def test_delete_missing_record(self, teachers):
        with pytest.raises(ResourceNotFoundError):
            teachers.delete(1)

    def test_exists(self, teachers):
        teachers.create(_teacher())
        assert teachers.exists(1)
        assert teachers.exists("1")
        assert not teachers.exists(2)
        assert not teachers.exists("x")

    def test_reference_stored_as_integer(self, teachers, courses):
        teachers.create(_teacher())
        course = courses.create({"code": "M101", "name": "Algebra", "teacherId": "1",
                                 "semester": "F24", "room": "101", "schedule": ""})
        assert course["teacherId"] == 1

    def test_find_by_reference(self, teachers, courses):
        teachers.create(_teacher("A"))
        teachers.create(_teacher("B"))
        courses.create({"code": "M101", "name": "Algebra", "teacherId": 1, "semester": "F24", "room": "1"})
        courses.create({"code": "M102", "name": "Geometry", "teacherId": 2, "semester": "F24", "room": "2"})

        assert [c["code"] for c in courses.find_by("teacherId", 1)] == ["M101"]
        assert [c["code"] for c in courses.find_by("teacherId", "2")] == ["M102"]
        assert courses.find_by("teacherId", 3) == []

    def test_get_many(self, teachers):
        for name in ("A", "B", "C"):
            teachers.create(_teacher(name))
        found = teachers.get_many([1, "3", 9, "x"])
        assert sorted(found) == [1, 3]
        assert found[3]["firstName"] == "C"

    def test_populate_replaces_reference(self, teachers, courses):
        teachers.create(_teacher())
        courses.create({"code": "M101", "name": "Algebra", "teacherId": 1, "semester": "F24", "room": "101"})

        populated = courses.populate(courses.list(), "teacherId", teachers)
        assert populated[0]["teacherId"] == dict(_teacher(), id=1)
        # the stored record is untouched
        assert courses.get(1)["teacherId"] == 1

    def test_populate_leaves_dangling_reference(self, teachers, courses):
        courses.create({"code": "M101", "name": "Algebra", "teacherId": 7, "semester": "F24", "room": "101"})
        populated = courses.populate(courses.list(), "teacherId", teachers)
        assert populated[0]["teacherId"] == 7
