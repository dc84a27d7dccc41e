"""Shared fixtures: a file store on tmp_path, a MongoDB store on mongomock, and API clients."""

import mongomock
import pytest
from fastapi.testclient import TestClient

from registrar.api.rest_api import RegistrarRestAPI
from registrar.persistence.document_store import MongoRecordStore
from registrar.persistence.file_store import FileRecordStore


@pytest.fixture
def file_store(tmp_path):
    return FileRecordStore(str(tmp_path / "data"))


@pytest.fixture
def mongo_store():
    client = mongomock.MongoClient()
    store = MongoRecordStore(database=client["registrar_test"])
    yield store
    store.close()


@pytest.fixture(params=["file", "mongo"])
def store(request):
    """Either backend; tests using it must hold for both."""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def client(store):
    with TestClient(RegistrarRestAPI(store).app) as c:
        yield c


@pytest.fixture
def file_client(file_store):
    with TestClient(RegistrarRestAPI(file_store).app) as c:
        yield c


@pytest.fixture
def teacher_payload():
    return {"firstName": "A", "lastName": "B", "email": "a@b.com", "department": "Math"}


@pytest.fixture
def student_payload():
    return {"firstName": "Grace", "lastName": "Hopper", "grade": 11, "studentNumber": "S1001"}


@pytest.fixture
def course_payload():
    """Course body without teacherId; tests add the id of a teacher they created."""
    return {"code": "M101", "name": "Algebra", "semester": "F24", "room": "101"}


@pytest.fixture
def exam_payload():
    """Test body without studentId/courseId."""
    return {"testName": "Unit 1 Quiz", "date": "2024-09-20", "mark": 18, "outOf": 20}
