"""Tests for the sample-data loader, driven against an in-process API."""

import pytest
from fastapi.testclient import TestClient

import add_data
from registrar.api.rest_api import RegistrarRestAPI


BASE_URL = "http://testserver"


@pytest.fixture
def session(store):
    with TestClient(RegistrarRestAPI(store).app) as c:
        yield c


def test_check_server(session):
    assert add_data.check_server(BASE_URL, session=session)


def test_detect_base_url_prefers_environment(monkeypatch):
    monkeypatch.setenv("REGISTRAR_BASE_URL", "http://registrar.local:9000/")
    assert add_data.detect_base_url() == "http://registrar.local:9000"


def test_add_sample_data(session):
    created = add_data.add_sample_data(BASE_URL, session=session)

    assert len(created["teachers"]) == 3
    assert len(created["courses"]) == 3
    assert len(created["students"]) == 4
    assert len(created["tests"]) == 4

    listed = add_data.list_resource(BASE_URL, "tests", session=session)
    assert [t["id"] for t in listed] == [t["id"] for t in created["tests"]]

    # the loader's data is wired together, so the guards apply to it
    teacher_id = created["teachers"][0]["id"]
    assert session.delete(f"/teachers/{teacher_id}").status_code == 400


def test_failed_create_returns_none(session):
    assert add_data.create_course(BASE_URL, "X1", "Nothing", "999", "F24", "1", session=session) is None
