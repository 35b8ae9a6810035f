# tests/test_api.py

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from person_tasks.api.app import create_app
from person_tasks.store.record_store import RecordStore

from .fakes import UnreachableDocumentClient


@pytest.fixture()
def api(store: RecordStore) -> TestClient:
    return TestClient(create_app(store))


def test_health_check(api: TestClient) -> None:
    r = api.get("/")
    assert r.status_code == 200
    assert r.text == "OK"
    assert r.headers["content-type"].startswith("text/plain")


def test_get_persons_empty(api: TestClient) -> None:
    r = api.get("/person/get")
    assert r.status_code == 200
    assert r.json() == []


def test_update_adds_and_echoes(api: TestClient, store: RecordStore) -> None:
    r = api.post("/person/update", json={"name": "Pankaj"})
    assert r.status_code == 200
    assert r.json() == {"name": "Pankaj"}

    (person,) = store.list_persons()
    assert person.name == "Pankaj"
    assert person.done is False


def test_update_ignores_id_and_done(api: TestClient, store: RecordStore) -> None:
    r = api.post("/person/update", json={"name": "Lisa", "id": 42, "done": True})
    assert r.status_code == 200
    assert r.json() == {"name": "Lisa", "id": 42, "done": True}

    (person,) = store.list_persons()
    assert person.id != 42
    assert person.done is False


def test_get_returns_formatted_lines_and_ignores_name(api: TestClient, store: RecordStore) -> None:
    a = store.add("Ann")
    b = store.add("Ben")

    r = api.get("/person/get", params={"name": "whatever"})
    assert r.status_code == 200
    assert r.json() == [f"{a} : Ann ", f"{b} : Ben "]


def test_update_requires_name(api: TestClient) -> None:
    r = api.post("/person/update", json={})
    assert r.status_code == 422


def test_blank_name_is_a_bad_request(api: TestClient, store: RecordStore) -> None:
    r = api.post("/person/update", json={"name": "  "})
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_request"
    assert store.list_persons() == []


def test_store_failure_maps_to_503() -> None:
    api = TestClient(create_app(RecordStore(UnreachableDocumentClient("backend down"))))

    r = api.get("/person/get")
    assert r.status_code == 503
    body = r.json()
    assert body["error"] == "store_unavailable"
    assert "backend down" in body["message"]

    r = api.post("/person/update", json={"name": "x"})
    assert r.status_code == 503
