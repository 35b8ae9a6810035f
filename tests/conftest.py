# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from person_tasks.backends.memory import InMemoryDocumentClient
from person_tasks.cli.commands import CommandDispatcher, build_dispatcher
from person_tasks.store.record_store import RecordStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and the store.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="person-tasks-test",
        log_level="DEBUG",
        backend="memory",
        kind="Person",
        order_by_created=True,
        datastore_project=None,
        datastore_namespace=None,
        data_dir=tmp_path / "data",
        db_path=tmp_path / "data" / "records.sqlite3",
        api_host="127.0.0.1",
        api_port=8080,
    )


@pytest.fixture()
def client() -> InMemoryDocumentClient:
    return InMemoryDocumentClient()


@pytest.fixture()
def store(client: InMemoryDocumentClient) -> RecordStore:
    return RecordStore(client)


@pytest.fixture()
def dispatcher(store: RecordStore) -> CommandDispatcher:
    return build_dispatcher(store)
