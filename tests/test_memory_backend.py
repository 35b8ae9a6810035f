# tests/test_memory_backend.py

from __future__ import annotations

import pytest

from person_tasks.backends.memory import InMemoryDocumentClient
from person_tasks.core.errors import StoreError, TransactionConflictError
from person_tasks.core.models import Entity, Key, Query


def _put(client: InMemoryDocumentClient, name: str, **props) -> Key:
    key = client.allocate_id("Person")
    client.put(Entity.new(key, {"name": name, **props}))
    return key


def test_allocate_put_get_delete() -> None:
    client = InMemoryDocumentClient(first_id=100)
    key = _put(client, "a")

    assert key == Key("Person", 100)
    assert client.get(key).get("name") == "a"

    client.delete(key)
    client.delete(key)
    assert client.get(key) is None


def test_query_filters_by_kind_and_orders_missing_first() -> None:
    client = InMemoryDocumentClient()
    late = _put(client, "late", created=2)
    legacy = _put(client, "legacy")
    early = _put(client, "early", created=1)
    client.put(Entity.new(Key("Other", 1), {"name": "not a person"}))

    ordered = [e.key for e in client.run_query(Query("Person", order_by=("created",)))]

    assert ordered == [legacy, early, late]


def test_transaction_buffers_writes_until_commit() -> None:
    client = InMemoryDocumentClient()
    key = _put(client, "a")

    txn = client.begin_transaction()
    txn.put(txn.get(key).with_properties(done=True))
    assert client.get(key).get("done") is None

    txn.commit()
    assert client.get(key).get("done") is True
    assert not txn.is_active


def test_rollback_discards_writes() -> None:
    client = InMemoryDocumentClient()
    key = _put(client, "a")

    txn = client.begin_transaction()
    txn.put(txn.get(key).with_properties(done=True))
    txn.rollback()

    assert client.get(key).get("done") is None
    with pytest.raises(StoreError):
        txn.commit()


def test_concurrent_write_makes_commit_conflict() -> None:
    client = InMemoryDocumentClient()
    key = _put(client, "a")

    first = client.begin_transaction()
    second = client.begin_transaction()
    first.put(first.get(key).with_properties(done=True))
    second.put(second.get(key).with_properties(name="renamed"))

    first.commit()
    with pytest.raises(TransactionConflictError):
        second.commit()

    assert client.get(key).get("name") == "a"
    assert client.get(key).get("done") is True
    assert not second.is_active


def test_delete_during_transaction_conflicts() -> None:
    client = InMemoryDocumentClient()
    key = _put(client, "a")

    txn = client.begin_transaction()
    entity = txn.get(key)
    client.delete(key)
    txn.put(entity.with_properties(done=True))

    with pytest.raises(TransactionConflictError):
        txn.commit()
    assert client.get(key) is None


def test_deleting_unknown_key_leaves_no_version_entry() -> None:
    client = InMemoryDocumentClient()

    client.delete(Key("Person", 42))

    assert client._versions == {}
    assert client.count() == 0
