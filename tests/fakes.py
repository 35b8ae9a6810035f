# tests/fakes.py

from __future__ import annotations

from collections.abc import Iterator

from person_tasks.backends.memory import InMemoryDocumentClient
from person_tasks.core.errors import StoreError, StoreUnavailableError
from person_tasks.core.models import Entity, Key, Query


class UnreachableDocumentClient:
    """DocumentClient whose every call fails like a store that is down."""

    def __init__(self, message: str = "datastore unreachable") -> None:
        self.message = message
        self.calls: list[str] = []

    def _fail(self, op: str):
        self.calls.append(op)
        raise StoreUnavailableError(self.message)

    def allocate_id(self, kind: str) -> Key:
        return self._fail("allocate_id")

    def put(self, entity: Entity) -> None:
        self._fail("put")

    def get(self, key: Key) -> Entity | None:
        return self._fail("get")

    def run_query(self, query: Query) -> Iterator[Entity]:
        return self._fail("run_query")

    def delete(self, key: Key) -> None:
        self._fail("delete")

    def begin_transaction(self):
        return self._fail("begin_transaction")


class RecordingTransaction:
    """
    Wraps a real transaction and records what happened to it.

    fail_on_put makes put() raise, to exercise rollback paths.
    """

    def __init__(self, inner, *, fail_on_put: bool = False) -> None:
        self._inner = inner
        self.fail_on_put = fail_on_put
        self.events: list[str] = []

    @property
    def is_active(self) -> bool:
        return self._inner.is_active

    def get(self, key: Key) -> Entity | None:
        self.events.append("get")
        return self._inner.get(key)

    def put(self, entity: Entity) -> None:
        self.events.append("put")
        if self.fail_on_put:
            raise StoreError("write rejected")
        self._inner.put(entity)

    def commit(self) -> None:
        self.events.append("commit")
        self._inner.commit()

    def rollback(self) -> None:
        self.events.append("rollback")
        self._inner.rollback()


class RecordingDocumentClient(InMemoryDocumentClient):
    """In-memory client that keeps every transaction it hands out."""

    def __init__(self, *, fail_on_put: bool = False) -> None:
        super().__init__()
        self.fail_on_put = fail_on_put
        self.transactions: list[RecordingTransaction] = []
        self.queries: list[Query] = []

    def begin_transaction(self) -> RecordingTransaction:
        txn = RecordingTransaction(super().begin_transaction(), fail_on_put=self.fail_on_put)
        self.transactions.append(txn)
        return txn

    def run_query(self, query: Query) -> Iterator[Entity]:
        self.queries.append(query)
        return super().run_query(query)
