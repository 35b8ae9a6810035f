# src/person_tasks/backends/memory.py

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Iterator
from typing import Any

from ..core.errors import StoreError, TransactionConflictError
from ..core.models import Entity, Key, Query

logger = logging.getLogger(__name__)


def _sort_key(entity: Entity, order_by: tuple[str, ...]) -> tuple[Any, ...]:
    # Missing properties sort first: (0, 0) < (1, value) for any value.
    parts: list[Any] = []
    for name in order_by:
        value = entity.get(name)
        parts.append((0, 0) if value is None else (1, value))
    parts.append(entity.key.id)
    return tuple(parts)


class InMemoryTransaction:
    """
    Optimistic transaction over InMemoryDocumentClient.

    Remembers the version of every key it reads; commit() fails if any of
    them changed since. Writes are buffered until commit.
    """

    def __init__(self, client: InMemoryDocumentClient) -> None:
        self._client = client
        self._read_versions: dict[Key, int] = {}
        self._writes: dict[Key, Entity] = {}
        self._active = True

    @property
    def is_active(self) -> bool:
        return self._active

    def _ensure_active(self) -> None:
        if not self._active:
            raise StoreError("transaction is no longer active")

    def get(self, key: Key) -> Entity | None:
        self._ensure_active()
        if key in self._writes:
            return self._writes[key]
        entity, version = self._client._read(key)
        self._read_versions.setdefault(key, version)
        return entity

    def put(self, entity: Entity) -> None:
        self._ensure_active()
        self._writes[entity.key] = entity

    def commit(self) -> None:
        self._ensure_active()
        try:
            self._client._apply(self._read_versions, self._writes)
        finally:
            self._active = False

    def rollback(self) -> None:
        self._ensure_active()
        self._writes.clear()
        self._active = False


class InMemoryDocumentClient:
    """
    Process-local DocumentClient.

    Used by tests and by the "memory" backend for throwaway sessions.
    Thread-safe: every operation takes the same lock.
    """

    def __init__(self, *, first_id: int = 1) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(first_id)
        self._docs: dict[Key, Entity] = {}
        self._versions: dict[Key, int] = {}

    # ---- internal helpers (used by InMemoryTransaction) ----

    def _read(self, key: Key) -> tuple[Entity | None, int]:
        with self._lock:
            return self._docs.get(key), self._versions.get(key, 0)

    def _write_locked(self, entity: Entity) -> None:
        self._docs[entity.key] = entity
        self._versions[entity.key] = self._versions.get(entity.key, 0) + 1

    def _apply(self, read_versions: dict[Key, int], writes: dict[Key, Entity]) -> None:
        with self._lock:
            for key, seen in read_versions.items():
                if self._versions.get(key, 0) != seen:
                    logger.info("Transaction conflict on %s", key)
                    raise TransactionConflictError(f"concurrent modification of {key.kind}/{key.id}")
            for entity in writes.values():
                self._write_locked(entity)

    # ---- DocumentClient ----

    def allocate_id(self, kind: str) -> Key:
        with self._lock:
            return Key(kind=kind, id=next(self._ids))

    def put(self, entity: Entity) -> None:
        with self._lock:
            self._write_locked(entity)

    def get(self, key: Key) -> Entity | None:
        return self._read(key)[0]

    def run_query(self, query: Query) -> Iterator[Entity]:
        with self._lock:
            matches = [e for k, e in self._docs.items() if k.kind == query.kind]
        if query.order_by:
            matches.sort(key=lambda e: _sort_key(e, query.order_by))
        return iter(matches)

    def delete(self, key: Key) -> None:
        with self._lock:
            self._docs.pop(key, None)
            # Bump the version so a concurrent transaction that read it conflicts.
            if key in self._versions:
                self._versions[key] += 1

    def begin_transaction(self) -> InMemoryTransaction:
        return InMemoryTransaction(self)

    def count(self, kind: str | None = None) -> int:
        with self._lock:
            if kind is None:
                return len(self._docs)
            return sum(1 for k in self._docs if k.kind == kind)
