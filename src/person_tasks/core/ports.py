# src/person_tasks/core/ports.py

"""
Ports (interfaces) used by the record store.

The store depends on Protocols instead of a concrete database client.
This keeps the Cloud Datastore / SQLite / in-memory backends swappable
and makes testing easier.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol

from .models import Entity, Key, Query


class Transaction(Protocol):
    """
    Read-modify-write unit.

    Active from begin until commit() or rollback(). commit() raises
    TransactionConflictError if a document read here changed meanwhile.
    """

    @property
    def is_active(self) -> bool: ...

    def get(self, key: Key) -> Entity | None: ...
    def put(self, entity: Entity) -> None: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...


class DocumentClient(Protocol):
    """Key/value document store client. Failures surface as StoreError."""

    def allocate_id(self, kind: str) -> Key: ...
    def put(self, entity: Entity) -> None: ...
    def get(self, key: Key) -> Entity | None: ...

    # Lazy, finite, one-shot.
    def run_query(self, query: Query) -> Iterator[Entity]: ...

    # Deleting a missing key is not an error.
    def delete(self, key: Key) -> None: ...

    def begin_transaction(self) -> Transaction: ...
