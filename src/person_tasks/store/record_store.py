# src/person_tasks/store/record_store.py

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import datetime, timezone

from ..core.errors import UserInputError
from ..core.models import Entity, Key, PersonRecord, Query
from ..core.ports import DocumentClient

logger = logging.getLogger(__name__)

DEFAULT_KIND = "Person"


class RecordStore:
    """
    Person/Task records on top of a DocumentClient.

    Holds nothing but the client handle and the kind, so a single instance
    can be shared by the console loop and concurrent API requests.

    Document layout:
    - name     text, excluded from indexes
    - created  UTC timestamp set on add (used for list ordering)
    - done     bool, absent until mark_done()
    """

    def __init__(
        self,
        client: DocumentClient,
        *,
        kind: str = DEFAULT_KIND,
        order_by_created: bool = True,
    ) -> None:
        if not kind or not kind.strip():
            raise ValueError("kind is required")
        self._client = client
        self._kind = kind.strip()
        self._order_by_created = order_by_created

    @property
    def kind(self) -> str:
        return self._kind

    def key(self, record_id: int) -> Key:
        return Key(kind=self._kind, id=int(record_id))

    def add(self, name: str) -> int:
        """
        Allocate an id and write a new record.

        Raises UserInputError for a blank name, StoreError if the store fails.
        """
        if name is None or not str(name).strip():
            raise UserInputError("name is required")

        key = self._client.allocate_id(self._kind)
        entity = Entity.new(
            key,
            {"name": name, "created": datetime.now(timezone.utc)},
            exclude_from_indexes=("name",),
        )
        self._client.put(entity)
        logger.info("Person added : %s (id=%s)", name, key.id)
        return key.id

    def mark_done(self, record_id: int) -> bool:
        """
        Set done=True inside a transaction.

        Returns True if the record exists. A missing record commits a no-op.
        If anything fails before commit, the transaction is rolled back and
        the error propagates.
        """
        txn = self._client.begin_transaction()
        try:
            entity = txn.get(self.key(record_id))
            if entity is not None:
                txn.put(entity.with_properties(done=True))
            txn.commit()
            logger.debug("mark_done id=%s found=%s", record_id, entity is not None)
            return entity is not None
        finally:
            if txn.is_active:
                logger.debug("Rolling back mark_done transaction id=%s", record_id)
                txn.rollback()

    def list_records(self) -> Iterator[Entity]:
        """
        All records of this kind as a lazy one-shot iterator.

        With order_by_created the query sorts by creation time ascending;
        otherwise the order is whatever the store returns. Cloud Datastore
        leaves documents without a "created" property out of ordered
        queries, so records written before it existed only show up with
        ordering disabled.
        """
        order_by = ("created",) if self._order_by_created else ()
        return self._client.run_query(Query(kind=self._kind, order_by=order_by))

    def list_persons(self) -> list[PersonRecord]:
        return [PersonRecord.from_entity(e) for e in self.list_records()]

    def delete(self, record_id: int) -> None:
        """Delete unconditionally. A missing id is not an error."""
        self._client.delete(self.key(record_id))
        logger.info("Person deleted (if it existed) id=%s", record_id)
