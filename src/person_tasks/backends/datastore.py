# src/person_tasks/backends/datastore.py

"""
Google Cloud Datastore backend.

Thin adapter: converts between our Key/Entity/Query types and the
google-cloud-datastore ones, and turns Google API errors into StoreError.
Authentication uses Application Default Credentials
(`gcloud auth application-default login`, or a service account on GCP).
Setting DATASTORE_EMULATOR_HOST points the client at a local emulator.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterator
from typing import Any

from google.api_core import exceptions as gexc
from google.auth import exceptions as auth_exc
from google.cloud import datastore

from ..core.errors import StoreError, StoreUnavailableError, TransactionConflictError
from ..core.models import Entity, Key, Query

logger = logging.getLogger(__name__)

_UNAVAILABLE = (
    gexc.ServiceUnavailable,
    gexc.DeadlineExceeded,
    gexc.Unauthenticated,
    gexc.PermissionDenied,
)
_CONFLICT = (gexc.Aborted, gexc.Conflict)


@contextlib.contextmanager
def _translate_errors(action: str) -> Iterator[None]:
    try:
        yield
    except _CONFLICT as e:
        raise TransactionConflictError(f"{action}: {e}") from e
    except _UNAVAILABLE as e:
        raise StoreUnavailableError(f"{action}: {e}") from e
    except auth_exc.GoogleAuthError as e:
        raise StoreUnavailableError(f"{action}: {e}") from e
    except gexc.GoogleAPIError as e:
        raise StoreError(f"{action}: {e}") from e


class DatastoreTransaction:
    def __init__(self, adapter: DatastoreDocumentClient) -> None:
        self._adapter = adapter
        self._txn = adapter.client.transaction()
        with _translate_errors("begin transaction"):
            self._txn.begin()
        self._active = True

    @property
    def is_active(self) -> bool:
        return self._active

    def get(self, key: Key) -> Entity | None:
        with _translate_errors("transactional get"):
            found = self._adapter.client.get(self._adapter.to_ds_key(key), transaction=self._txn)
        return self._adapter.from_ds_entity(found) if found is not None else None

    def put(self, entity: Entity) -> None:
        self._txn.put(self._adapter.to_ds_entity(entity))

    def commit(self) -> None:
        try:
            with _translate_errors("commit"):
                self._txn.commit()
        finally:
            self._active = False

    def rollback(self) -> None:
        try:
            with _translate_errors("rollback"):
                self._txn.rollback()
        finally:
            self._active = False


class DatastoreDocumentClient:
    """DocumentClient backed by google.cloud.datastore.Client."""

    def __init__(
        self,
        client: Any | None = None,
        *,
        project: str | None = None,
        namespace: str | None = None,
    ) -> None:
        if client is None:
            with _translate_errors("create datastore client"):
                client = datastore.Client(project=project, namespace=namespace)
        self.client = client
        logger.info(
            "DatastoreDocumentClient ready project=%s namespace=%s",
            getattr(client, "project", project),
            getattr(client, "namespace", namespace),
        )

    # ---- conversions ----

    def to_ds_key(self, key: Key) -> Any:
        return self.client.key(key.kind, key.id)

    def to_ds_entity(self, entity: Entity) -> Any:
        ds_entity = datastore.Entity(
            key=self.to_ds_key(entity.key),
            exclude_from_indexes=tuple(sorted(entity.exclude_from_indexes)),
        )
        ds_entity.update(dict(entity.properties))
        return ds_entity

    @staticmethod
    def from_ds_entity(ds_entity: Any) -> Entity:
        ds_key = ds_entity.key
        if ds_key.id is None:
            # Records are addressed by numeric id only.
            raise StoreError(f"{ds_key.kind} entity has a name key ({ds_key.name!r}), not a numeric id")
        return Entity.new(
            Key(kind=ds_key.kind, id=int(ds_key.id)),
            dict(ds_entity),
            exclude_from_indexes=getattr(ds_entity, "exclude_from_indexes", ()),
        )

    # ---- DocumentClient ----

    def allocate_id(self, kind: str) -> Key:
        with _translate_errors("allocate id"):
            (ds_key,) = self.client.allocate_ids(self.client.key(kind), 1)
        return Key(kind=kind, id=int(ds_key.id))

    def put(self, entity: Entity) -> None:
        with _translate_errors("put"):
            self.client.put(self.to_ds_entity(entity))

    def get(self, key: Key) -> Entity | None:
        with _translate_errors("get"):
            found = self.client.get(self.to_ds_key(key))
        return self.from_ds_entity(found) if found is not None else None

    def run_query(self, query: Query) -> Iterator[Entity]:
        ds_query = self.client.query(kind=query.kind, order=list(query.order_by))
        with _translate_errors("run query"):
            results = ds_query.fetch()
        return self._iter_results(results)

    def _iter_results(self, results: Any) -> Iterator[Entity]:
        # Pages are fetched lazily, so errors can surface mid-iteration.
        with _translate_errors("fetch query results"):
            for ds_entity in results:
                if ds_entity.key.id is None:
                    logger.warning(
                        "Skipping %s entity with name key %r", ds_entity.key.kind, ds_entity.key.name
                    )
                    continue
                yield self.from_ds_entity(ds_entity)

    def delete(self, key: Key) -> None:
        with _translate_errors("delete"):
            self.client.delete(self.to_ds_key(key))

    def begin_transaction(self) -> DatastoreTransaction:
        return DatastoreTransaction(self)
