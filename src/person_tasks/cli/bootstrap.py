# src/person_tasks/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- picks the document store backend and wires it into a RecordStore.
"""

from __future__ import annotations

import logging

from ..backends.memory import InMemoryDocumentClient
from ..config import BACKENDS, get_settings
from ..core.ports import DocumentClient
from ..core.state import AppState
from ..store.record_store import RecordStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)


def create_document_client(settings) -> DocumentClient:
    backend = str(settings.backend).lower()

    if backend == "datastore":
        # Imported lazily: the Google client pulls in grpc and friends.
        from ..backends.datastore import DatastoreDocumentClient

        return DatastoreDocumentClient(
            project=settings.datastore_project,
            namespace=settings.datastore_namespace,
        )

    if backend == "sqlite":
        from ..backends.sqlite_store import SqliteDocumentClient

        return SqliteDocumentClient(settings.db_path)

    if backend == "memory":
        logger.warning("Using the in-memory backend: records are lost on exit.")
        return InMemoryDocumentClient()

    raise ValueError(f"Unknown backend {settings.backend!r} (expected one of: {', '.join(BACKENDS)})")


def create_initial_state(*, settings=None, client: DocumentClient | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the client) injectable makes the app easier to test.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if client is None:
        client = create_document_client(settings)

    store = RecordStore(client, kind=settings.kind, order_by_created=settings.order_by_created)
    if settings.order_by_created and str(settings.backend).lower() == "datastore":
        logger.warning(
            "Listing %s ordered by \"created\": Datastore skips documents without that property. "
            "Set PERSON_TASKS_ORDER_BY_CREATED=false to list them.",
            store.kind,
        )
    logger.info("Record store ready backend=%s kind=%s", settings.backend, store.kind)
    return AppState(settings=settings, client=client, store=store)
