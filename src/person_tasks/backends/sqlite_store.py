# src/person_tasks/backends/sqlite_store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path
from typing import Any

from ..core.errors import StoreError, StoreUnavailableError, TransactionConflictError
from ..core.models import Entity, Key, Query

logger = logging.getLogger(__name__)

_DT_TAG = "$dt"


def _encode_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return {_DT_TAG: value.isoformat(timespec="microseconds")}
    return value


def _decode_value(value: Any) -> Any:
    if isinstance(value, dict) and set(value) == {_DT_TAG}:
        return datetime.fromisoformat(value[_DT_TAG])
    return value


def _props_to_str(properties: dict[str, Any]) -> str:
    return json.dumps({k: _encode_value(v) for k, v in properties.items()}, ensure_ascii=False)


def _str_to_props(s: str | None) -> dict[str, Any]:
    if not s:
        return {}
    val = json.loads(s)
    if not isinstance(val, dict):
        return {}
    return {k: _decode_value(v) for k, v in val.items()}


@contextlib.contextmanager
def _translate_errors(action: str) -> Iterator[None]:
    try:
        yield
    except sqlite3.OperationalError as e:
        if "locked" in str(e).lower() or "busy" in str(e).lower():
            raise TransactionConflictError(f"{action}: {e}") from e
        raise StoreUnavailableError(f"{action}: {e}") from e
    except sqlite3.Error as e:
        raise StoreError(f"{action}: {e}") from e


class SqliteTransaction:
    """
    Transaction on a dedicated connection opened with BEGIN IMMEDIATE.

    IMMEDIATE takes the write lock up front, so two read-modify-write
    transactions on the same database run one after the other.
    """

    def __init__(self, store: SqliteDocumentClient) -> None:
        self._store = store
        self._conn: sqlite3.Connection | None = None
        with _translate_errors("begin transaction"):
            conn = store._get_conn(autocommit=True)
            try:
                conn.execute("BEGIN IMMEDIATE")
            except Exception:
                conn.close()
                raise
            self._conn = conn

    @property
    def is_active(self) -> bool:
        return self._conn is not None

    def _require_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreError("transaction is no longer active")
        return self._conn

    def _finish(self, statement: str) -> None:
        conn = self._require_conn()
        try:
            with _translate_errors(statement.lower()):
                conn.execute(statement)
        finally:
            self._conn = None
            conn.close()

    def get(self, key: Key) -> Entity | None:
        conn = self._require_conn()
        with _translate_errors("transactional get"):
            return self._store._select(conn, key)

    def put(self, entity: Entity) -> None:
        conn = self._require_conn()
        with _translate_errors("transactional put"):
            self._store._upsert(conn, entity)

    def commit(self) -> None:
        self._finish("COMMIT")

    def rollback(self) -> None:
        self._finish("ROLLBACK")


class SqliteDocumentClient:
    """
    SQLite document store.

    One row per document: (kind, id) primary key, properties as JSON,
    plus the list of properties excluded from indexes (kept for parity with
    Cloud Datastore; nothing is indexed here).

    Thread-safety:
    - each call opens its own SQLite connection
    - transactions own one connection until commit/rollback
    """

    def __init__(self, db_path: str | Path = "records.sqlite3", *, busy_timeout: float = 30.0) -> None:
        self._db_path = Path(db_path)
        self._busy_timeout = float(busy_timeout)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            total = self.count()
        except StoreError:
            total = -1
        logger.info("SqliteDocumentClient ready db=%s total=%s", self._db_path, total)

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self, *, autocommit: bool = False) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=self._busy_timeout, check_same_thread=False)
        if autocommit:
            conn.isolation_level = None
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        with _translate_errors("create schema"):
            conn = self._get_conn()
            try:
                cur = conn.cursor()
                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS documents (
                        kind TEXT NOT NULL,
                        id INTEGER NOT NULL,
                        properties TEXT NOT NULL DEFAULT '{}',
                        unindexed TEXT NOT NULL DEFAULT '[]',
                        PRIMARY KEY (kind, id)
                    )
                    """
                )
                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS id_allocations (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        kind TEXT NOT NULL
                    )
                    """
                )
                conn.commit()
            finally:
                conn.close()

    @staticmethod
    def _row_to_entity(row: sqlite3.Row) -> Entity:
        unindexed = json.loads(row["unindexed"] or "[]")
        return Entity.new(
            Key(kind=str(row["kind"]), id=int(row["id"])),
            _str_to_props(row["properties"]),
            exclude_from_indexes=unindexed,
        )

    def _select(self, conn: sqlite3.Connection, key: Key) -> Entity | None:
        cur = conn.execute(
            "SELECT kind, id, properties, unindexed FROM documents WHERE kind = ? AND id = ?",
            (key.kind, int(key.id)),
        )
        row = cur.fetchone()
        return self._row_to_entity(row) if row else None

    @staticmethod
    def _upsert(conn: sqlite3.Connection, entity: Entity) -> None:
        conn.execute(
            """
            INSERT INTO documents(kind, id, properties, unindexed)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(kind, id) DO UPDATE SET
                properties = excluded.properties,
                unindexed = excluded.unindexed
            """,
            (
                entity.key.kind,
                int(entity.key.id),
                _props_to_str(dict(entity.properties)),
                json.dumps(sorted(entity.exclude_from_indexes)),
            ),
        )

    # ---- DocumentClient ----

    def allocate_id(self, kind: str) -> Key:
        with _translate_errors("allocate id"):
            conn = self._get_conn()
            try:
                cur = conn.cursor()
                cur.execute("INSERT INTO id_allocations(kind) VALUES (?)", (kind,))
                conn.commit()
                rowid = cur.lastrowid
                if rowid is None:
                    raise StoreError("SQLite did not return lastrowid for id allocation")
                return Key(kind=kind, id=int(rowid))
            finally:
                conn.close()

    def put(self, entity: Entity) -> None:
        with _translate_errors("put"):
            conn = self._get_conn()
            try:
                self._upsert(conn, entity)
                conn.commit()
            finally:
                conn.close()
        logger.debug("put %s/%s", entity.key.kind, entity.key.id)

    def get(self, key: Key) -> Entity | None:
        with _translate_errors("get"):
            conn = self._get_conn()
            try:
                return self._select(conn, key)
            finally:
                conn.close()

    def run_query(self, query: Query) -> Iterator[Entity]:
        sql = "SELECT kind, id, properties, unindexed FROM documents WHERE kind = ?"
        params: list[Any] = [query.kind]
        if query.order_by:
            # Missing properties come back as NULL and sort first.
            sql += " ORDER BY " + ", ".join("json_extract(properties, ?) ASC" for _ in query.order_by)
            sql += ", id ASC"
            params.extend(f'$."{name}"' for name in query.order_by)

        with _translate_errors("run query"):
            conn = self._get_conn()
            try:
                rows = conn.execute(sql, params).fetchall()
            finally:
                conn.close()
        return (self._row_to_entity(r) for r in rows)

    def delete(self, key: Key) -> None:
        with _translate_errors("delete"):
            conn = self._get_conn()
            try:
                conn.execute("DELETE FROM documents WHERE kind = ? AND id = ?", (key.kind, int(key.id)))
                conn.commit()
            finally:
                conn.close()

    def begin_transaction(self) -> SqliteTransaction:
        return SqliteTransaction(self)

    def count(self, kind: str | None = None) -> int:
        with _translate_errors("count"):
            conn = self._get_conn()
            try:
                if kind is None:
                    (n,) = conn.execute("SELECT COUNT(*) FROM documents").fetchone()
                else:
                    (n,) = conn.execute("SELECT COUNT(*) FROM documents WHERE kind = ?", (kind,)).fetchone()
                return int(n)
            finally:
                conn.close()
