"""SQLite-backed key-value store.

The ``PRIMARY KEY`` constraint on ``key`` is what rejects duplicate inserts;
existence for updates is decided by the affected row count of the ``UPDATE``
itself. Values are stored as JSON text.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from pathlib import Path
from typing import Any

from kv_api.adapters.kv_store.base import (
    AbstractKeyValueStore,
    DuplicateKeyError,
    KeyValueRecord,
    MissingKeyError,
)

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY NOT NULL,
    value TEXT NOT NULL
)
"""


class SQLiteKeyValueStore(AbstractKeyValueStore):
    def __init__(self, sqlite_path: str) -> None:
        self.sqlite_path = sqlite_path
        if sqlite_path != ":memory:":
            Path(sqlite_path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(
            sqlite_path,
            isolation_level=None,
            check_same_thread=False,
        )
        self._conn.row_factory = sqlite3.Row
        self._conn.execute(_SCHEMA)
        logger.info("kv_store.sqlite_opened", extra={"sqlite_path": sqlite_path})

    def insert(self, key: str, value: Any) -> KeyValueRecord:
        encoded = json.dumps(value)
        with self._lock:
            try:
                self._conn.execute("INSERT INTO kv (key, value) VALUES (?, ?)", (key, encoded))
            except sqlite3.IntegrityError:
                raise DuplicateKeyError(key) from None
        return KeyValueRecord(key=key, value=json.loads(encoded))

    def replace(self, key: str, value: Any) -> KeyValueRecord:
        encoded = json.dumps(value)
        with self._lock:
            cursor = self._conn.execute("UPDATE kv SET value = ? WHERE key = ?", (encoded, key))
            if cursor.rowcount == 0:
                raise MissingKeyError(key)
        return KeyValueRecord(key=key, value=json.loads(encoded))

    def fetch(self, key: str) -> KeyValueRecord | None:
        with self._lock:
            row = self._conn.execute("SELECT key, value FROM kv WHERE key = ?", (key,)).fetchone()
        if row is None:
            return None
        return KeyValueRecord(key=row["key"], value=json.loads(row["value"]))

    def remove(self, key: str) -> KeyValueRecord:
        with self._lock:
            self._conn.execute("BEGIN IMMEDIATE")
            try:
                row = self._conn.execute(
                    "SELECT key, value FROM kv WHERE key = ?", (key,)
                ).fetchone()
                if row is not None:
                    self._conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            except Exception:
                self._conn.execute("ROLLBACK")
                raise
            self._conn.execute("COMMIT")
        if row is None:
            raise MissingKeyError(key)
        return KeyValueRecord(key=row["key"], value=json.loads(row["value"]))

    def records(self) -> list[KeyValueRecord]:
        with self._lock:
            rows = self._conn.execute("SELECT key, value FROM kv ORDER BY key").fetchall()
        return [KeyValueRecord(key=row["key"], value=json.loads(row["value"])) for row in rows]

    def close(self) -> None:
        with self._lock:
            self._conn.close()
