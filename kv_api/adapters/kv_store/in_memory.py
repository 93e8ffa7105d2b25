"""In-memory key-value store.

Notes:
- Per-process only: data is lost on restart.
- Thread-safe: each primitive holds the store lock for one record operation.
- Values are deep-copied on the way in and out so callers never share
  mutable state with the store.
"""

from __future__ import annotations

import copy
import threading
from typing import Any

from kv_api.adapters.kv_store.base import (
    AbstractKeyValueStore,
    DuplicateKeyError,
    KeyValueRecord,
    MissingKeyError,
)


class InMemoryKeyValueStore(AbstractKeyValueStore):
    """Dictionary-backed store with insert-if-absent semantics."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._data: dict[str, Any] = {}

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return f"InMemoryKeyValueStore(size={len(self._data)})"

    def insert(self, key: str, value: Any) -> KeyValueRecord:
        stored = copy.deepcopy(value)
        with self._lock:
            if key in self._data:
                raise DuplicateKeyError(key)
            self._data[key] = stored
        return KeyValueRecord(key=key, value=copy.deepcopy(stored))

    def replace(self, key: str, value: Any) -> KeyValueRecord:
        stored = copy.deepcopy(value)
        with self._lock:
            if key not in self._data:
                raise MissingKeyError(key)
            self._data[key] = stored
        return KeyValueRecord(key=key, value=copy.deepcopy(stored))

    def fetch(self, key: str) -> KeyValueRecord | None:
        with self._lock:
            if key not in self._data:
                return None
            value = self._data[key]
        return KeyValueRecord(key=key, value=copy.deepcopy(value))

    def remove(self, key: str) -> KeyValueRecord:
        with self._lock:
            try:
                value = self._data.pop(key)
            except KeyError:
                raise MissingKeyError(key) from None
        return KeyValueRecord(key=key, value=value)

    def records(self) -> list[KeyValueRecord]:
        with self._lock:
            items = sorted(self._data.items())
        return [KeyValueRecord(key=k, value=copy.deepcopy(v)) for k, v in items]

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
