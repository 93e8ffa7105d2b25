"""Key-value storage adapters - abstracts over storage backends."""

from kv_api.adapters.kv_store.base import (
    AbstractKeyValueStore,
    DuplicateKeyError,
    KeyValueRecord,
    KeyValueStoreError,
    MissingKeyError,
)
from kv_api.adapters.kv_store.factory import create_kv_store
from kv_api.adapters.kv_store.in_memory import InMemoryKeyValueStore
from kv_api.adapters.kv_store.sqlite import SQLiteKeyValueStore

__all__ = [
    "AbstractKeyValueStore",
    "DuplicateKeyError",
    "InMemoryKeyValueStore",
    "KeyValueRecord",
    "KeyValueStoreError",
    "MissingKeyError",
    "SQLiteKeyValueStore",
    "create_kv_store",
]
