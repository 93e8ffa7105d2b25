"""Factory pattern for creating key-value store instances."""

from kv_api.adapters.kv_store.base import AbstractKeyValueStore
from kv_api.adapters.kv_store.in_memory import InMemoryKeyValueStore
from kv_api.adapters.kv_store.sqlite import SQLiteKeyValueStore
from kv_api.core.config import StoreSettings, settings


def create_kv_store(store_settings: StoreSettings | None = None) -> AbstractKeyValueStore:
    """Instantiate the configured storage backend.

    Args:
        store_settings: Optional store settings; defaults to global settings.

    Returns:
        AbstractKeyValueStore: Ready-to-use store instance.

    Raises:
        ValueError: If the backend name is unknown.
    """
    cfg = store_settings or settings.store
    backend = cfg.backend.lower()

    if backend == "memory":
        return InMemoryKeyValueStore()

    if backend == "sqlite":
        return SQLiteKeyValueStore(cfg.sqlite_path)

    raise ValueError(f"Unknown key-value store backend: '{backend}'. Supported: memory, sqlite")
