"""Key-value store interfaces.

Every primitive here is atomic at the single-record level. Callers never
combine a lookup with a separate write to decide existence: ``insert`` is
insert-if-absent and ``replace``/``remove`` act only if the key is present,
so the storage layer stays the source of truth under concurrent requests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class KeyValueRecord:
    """One stored entry.

    Attributes:
        key: Canonical, non-empty key string. Never renamed.
        value: JSON-compatible document, replaced wholesale on update.
    """

    key: str
    value: Any


class KeyValueStoreError(Exception):
    """Base class for storage-level failures."""

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key


class DuplicateKeyError(KeyValueStoreError):
    """Raised by ``insert`` when the key already exists."""


class MissingKeyError(KeyValueStoreError):
    """Raised by ``replace``/``remove`` when the key does not exist."""


class AbstractKeyValueStore(ABC):
    """Interface for key-value storage backends."""

    @abstractmethod
    def insert(self, key: str, value: Any) -> KeyValueRecord:
        """Insert a new record if no record with ``key`` exists.

        Raises:
            DuplicateKeyError: If ``key`` is already stored.
        """
        raise NotImplementedError

    @abstractmethod
    def replace(self, key: str, value: Any) -> KeyValueRecord:
        """Replace the value of an existing record.

        Raises:
            MissingKeyError: If ``key`` is not stored.
        """
        raise NotImplementedError

    @abstractmethod
    def fetch(self, key: str) -> KeyValueRecord | None:
        """Return the record for ``key`` or None."""
        raise NotImplementedError

    @abstractmethod
    def remove(self, key: str) -> KeyValueRecord:
        """Delete and return the record for ``key``.

        Raises:
            MissingKeyError: If ``key`` is not stored.
        """
        raise NotImplementedError

    @abstractmethod
    def records(self) -> list[KeyValueRecord]:
        """Snapshot of every stored record, ordered by key ascending."""
        raise NotImplementedError

    def close(self) -> None:
        """Release backend resources. No-op by default."""
