"""Key-value service enforcing input validation and the record lifecycle.

This service sits between the HTTP handlers and the storage adapter. It:
- Validates that required fields are present
- Normalizes keys to their canonical string form
- Delegates every existence decision to the store's atomic primitives
- Maps storage outcomes to the domain error taxonomy
"""

from __future__ import annotations

import logging
from typing import Any

from kv_api.adapters.kv_store.base import (
    AbstractKeyValueStore,
    DuplicateKeyError,
    KeyValueRecord,
    MissingKeyError,
)
from kv_api.core.errors import BadRequestAppError, ConflictAppError, NotFoundAppError
from kv_api.utils.keys import normalize_key

logger = logging.getLogger(__name__)


def _missing_fields_message(missing: list[str]) -> str:
    quoted = " and ".join(f"'{name}'" for name in missing)
    verb = "are" if len(missing) > 1 else "is"
    return f"{quoted} {verb} expected"


class KeyValueService:
    """CRUD operations over a single key-value collection.

    A field counts as missing when it is absent or null. Keys are normalized
    before any storage access, so ``42`` and ``"42"`` address one record.
    """

    def __init__(self, store: AbstractKeyValueStore) -> None:
        self._store = store

    @property
    def store(self) -> AbstractKeyValueStore:
        return self._store

    def _require(self, *, key: Any = "", value: Any = "") -> None:
        missing = []
        if key is None or key == "":
            missing.append("key")
        if value is None:
            missing.append("value")
        if missing:
            raise BadRequestAppError(
                code="missing_fields",
                message=_missing_fields_message(missing),
                details={"missing_fields": missing},
            )

    def _normalize(self, raw_key: Any) -> str:
        try:
            key = normalize_key(raw_key)
        except TypeError as exc:
            raise BadRequestAppError(
                code="invalid_key",
                message="'key' must be a string, number or boolean",
                details={"context": {"reason": str(exc)}},
            ) from exc
        if not key:
            self._require(key=None)
        return key

    def create(self, key: Any, value: Any) -> KeyValueRecord:
        """Store a new record.

        Args:
            key: Raw key from the request body.
            value: JSON document to store.

        Returns:
            KeyValueRecord: The stored record.

        Raises:
            BadRequestAppError: If key and/or value are missing, or key has an unsupported type.
            ConflictAppError: If a record with the same key already exists.
        """
        self._require(key=key, value=value)
        normalized = self._normalize(key)

        try:
            record = self._store.insert(normalized, value)
        except DuplicateKeyError as exc:
            raise ConflictAppError(
                code="key_exists",
                message="'key' must be unique",
                details={"key": exc.key},
            ) from exc

        logger.info("kv.created", extra={"key": record.key})
        return record

    def update(self, key: Any, value: Any) -> KeyValueRecord:
        """Replace the value of an existing record.

        Raises:
            BadRequestAppError: If value is missing.
            NotFoundAppError: If no record with key exists.
        """
        self._require(value=value)
        normalized = self._normalize(key)

        try:
            record = self._store.replace(normalized, value)
        except MissingKeyError as exc:
            raise NotFoundAppError(code="key_not_found", details={"key": exc.key}) from exc

        logger.info("kv.updated", extra={"key": record.key})
        return record

    def get(self, key: Any) -> Any:
        """Return the value stored under key.

        Raises:
            NotFoundAppError: If no record with key exists.
        """
        normalized = self._normalize(key)
        record = self._store.fetch(normalized)
        if record is None:
            raise NotFoundAppError(code="key_not_found", details={"key": normalized})
        return record.value

    def delete(self, key: Any) -> None:
        """Remove the record stored under key.

        Raises:
            NotFoundAppError: If no record with key exists.
        """
        normalized = self._normalize(key)
        try:
            self._store.remove(normalized)
        except MissingKeyError as exc:
            raise NotFoundAppError(code="key_not_found", details={"key": exc.key}) from exc

        logger.info("kv.deleted", extra={"key": normalized})

    def list(self) -> list[KeyValueRecord]:
        """Return every stored record, ordered by key."""
        return self._store.records()
