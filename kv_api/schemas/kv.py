"""Pydantic schemas for key-value requests and responses."""

from __future__ import annotations

from typing import Any, List

from pydantic import BaseModel, Field


class CreateKeyValueBody(BaseModel):
    """Documented shape of the POST /kv body (parsed leniently by the handler)."""

    key: str | int | float | bool = Field(
        ..., description="Record key; numbers and booleans are stored as their canonical string form."
    )
    value: Any = Field(..., description="Arbitrary JSON document (must not be null).")


class UpdateKeyValueBody(BaseModel):
    """Documented shape of the PUT /kv/{key} body."""

    value: Any = Field(..., description="Replacement JSON document (must not be null).")


class MessageResponse(BaseModel):
    """Bare status response; also the shape of every error body."""

    message: str = Field("OK", description="'OK' on success, otherwise the failure reason.")


class KeyValueResponse(MessageResponse):
    key: str = Field(..., description="Canonical key of the stored record.")
    value: Any = Field(..., description="Stored JSON document.")


class ValueResponse(MessageResponse):
    value: Any = Field(..., description="Stored JSON document.")


class KeyValueItem(BaseModel):
    key: str
    value: Any


class KeyValueListResponse(MessageResponse):
    data: List[KeyValueItem] = Field(
        default_factory=list,
        description="Every stored record, ordered by key ascending.",
    )
