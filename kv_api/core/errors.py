"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses. Each error class
carries the HTTP status it is rendered with and the title used as the
prefix of the response ``message``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    missing_fields: list[str]
    key: str
    limit: int
    count: int
    window_ms: int
    retry_after_ms: int
    context: dict[str, Any]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable reason; empty when the title says it all.
        details: Optional structured details for debugging/observability.
        headers: Optional extra response headers (e.g. Retry-After).
    """

    code: str
    message: str = ""
    details: ErrorDetails | None = None
    headers: dict[str, str] | None = None

    status_code: ClassVar[int] = 500
    title: ClassVar[str] = "Internal Server Error"

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.response_message)

    @property
    def response_message(self) -> str:
        """Message rendered to clients, e.g. ``"Bad Request: 'key' is expected"``."""
        if self.message:
            return f"{self.title}: {self.message}"
        return self.title


class BadRequestAppError(AppError):
    """Raised when the request body is malformed or misses required fields."""

    status_code = 400
    title = "Bad Request"


class NotFoundAppError(AppError):
    """Raised when the addressed key does not exist."""

    status_code = 404
    title = "Not Found"


class ConflictAppError(AppError):
    """Raised when creating a key that already exists."""

    status_code = 409
    title = "Conflict"


class TooManyRequestsAppError(AppError):
    """Raised when the admission controller refuses a request."""

    status_code = 429
    title = "Too Many Requests"
