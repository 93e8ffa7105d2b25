"""Admission control dependency for FastAPI routes.

The controller lives on ``app.state`` and is built by the app factory, so
every app instance (and every test) gets its own window.

Admission strategy:
- One global trailing window shared by all clients (load shedding, not
  per-client fairness).
- Every attempt is counted, including the ones that end up rejected.
"""

from __future__ import annotations

import logging
import math

from fastapi import Request

from kv_api.adapters.admission.base import AbstractAdmissionController, AdmissionDecision
from kv_api.core.config import Settings
from kv_api.core.errors import TooManyRequestsAppError

logger = logging.getLogger(__name__)


def get_admission_controller(request: Request) -> AbstractAdmissionController:
    """Return the admission controller owned by the running app."""
    return request.app.state.admission_controller


def build_rejection_headers(decision: AdmissionDecision) -> dict[str, str]:
    """Build Retry-After and X-RateLimit-* headers for a rejected request."""
    retry_after_ms = decision.retry_after_ms or decision.window_ms
    return {
        "Retry-After": str(max(1, math.ceil(retry_after_ms / 1000))),
        "X-RateLimit-Limit": str(decision.limit),
        "X-RateLimit-Window-ms": str(decision.window_ms),
    }


async def enforce_admission(request: Request) -> None:
    """FastAPI dependency enforcing the admission window.

    Runs before the request body is read and before the store is touched.

    Args:
        request: FastAPI request.

    Raises:
        TooManyRequestsAppError: When the trailing window is over its limit.
    """
    controller = get_admission_controller(request)
    decision = controller.evaluate()

    if decision.allowed:
        logger.debug(
            "admission.accepted",
            extra={
                "limit": decision.limit,
                "count": decision.count,
                "window_ms": decision.window_ms,
            },
        )
        return

    logger.warning(
        "admission.rejected",
        extra={
            "limit": decision.limit,
            "count": decision.count,
            "window_ms": decision.window_ms,
            "retry_after_ms": decision.retry_after_ms,
        },
    )

    app_settings: Settings = request.app.state.settings
    headers = build_rejection_headers(decision) if app_settings.admission.include_headers else None

    raise TooManyRequestsAppError(
        code="too_many_requests",
        details={
            "limit": decision.limit,
            "count": decision.count,
            "window_ms": decision.window_ms,
            "retry_after_ms": decision.retry_after_ms or decision.window_ms,
        },
        headers=headers,
    )
