"""Request body parsing for JSON endpoints."""
from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import Request

from kv_api.core.errors import BadRequestAppError

logger = logging.getLogger(__name__)


def _reject_constant(token: str) -> Any:
    raise ValueError(f"non-standard JSON constant {token}")


async def read_json_object(request: Request) -> dict[str, Any]:
    """Read the request body and decode it as a JSON object.

    Bodies are read by the handler itself (not declared as FastAPI body
    parameters) so that admission control runs before any parsing, and so
    that missing fields produce the service's own 400 messages.

    Args:
        request: FastAPI request.

    Returns:
        Decoded JSON object. An empty body decodes to ``{}``.

    Raises:
        BadRequestAppError: If the body is not valid JSON or not an object.
    """
    raw = await request.body()
    if not raw.strip():
        return {}

    # Decode errors, NaN/Infinity and over-long integers all surface as ValueError
    try:
        payload = json.loads(raw, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as exc:
        logger.info(
            "request_body.invalid_json",
            extra={"body_bytes": len(raw), "error_msg": str(exc)},
        )
        raise BadRequestAppError(
            code="invalid_json",
            message="body must be a JSON object",
        ) from exc

    if not isinstance(payload, dict):
        raise BadRequestAppError(
            code="invalid_json",
            message="body must be a JSON object",
            details={"context": {"body_type": type(payload).__name__}},
        )

    return payload
