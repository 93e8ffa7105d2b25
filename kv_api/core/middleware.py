"""Request correlation middleware.

Registered with ``app.middleware("http")(request_id_middleware)``. The header
name comes from ``LogSettings.request_id_header`` on the app's own settings,
so two apps in one process can use different headers.
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request, Response

from kv_api.core.config import Settings
from kv_api.core.logging import clear_request_id, set_request_id

logger = logging.getLogger(__name__)


async def request_id_middleware(request: Request, call_next) -> Response:
    """Tag the request with an id, time it and echo both back as headers.

    A client-supplied id is reused as-is; otherwise a UUID4 is minted. The id
    lives in a ContextVar for the duration of the request so every log line
    emitted by admission, the service or the exception handlers carries it.
    """

    app_settings: Settings = request.app.state.settings
    header_name = app_settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())

    set_request_id(request_id)
    started = time.perf_counter()
    try:
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        if app_settings.log.log_requests:
            logger.info(
                "http.request",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": round(elapsed_ms, 2),
                },
            )
    finally:
        clear_request_id()

    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{elapsed_ms:.2f}")
    return response
