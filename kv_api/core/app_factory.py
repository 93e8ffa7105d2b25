"""Application factory for FastAPI app.

Centralizes app construction (state, middleware, handlers, routers) so that
every app instance owns its own store and admission window. Tests build a
fresh app per case instead of sharing process-wide singletons.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from kv_api import __version__
from kv_api.adapters.admission.base import AbstractAdmissionController
from kv_api.adapters.admission.in_memory import SlidingWindowAdmissionController
from kv_api.adapters.kv_store.base import AbstractKeyValueStore
from kv_api.adapters.kv_store.factory import create_kv_store
from kv_api.api.routes import health_router, kv_listing_router, kv_router
from kv_api.core.config import Settings, settings as default_settings
from kv_api.core.exception_handlers import setup_exception_handlers
from kv_api.core.logging import configure_logging
from kv_api.core.middleware import request_id_middleware
from kv_api.core.openapi import apply_openapi_customizations
from kv_api.services.kv_service import KeyValueService
from kv_api.utils.clock import Clock, get_clock

logger = logging.getLogger(__name__)


def create_admission_controller(
    app_settings: Settings,
    *,
    clock: Clock | None = None,
) -> SlidingWindowAdmissionController:
    """Build the admission controller with an empty arrival log."""
    cfg = app_settings.admission
    controller = SlidingWindowAdmissionController(
        max_per_window=cfg.max_per_window,
        window_ms=cfg.window_ms,
        clock=clock or get_clock(cfg.clock),
    )
    controller.reset()
    return controller


def create_app(
    app_settings: Settings | None = None,
    *,
    store: AbstractKeyValueStore | None = None,
    admission_controller: AbstractAdmissionController | None = None,
    clock: Clock | None = None,
    configure_logs: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        app_settings: Settings to use; defaults to the environment-loaded settings.
        store: Pre-built storage backend; created from settings when omitted.
        admission_controller: Pre-built controller; created from settings when omitted.
        clock: Millisecond clock for a settings-built controller (tests inject fakes).
        configure_logs: Whether to (re)configure the root logger.

    Returns:
        Configured FastAPI app with state, middleware, handlers and routers.
    """
    cfg = app_settings or default_settings

    # Logging first so subsequent init logs are formatted as desired
    if configure_logs:
        configure_logging(cfg.log)

    kv_store = store if store is not None else create_kv_store(cfg.store)
    controller = (
        admission_controller
        if admission_controller is not None
        else create_admission_controller(cfg, clock=clock)
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "app.startup",
            extra={
                "app_env": cfg.app_env,
                "store_backend": cfg.store.backend,
                "max_per_window": cfg.admission.max_per_window,
                "window_ms": cfg.admission.window_ms,
                "allow_list_all": cfg.store.allow_list_all,
            },
        )
        try:
            yield
        finally:
            kv_store.close()
            logger.info("app.shutdown")

    app = FastAPI(
        title="KV API",
        description=(
            "Single key-value collection over HTTP (create, read, update, delete, "
            "list) guarded by a sliding-window admission controller."
        ),
        version=__version__,
        debug=cfg.app.debug,
        lifespan=lifespan,
    )

    app.state.settings = cfg
    app.state.kv_store = kv_store
    app.state.kv_service = KeyValueService(kv_store)
    app.state.admission_controller = controller

    # Middleware
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(kv_router)
    if cfg.store.allow_list_all:
        app.include_router(kv_listing_router)
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
