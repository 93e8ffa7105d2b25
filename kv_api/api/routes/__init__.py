from __future__ import annotations

from kv_api.api.routes.health import router as health_router
from kv_api.api.routes.kv import listing_router as kv_listing_router
from kv_api.api.routes.kv import router as kv_router

__all__ = ["health_router", "kv_listing_router", "kv_router"]
