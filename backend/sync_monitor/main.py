from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from sync_monitor.api.routes.dashboard import router as dashboard_router
from sync_monitor.api.routes.logs import router as logs_router
from sync_monitor.api.routes.status import router as status_router
from sync_monitor.core.cache import MemoryCache
from sync_monitor.core.config import Settings, settings
from sync_monitor.core.logging import configure_logging
from sync_monitor.services.log_catalog import LogCatalog, default_candidates
from sync_monitor.services.sync_status import SyncStatusReader

logger = logging.getLogger("sync_monitor")


# -------------------------
# Response helpers
# -------------------------
def ok(data: Any = None, meta: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {"success": True, "data": data, "error": None, "meta": meta or {}}


def fail(
    code: str,
    message: str,
    details: Optional[Any] = None,
    meta: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    return {
        "success": False,
        "data": None,
        "error": {"code": code, "message": message, "details": details},
        "meta": meta or {},
    }


# -------------------------
# App factory
# -------------------------
def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    app_settings = app_settings or settings

    app = FastAPI(
        title="Sync Monitor API",
        version="0.1.5",
        default_response_class=ORJSONResponse,
    )

    # One cache shared by both services, like the host's object cache
    cache = MemoryCache()
    app.state.settings = app_settings
    app.state.cache = cache
    app.state.log_catalog = LogCatalog(
        cache,
        default_candidates(app_settings.LIVE_ROOT, app_settings.HOME_ROOT),
        namespace=app_settings.CACHE_NAMESPACE,
        ttl=app_settings.CATALOG_TTL_SECONDS,
        max_display_bytes=app_settings.MAX_DISPLAY_BYTES,
        max_download_bytes=app_settings.MAX_DOWNLOAD_BYTES,
    )
    app.state.status_reader = SyncStatusReader(
        cache,
        app_settings.STATUS_FILE,
        namespace=app_settings.CACHE_NAMESPACE,
        ttl=app_settings.STATUS_TTL_SECONDS,
        max_bytes=app_settings.MAX_STATUS_BYTES,
    )

    # -------------------------
    # Middleware
    # -------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    # Request-id + timing
    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        start = time.perf_counter()

        response = await call_next(request)

        response.headers["x-request-id"] = request_id
        response.headers["x-response-ms"] = f"{(time.perf_counter() - start) * 1000:.2f}"
        return response

    # -------------------------
    # Routes
    # -------------------------
    @app.get("/health", response_class=ORJSONResponse)
    async def health():
        return ok({"status": "ok", "env": app_settings.ENV})

    app.include_router(logs_router, tags=["logs"])
    app.include_router(status_router, tags=["status"])
    app.include_router(dashboard_router, tags=["dashboard"])

    # -------------------------
    # Error handling
    # -------------------------
    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)

        details = None
        if app_settings.ENV == "dev":
            details = {"type": exc.__class__.__name__, "message": str(exc)}

        return ORJSONResponse(
            status_code=500,
            content=fail(
                code="INTERNAL_ERROR",
                message="An unexpected error occurred.",
                details=details,
            ),
        )

    # -------------------------
    # Startup
    # -------------------------
    @app.on_event("startup")
    async def on_startup():
        configure_logging(app_settings.LOG_LEVEL)
        if not app_settings.ADMIN_TOKEN:
            logger.warning("ADMIN_TOKEN is not set; every protected endpoint will answer 401.")
        logger.info(
            "Watching logs under %s and %s (status file %s)",
            app_settings.LIVE_ROOT,
            app_settings.HOME_ROOT,
            app_settings.STATUS_FILE,
        )

    return app


app = create_app()
