"""FastAPI application factory for the AURA Coaching API."""
from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from aura import __version__
from aura.core.config import Settings, get_settings
from aura.core.logs import configure_logging
from aura.repositories import build_store
from aura.repositories.base import NotFound, ResourceStore, StoreError, StoreUnavailable, ValidationError
from aura.routers import health as health_router
from aura.routers import reports as reports_router
from aura.routers import resources as resources_router
from aura.services.report_service import ReportService
from aura.services.report_worker import ReportWorker

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ValidationError: 400,
    NotFound: 404,
    StoreUnavailable: 500,
}


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration of every request."""

    async def dispatch(self, request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info("%s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
        return response


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"success": False, "error": message}, status_code=status_code)


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        status_code = next((code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)), 500)
        if status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return _error(status_code, str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return _error(400, "Malformed request body")

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(500, "Internal server error")


def create_app(settings: Settings | None = None, store: ResourceStore | None = None) -> FastAPI:
    """Build the API around an explicitly owned store (created from settings when not given)."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    store = store or build_store(settings)
    worker = ReportWorker(ReportService(store, settings), settings.report_interval_seconds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("AURA Coaching API started with %s backend", store.backend_name)
        if settings.report_enabled:
            worker.start()
        try:
            yield
        finally:
            worker.stop()
            store.close()

    app = FastAPI(title="AURA Coaching API", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.report_worker = worker

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLogMiddleware)
    _install_error_handlers(app)

    app.include_router(health_router.router)
    for router in resources_router.routers:
        app.include_router(router)
    app.include_router(reports_router.router)
    return app
