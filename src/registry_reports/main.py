# src/registry_reports/main.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""
Application Entry (Adapters Bootstrap)

Synopsis:
    FastAPI bootstrap that wires middleware, exception handlers and routers.
    Provides an application factory (`create_app`) and a module-level eager
    app (`app`) for tooling and tests.

Design:
    • Bootstrap only (no business logic): routers + middleware + handlers.
    • Lifespan loads the vocabularies and builds the report engine once, so an
      invalid vocabulary document fails the process at startup.
    • Root JSON logging configured at import time.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.responses import Response as StarletteResponse

from registry_reports import __version__
from registry_reports.adapters.routers.metrics_router import router as metrics_router
from registry_reports.adapters.routers.reports_router import router as reports_router
from registry_reports.config.settings import Settings, get_settings
from registry_reports.dependencies.reports import get_fact_repository, get_report_engine
from registry_reports.domain.exceptions.base import DomainError
from registry_reports.infrastructure.http.errors import (
    handle_domain_error,
    handle_http_exception,
    handle_unhandled_exception,
    handle_validation_error,
)
from registry_reports.infrastructure.logging.logger import (
    configure_root_logging,
    get_json_logger,
)
from registry_reports.infrastructure.middleware.access_log import AccessLogMiddleware
from registry_reports.infrastructure.middleware.request_id import RequestIdMiddleware

# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------
configure_root_logging()
logger = get_json_logger(__name__)


def _stable_operation_id(route: APIRoute) -> str:
    """Deterministic operationId to stop OpenAPI churn.

    Format:
        "<methods>_<path>", e.g. "post__v1_reports_aggregate".
    """
    methods = ",".join(sorted(route.methods or []))
    path = route.path_format.replace("/", "_").replace("{", "").replace("}", "")
    return f"{methods.lower()}_{path.lower()}"


@asynccontextmanager
async def runtime_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Load vocabularies, build the shared report engine and seed the fact store.

    Raises:
        InvalidVocabulary: If the configured vocabulary document is missing
            or invalid.
        InvalidFactSeed: If ``FACTS_SEED_PATH`` names an unusable file.
    """
    settings = get_settings()
    engine = get_report_engine(settings)
    repository = get_fact_repository()
    app.state.settings = settings
    app.state.report_engine = engine
    logger.info(
        "report_engine_ready",
        extra={
            "extra": {
                "timezone": engine.timezone_name,
                "dimensions": sorted(engine.dimension_catalog()),
                "seeded_facts": len(await repository.list_facts()),
            }
        },
    )
    yield


def _attach_middlewares(app: FastAPI) -> None:
    """Attach core middleware.

    Starlette runs the last-added middleware first, so the access log is
    added before the request id to see ``request.state.request_id``.
    """
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIdMiddleware)


def _attach_cors(app: FastAPI, settings: Settings) -> None:
    """Attach CORS middleware based on settings."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins or ["*"],
        allow_credentials=bool(settings.cors_allow_origins),
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=["ETag", "X-Request-ID"],
    )


def _patch_exception_handlers(app: FastAPI) -> None:
    """Patch default exception handlers with structured equivalents."""

    async def _http_error_handler(request: Request, exc: Exception) -> StarletteResponse:
        if not isinstance(exc, HTTPException):
            raise exc
        return await handle_http_exception(request, exc)

    async def _validation_error_handler(request: Request, exc: Exception) -> StarletteResponse:
        if not isinstance(exc, RequestValidationError):
            raise exc
        return await handle_validation_error(request, exc)

    async def _domain_error_handler(request: Request, exc: Exception) -> StarletteResponse:
        if not isinstance(exc, DomainError):
            raise exc
        return await handle_domain_error(request, exc)

    async def _unhandled_error_handler(request: Request, exc: Exception) -> StarletteResponse:
        return await handle_unhandled_exception(request, exc)

    app.add_exception_handler(HTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(DomainError, _domain_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Fully configured application instance.
    """
    settings: Settings = get_settings()
    configure_root_logging(settings.log_level.upper(), service=settings.service_name)
    service_version = settings.service_version or __version__

    app = FastAPI(
        title="Registry Reports API",
        version=service_version,
        description="Period reports over civil registry records.",
        lifespan=runtime_lifespan,
        docs_url=settings.docs_url,
        openapi_url=settings.openapi_url,
        generate_unique_id_function=_stable_operation_id,
    )

    _patch_exception_handlers(app)
    _attach_middlewares(app)
    _attach_cors(app, settings)

    app.include_router(reports_router)
    app.include_router(metrics_router)

    @app.get("/healthz", include_in_schema=False)
    async def healthz() -> JSONResponse:
        """Liveness check."""
        return JSONResponse({"status": "ok"})

    logger.info(
        "service_startup",
        extra={
            "extra": {
                "service": settings.service_name,
                "env": settings.environment.value,
                "version": service_version,
                "status": "starting",
            }
        },
    )
    return app


# Eager app for tools and tests.
app: FastAPI = create_app()


if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    uvicorn.run(
        "registry_reports.main:create_app",
        factory=True,
        host="127.0.0.1",
        port=int(os.getenv("PORT", "8080")),
        reload=True,
    )
