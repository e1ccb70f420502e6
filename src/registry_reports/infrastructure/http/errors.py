# src/registry_reports/infrastructure/http/errors.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Exception handlers producing the canonical error envelope.

Every error leaving the service has the shape::

    {"error": {"code", "http_status", "message", "details", "trace_id"}}
"""
from __future__ import annotations

from typing import Any

from fastapi import HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.responses import Response

from registry_reports.domain.exceptions.base import DomainError
from registry_reports.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)


def _trace_id(request: Request) -> str | None:
    state = getattr(request, "state", None)
    return getattr(state, "request_id", None) or request.headers.get("X-Request-ID")


def error_envelope(
    *,
    code: str,
    http_status: int,
    message: str,
    details: dict[str, Any] | None = None,
    trace_id: str | None = None,
) -> dict[str, Any]:
    """Return the canonical error envelope as a plain dict."""
    err: dict[str, Any] = {
        "code": code,
        "http_status": http_status,
        "message": message,
        "details": details or {},
    }
    if trace_id is not None:
        err["trace_id"] = trace_id
    return {"error": err}


def domain_error_response(request: Request, exc: DomainError, *, http_status: int = 400) -> JSONResponse:
    """Map a :class:`DomainError` to an error envelope response."""
    payload = error_envelope(
        code=exc.code,
        http_status=http_status,
        message=str(exc) or exc.code,
        details=jsonable_encoder(exc.details),
        trace_id=_trace_id(request),
    )
    return JSONResponse(status_code=http_status, content=payload)


async def handle_domain_error(request: Request, exc: DomainError) -> Response:
    """Fallback handler for domain errors not mapped by a router."""
    logger.info(
        "domain_error",
        extra={"extra": {"code": exc.code, "path": request.url.path}},
    )
    return domain_error_response(request, exc)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> Response:
    """Return a 422 envelope for request validation failures."""
    payload = error_envelope(
        code="VALIDATION_ERROR",
        http_status=422,
        message="Request validation failed",
        details={"errors": jsonable_encoder(exc.errors())},
        trace_id=_trace_id(request),
    )
    return JSONResponse(status_code=422, content=payload)


async def handle_http_exception(request: Request, exc: HTTPException) -> Response:
    """Return an envelope for explicit ``HTTPException`` raises."""
    payload = error_envelope(
        code="HTTP_ERROR",
        http_status=exc.status_code,
        message=exc.detail if isinstance(exc.detail, str) else "HTTP error",
        details=None if isinstance(exc.detail, str) else {"detail": exc.detail},
        trace_id=_trace_id(request),
    )
    return JSONResponse(status_code=exc.status_code, content=payload)


async def handle_unhandled_exception(request: Request, exc: Exception) -> Response:
    """Return a 500 envelope and log the failure."""
    logger.exception(
        "unhandled_exception",
        extra={"extra": {"path": request.url.path, "exc_type": type(exc).__name__}},
    )
    payload = error_envelope(
        code="INTERNAL_ERROR",
        http_status=500,
        message="Internal server error",
        trace_id=_trace_id(request),
    )
    return JSONResponse(status_code=500, content=payload)
