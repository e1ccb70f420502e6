# src/registry_reports/infrastructure/middleware/access_log.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Access Log Middleware.

Summary:
    Emits one structured access record per request/response pair.

Fields:
    evt: Literal "access" marker.
    method: HTTP method.
    path: URL path (no scheme/host).
    query: Raw query string.
    status: HTTP status code (500 if the handler raised).
    elapsed_ms: Latency in milliseconds, two decimals.
    request_id: Correlation ID set by :class:`RequestIdMiddleware`.
    ok: False when the downstream handler raised.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from registry_reports.infrastructure.logging.logger import get_json_logger

_logger: logging.Logger = get_json_logger(__name__)


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Structured access logging middleware."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        t0 = time.perf_counter()
        response: Response | None = None
        ok = False
        try:
            response = await call_next(request)
            ok = True
            return response
        finally:
            elapsed_ms = (time.perf_counter() - t0) * 1000.0
            record: dict[str, Any] = {
                "evt": "access",
                "method": request.method,
                "path": request.url.path,
                "query": str(request.url.query),
                "status": response.status_code if response is not None else 500,
                "elapsed_ms": round(elapsed_ms, 2),
                "request_id": getattr(request.state, "request_id", None),
                "ok": ok,
            }
            _logger.info("access_log", extra={"extra": record})
