# src/registry_reports/infrastructure/middleware/request_id.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Request ID Middleware.

Summary:
    Assigns a correlation ID to each request and echoes it on the response.
    A caller-supplied ``X-Request-ID`` is reused when it is safe; otherwise a
    UUID4 is generated.

Contract:
    • Reads:  X-Request-ID (optional)
    • Writes: X-Request-ID (always written)
    • Stores: request.state.request_id (str)
    • Enriches logs via contextvars (request_id)
"""

from __future__ import annotations

import re
import uuid
from typing import Final

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from registry_reports.infrastructure.logging.logger import set_request_context

REQUEST_ID_HEADER: Final[str] = "X-Request-ID"
_SAFE_RE: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9\-_.:@]{1,128}$")


def coerce_request_id(raw: str | None) -> str:
    """Return ``raw`` when it is a safe id, otherwise a fresh UUID4 string."""
    if raw and _SAFE_RE.match(raw):
        return raw
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Attach ``request.state.request_id`` and emit it as a response header."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        req_id = coerce_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = req_id
        set_request_context(request_id=req_id, trace_id=req_id)

        response: Response = await call_next(request)
        response.headers.setdefault(REQUEST_ID_HEADER, req_id)
        return response
