# src/registry_reports/adapters/routers/base_router.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Base Router (Adapters Layer).

Purpose:
    Provide a canonical APIRouter wrapper and shared utilities for HTTP endpoints:
        - Versioned routing with stable prefixes (e.g., "/v1/reports").
        - Standard error response mapping using ErrorEnvelope.
        - Pagination parameters with hard caps.
        - Helpers to emit presenter results with headers (ETag, X-Request-ID).

Layer:
    adapters/routers
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from fastapi import APIRouter

from registry_reports.adapters.presenters.base_presenter import PresentResult
from registry_reports.adapters.schemas.http.base import BaseHTTPSchema
from registry_reports.adapters.schemas.http.envelopes import ErrorEnvelope
from registry_reports.infrastructure.logging.logger import get_json_logger
from registry_reports.types import JsonValue

_LOGGER = get_json_logger(__name__)

TagType = str | Enum


@dataclass(frozen=True)
class PageParams:
    """Validated pagination parameters with computed `offset` and `limit`."""

    page: int
    page_size: int

    @property
    def offset(self) -> int:
        """Return the zero-based offset for this page."""
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        """Return the maximum number of items on this page."""
        return self.page_size


@runtime_checkable
class _ResponseLike(Protocol):
    """Duck-typed response that supports mutating headers."""

    headers: MutableMapping[str, str]


class BaseRouter(APIRouter):
    """Canonical router wrapper for versioned HTTP endpoints."""

    MIN_PAGE: int = 1
    MIN_PAGE_SIZE: int = 1
    MAX_PAGE_SIZE: int = 200
    DEFAULT_PAGE_SIZE: int = 20

    def __init__(
        self,
        *,
        version: str,
        resource: str,
        prefix: str | None = None,
        tags: Sequence[TagType] | None = None,
        dependencies: Sequence[Any] | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize the router with a versioned prefix and common settings.

        Args:
            version: API version segment (e.g., "v1").
            resource: Resource segment (e.g., "reports").
            prefix: Optional explicit prefix; defaults to f"/{version}/{resource}".
            tags: Optional default tags for the router's endpoints.
            dependencies: Optional dependencies applied to all routes.
            **kwargs: Additional keyword arguments forwarded to APIRouter.
        """
        computed_prefix = prefix or f"/{version}/{resource}"

        super().__init__(
            prefix=computed_prefix,
            tags=list(tags) if tags is not None else None,
            dependencies=list(dependencies) if dependencies is not None else None,
            **kwargs,
        )

        _LOGGER.info(
            "router_initialized",
            extra={"extra": {"prefix": computed_prefix, "tags": [str(t) for t in tags or []]}},
        )

    @staticmethod
    def send_success(
        response: _ResponseLike | None,
        result: PresentResult[Any],
    ) -> BaseHTTPSchema | dict[str, JsonValue]:
        """Apply presenter headers and return a plain body for FastAPI.

        Args:
            response: Optional HTTP response-like object to mutate with headers.
            result: Presenter result containing headers and a structured body.

        Returns:
            The presenter body, or an empty dict when it is None.
        """
        if response is not None:
            response.headers.update(dict(result.headers))

        body = result.body
        if body is None:
            return {}
        if isinstance(body, Mapping):
            return dict(body)
        return body

    @classmethod
    def resolve_page(
        cls,
        page: int | None,
        page_size: int | None,
        *,
        default_page_size: int | None = None,
    ) -> PageParams:
        """Normalize pagination inputs, clamping the page size to the hard cap.

        Args:
            page: 1-indexed page number; defaults to MIN_PAGE when omitted.
            page_size: Desired page size; defaults to ``default_page_size``
                or DEFAULT_PAGE_SIZE.
            default_page_size: Deployment-specific default page size.

        Returns:
            PageParams with resolved page and page_size.
        """
        p = page if page is not None else cls.MIN_PAGE
        ps = page_size if page_size is not None else (default_page_size or cls.DEFAULT_PAGE_SIZE)

        p = max(p, cls.MIN_PAGE)
        ps = max(min(ps, cls.MAX_PAGE_SIZE), cls.MIN_PAGE_SIZE)
        return PageParams(page=p, page_size=ps)

    @staticmethod
    def std_error_responses() -> dict[int, dict[str, Any]]:
        """Return canonical error responses for OpenAPI."""
        return {
            400: {"model": ErrorEnvelope, "description": "Bad request."},
            413: {"model": ErrorEnvelope, "description": "Too many facts in one request."},
            422: {"model": ErrorEnvelope, "description": "Unprocessable content."},
            500: {"model": ErrorEnvelope, "description": "Internal server error."},
        }
