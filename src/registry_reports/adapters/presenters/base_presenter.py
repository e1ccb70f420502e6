# src/registry_reports/adapters/presenters/base_presenter.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Presenter utilities and canonical envelope helpers.

Purpose:
    Thin, framework-aware helpers used by adapter layers (routers/controllers)
    to consistently shape HTTP responses and headers.

Responsibilities:
    * Build SuccessEnvelope and ErrorEnvelope instances.
    * Compute strong, quoted ETags from canonical JSON material.
    * Attach standard headers such as X-Request-ID.

Layer:
    adapters/presenters
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from registry_reports.adapters.schemas.http.envelopes import (
    ErrorEnvelope,
    ErrorObject,
    SuccessEnvelope,
)


def _json_default(value: Any) -> str:
    """Serialize non-JSON-native types deterministically for hashing."""
    if isinstance(value, datetime | date):
        return value.isoformat()
    raise TypeError(f"unsupported type for JSON hashing: {type(value)!r}")


def compute_quoted_etag(payload: Mapping[str, Any]) -> str:
    """Return a quoted strong ETag (SHA-256 of canonical JSON for ``payload``)."""
    material = json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        default=_json_default,
    ).encode("utf-8")
    digest = hashlib.sha256(material).hexdigest()
    return f'"{digest}"'


@dataclass(slots=True)
class PresentResult[T]:
    """Presentation result envelope.

    Attributes:
        body: A Pydantic envelope instance.
        headers: Extra HTTP headers to apply.
        status_code: Optional HTTP status override.
    """

    body: T | None
    headers: Mapping[str, str]
    status_code: int | None = None


class BasePresenter[T]:
    """Base presenter for HTTP response shaping in adapter layers."""

    @staticmethod
    def _headers(body: Any, trace_id: str | None) -> dict[str, str]:
        headers: dict[str, str] = {}
        if trace_id:
            headers["X-Request-ID"] = trace_id
        headers["ETag"] = compute_quoted_etag(body.model_dump(mode="python"))
        return headers

    def present_success(
        self,
        *,
        data: Any,
        trace_id: str | None = None,
    ) -> PresentResult[SuccessEnvelope[Any]]:
        """Build a SuccessEnvelope and attach headers.

        Behavior:
            * Always echoes ``X-Request-ID`` when provided.
            * Computes and sets a **quoted** strong ``ETag`` from the envelope body.
        """
        body = SuccessEnvelope[Any](data=data)
        return PresentResult(body=body, headers=self._headers(body, trace_id))

    def present_error(
        self,
        *,
        code: str,
        http_status: int,
        message: str,
        trace_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> PresentResult[ErrorEnvelope]:
        """Build an ErrorEnvelope and attach ``X-Request-ID`` (no ETag)."""
        err = ErrorObject(
            code=code,
            http_status=http_status,
            message=message,
            details=details or {},
            trace_id=trace_id,
        )
        headers: dict[str, str] = {}
        if trace_id:
            headers["X-Request-ID"] = trace_id
        return PresentResult(
            body=ErrorEnvelope(error=err), headers=headers, status_code=int(http_status)
        )
