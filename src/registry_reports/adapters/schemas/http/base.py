# src/registry_reports/adapters/schemas/http/base.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Base HTTP Schema (Adapters Layer).

Purpose:
    Canonical Pydantic base for all adapter-layer HTTP schemas.
    Enforces strict config, deterministic JSON encoding, and OpenAPI hygiene.

Layer: adapters/schemas/http

Notes:
    - Transport-facing only. Application DTOs must not import from this module.
    - All HTTP envelopes and resource schemas must subclass BaseHTTPSchema.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class BaseHTTPSchema(BaseModel):
    """Base class for all HTTP-facing schemas.

    Provides:
        • Strict `extra='forbid'` validation.
        • Period boundaries rendered with millisecond precision and the offset
          of the reference timezone they were computed in.
        • Consistent `model_dump_http()` for presenters and routers.
    """

    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        str_strip_whitespace=True,
        ser_json_inf_nan="null",
        use_enum_values=True,
        json_schema_extra=None,
        json_encoders={
            datetime: lambda v: v.isoformat(timespec="milliseconds"),
            date: lambda v: v.isoformat(),
        },
    )

    def model_dump_http(self, **kwargs: Any) -> dict[str, Any]:
        """Return a JSON-serializable dict suitable for HTTP responses."""
        return self.model_dump(mode="json", **kwargs)
