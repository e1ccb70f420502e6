# src/registry_reports/adapters/schemas/http/reports.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""HTTP schemas for registry report endpoints (v1).

Layer:
    adapters/schemas/http

Notes:
    Fact inputs are deliberately lenient: numeric fields accept strings and
    unparseable values resolve to the dimension's fallback label instead of
    failing validation. Granularity and dimension names are plain strings so
    the domain can answer with its own error codes.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

from pydantic import ConfigDict, Field, field_validator

from registry_reports.adapters.schemas.http.base import BaseHTTPSchema
from registry_reports.adapters.schemas.http.envelopes import PaginatedEnvelope
from registry_reports.domain.enums.registry import AnchorField, FormCategory

_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class AgeAtDeathHTTP(BaseHTTPSchema):
    """Structured age at death."""

    years: int | None = Field(default=None, ge=0)
    months: int | None = Field(default=None, ge=0)
    days: int | None = Field(default=None, ge=0)
    hours: int | None = Field(default=None, ge=0)
    minutes: int | None = Field(default=None, ge=0)


class FactHTTP(BaseHTTPSchema):
    """One registry fact in request bodies."""

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "examples": [
                {
                    "id": "d-2024-0001",
                    "category": "DEATH",
                    "registered_at": "2024-03-02T01:15:00Z",
                    "occurred_at": "2024-02-28",
                    "sex": "Female",
                    "age_at_death": {"years": 0, "months": 3},
                    "residence_barangay": "Bitano",
                    "residence_city": "Legazpi City",
                    "cause_of_death": "Pneumonia",
                }
            ]
        },
    )

    id: str = Field(..., min_length=1, description="Opaque unique identifier.")
    category: FormCategory = Field(..., description="Registry form category.")
    registered_at: datetime | date | None = Field(
        default=None, description="Registration timestamp (naive values are UTC)."
    )
    occurred_at: datetime | date | None = Field(
        default=None, description="Date of the birth, death or marriage."
    )
    sex: str | None = None
    age_years: float | str | None = Field(
        default=None, description="Age in completed years; non-numeric values resolve to 'unknown'."
    )
    date_of_birth: date | None = Field(
        default=None,
        description="Used to derive age_years (at occurred_at) when age_years is absent.",
    )
    age_at_death: AgeAtDeathHTTP | None = None
    residence_barangay: str | None = None
    residence_city: str | None = None
    residence_country: str | None = None
    cause_of_death: str | None = None
    weight_grams: float | str | None = Field(
        default=None, description="Birth weight in grams; commas are accepted ('2,500')."
    )
    is_late_registration: bool | None = None
    ceremony_type: str | None = None
    place_of_death_type: str | None = Field(
        default=None, description="Kind of place of death ('Hospital', 'Residence'...)."
    )
    place_of_death_institution: str | None = None
    corpse_disposal: str | None = Field(default=None, description="Burial, cremation or other.")
    cemetery_name: str | None = None
    cemetery_city: str | None = None
    has_transfer_permit: bool | None = None
    birth_attendant: str | None = None
    place_of_birth: str | None = None

    @field_validator("registered_at", "occurred_at", mode="before")
    @classmethod
    def _date_only_strings_are_dates(cls, value: Any) -> Any:
        """Keep ``YYYY-MM-DD`` strings as calendar dates, not UTC midnights."""
        if isinstance(value, str) and _DATE_ONLY_RE.match(value.strip()):
            return date.fromisoformat(value.strip())
        return value


class DateRangeHTTP(BaseHTTPSchema):
    """Inclusive local date range."""

    start: date
    end: date


class AggregateRequestHTTP(BaseHTTPSchema):
    """Request body for POST /v1/reports/aggregate."""

    facts: list[FactHTTP] = Field(..., description="Facts to aggregate.")
    granularity: str = Field(
        default="yearly",
        description="daily | weekly | monthly | quarterly | yearly",
        examples=["monthly"],
    )
    date_range: DateRangeHTTP | None = Field(
        default=None,
        description="Optional inclusive range; without it the axis spans the facts' years.",
    )
    dimensions: list[str] = Field(
        default_factory=lambda: ["category"],
        description="Dimension names (see GET /v1/reports/dimensions).",
        examples=[["category", "sex"]],
    )
    categories: list[FormCategory] | None = Field(
        default=None, description="Restrict to these form categories."
    )
    anchor: AnchorField = Field(
        default=AnchorField.REGISTERED_AT,
        description="Fact timestamp used for bucketing.",
    )
    include_percentages: bool = False


class PeriodBucketHTTP(BaseHTTPSchema):
    """One report period."""

    key: str = Field(..., examples=["2024-Q1"])
    start: datetime
    end: datetime
    total: int = Field(..., ge=0)
    counts: dict[str, dict[str, int]]
    percentages: dict[str, dict[str, float]] | None = None


class ReportMetaHTTP(BaseHTTPSchema):
    """Report metadata."""

    granularity: str
    timezone: str
    total_facts: int = Field(..., ge=0)
    skipped: int = Field(..., ge=0, description="Facts without the anchor timestamp.")
    available_years: list[int]
    classification: dict[str, int] = Field(
        ..., description="Fact counts per form category over the whole dataset."
    )
    unresolved: dict[str, int] = Field(
        ..., description="Per dimension, facts that fell to the fallback category."
    )


class RegistryReportHTTP(BaseHTTPSchema):
    """A complete report."""

    periods: list[PeriodBucketHTTP]
    totals: dict[str, dict[str, int]]
    total_percentages: dict[str, dict[str, float]] | None = None
    meta: ReportMetaHTTP


class ReportPeriodsPageHTTP(PaginatedEnvelope[PeriodBucketHTTP]):
    """Paginated report periods with whole-report totals and metadata."""

    model_config = ConfigDict(title="ReportPeriodsPage", extra="forbid")

    totals: dict[str, dict[str, int]]
    meta: ReportMetaHTTP


class DimensionCatalogHTTP(BaseHTTPSchema):
    """Dimension catalog."""

    timezone: str
    dimensions: dict[str, list[str]]
