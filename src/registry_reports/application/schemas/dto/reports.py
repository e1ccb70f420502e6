# src/registry_reports/application/schemas/dto/reports.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Application DTOs for registry reports.

Synopsis:
    Strict (Pydantic v2) DTOs exchanged between the report use cases and the
    adapters. Domain entities are converted at this boundary with the
    ``from_domain`` constructors so outer layers never touch frozen domain
    dataclasses directly.

Layer:
    application/schemas/dto
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime

from pydantic import ConfigDict, Field

from registry_reports.application.schemas.dto.base import BaseDTO
from registry_reports.domain.entities.report import PeriodBucket, RegistryReport, ReportMeta
from registry_reports.domain.enums.registry import AnchorField, FormCategory, Granularity
from registry_reports.domain.services.report_engine import ReportRequest


def _plain_counts(matrix: Mapping[str, Mapping[str, int]]) -> dict[str, dict[str, int]]:
    return {dim: dict(cats) for dim, cats in matrix.items()}


def _plain_percentages(
    matrix: Mapping[str, Mapping[str, float]] | None,
) -> dict[str, dict[str, float]] | None:
    if matrix is None:
        return None
    return {dim: dict(cats) for dim, cats in matrix.items()}


class ReportQueryDTO(BaseDTO):
    """Parameters of one report build.

    Attributes:
        granularity: Granularity name; validated by the domain so an unknown
            value surfaces as ``INVALID_GRANULARITY`` rather than a schema error.
        dimensions: Dimension names to count.
        categories: Form categories to include (``None`` = all).
        start_date: Inclusive local start date (requires ``end_date``).
        end_date: Inclusive local end date (requires ``start_date``).
        anchor: Fact timestamp used for bucketing.
        include_percentages: Attach per-dimension percentages.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    granularity: str = "yearly"
    dimensions: tuple[str, ...] = ("category",)
    categories: tuple[FormCategory, ...] | None = None
    start_date: date | None = None
    end_date: date | None = None
    anchor: AnchorField = AnchorField.REGISTERED_AT
    include_percentages: bool = False

    def to_request(self) -> ReportRequest:
        """Build the domain request.

        Raises:
            InvalidGranularity: Unsupported granularity.
            InvalidDateRange: Half-specified or inverted date range.
        """
        return ReportRequest(
            granularity=Granularity.parse(self.granularity),
            dimensions=tuple(self.dimensions),
            categories=frozenset(self.categories) if self.categories else None,
            start=self.start_date,
            end=self.end_date,
            anchor=self.anchor,
            include_percentages=self.include_percentages,
        )


class PeriodBucketDTO(BaseDTO):
    """One period of a report with its counts."""

    key: str
    start: datetime
    end: datetime
    total: int = Field(..., ge=0)
    counts: dict[str, dict[str, int]]
    percentages: dict[str, dict[str, float]] | None = None

    @classmethod
    def from_domain(cls, bucket: PeriodBucket) -> PeriodBucketDTO:
        """Convert a domain bucket."""
        return cls(
            key=bucket.key,
            start=bucket.start,
            end=bucket.end,
            total=bucket.total,
            counts=_plain_counts(bucket.counts),
            percentages=_plain_percentages(bucket.percentages),
        )


class ReportMetaDTO(BaseDTO):
    """Summary metadata of a report."""

    granularity: str
    timezone: str
    total_facts: int = Field(..., ge=0)
    skipped: int = Field(..., ge=0)
    available_years: list[int]
    classification: dict[str, int]
    unresolved: dict[str, int]

    @classmethod
    def from_domain(cls, meta: ReportMeta) -> ReportMetaDTO:
        """Convert domain metadata."""
        return cls(
            granularity=meta.granularity.value,
            timezone=meta.timezone,
            total_facts=meta.total_facts,
            skipped=meta.skipped,
            available_years=list(meta.available_years),
            classification=dict(meta.classification),
            unresolved=dict(meta.unresolved),
        )


class RegistryReportDTO(BaseDTO):
    """A complete report."""

    periods: list[PeriodBucketDTO]
    totals: dict[str, dict[str, int]]
    total_percentages: dict[str, dict[str, float]] | None = None
    meta: ReportMetaDTO

    @classmethod
    def from_domain(cls, report: RegistryReport) -> RegistryReportDTO:
        """Convert a domain report."""
        return cls(
            periods=[PeriodBucketDTO.from_domain(b) for b in report.periods],
            totals=_plain_counts(report.totals),
            total_percentages=_plain_percentages(report.total_percentages),
            meta=ReportMetaDTO.from_domain(report.meta),
        )


class ReportPageQueryDTO(BaseDTO):
    """Paginated report query over stored facts.

    Attributes:
        query: Report parameters.
        page: 1-based page number.
        page_size: Periods per page (<= 200).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    query: ReportQueryDTO
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1, le=200)


class ReportPageDTO(BaseDTO):
    """One page of report periods plus whole-report totals and metadata."""

    items: list[PeriodBucketDTO]
    page: int
    page_size: int
    total: int = Field(..., ge=0, description="Total number of periods in the report.")
    totals: dict[str, dict[str, int]]
    meta: ReportMetaDTO


class DimensionCatalogDTO(BaseDTO):
    """Dimension names with the category keys each can produce."""

    timezone: str
    dimensions: dict[str, list[str]]
