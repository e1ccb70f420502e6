# src/registry_reports/domain/entities/report.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Report output entities.

Purpose:
    Value objects produced by the report engine: resolved periods, period
    buckets with per-dimension counts, and the report envelope with its
    summary metadata.

Layer:
    domain/entities

Notes:
    Buckets are created per report request and never persisted.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime

from registry_reports.domain.entities.base import BaseEntity
from registry_reports.domain.enums.registry import Granularity

type CountMatrix = Mapping[str, Mapping[str, int]]
type PercentMatrix = Mapping[str, Mapping[str, float]]


@dataclass(frozen=True, slots=True)
class ReportPeriod(BaseEntity):
    """A resolved period: canonical key plus inclusive boundaries.

    Attributes:
        key: Canonical, chronologically sortable key (``2024``, ``2024-W07``,
            ``2024-03``, ``2024-Q1``, ``2024-03-15``).
        start: First instant of the period (00:00:00.000, reference timezone).
        end: Last instant of the period (23:59:59.999, reference timezone).
    """

    key: str
    start: datetime
    end: datetime


@dataclass(frozen=True, slots=True)
class PeriodBucket(BaseEntity):
    """Aggregated counts for one period.

    Attributes:
        key: Period key (unique within a report).
        start: Inclusive start boundary.
        end: Inclusive end boundary.
        total: Number of facts folded into this bucket.
        counts: ``dimension -> category -> count``; every known category is present.
        percentages: ``dimension -> category -> percent`` when requested.
    """

    key: str
    start: datetime
    end: datetime
    total: int = 0
    counts: CountMatrix = field(default_factory=dict)
    percentages: PercentMatrix | None = None

    @property
    def period(self) -> ReportPeriod:
        """Return the bucket's period without its counts."""
        return ReportPeriod(key=self.key, start=self.start, end=self.end)


@dataclass(frozen=True, slots=True)
class ReportMeta(BaseEntity):
    """Summary metadata attached to a report.

    Attributes:
        granularity: Granularity used for the period axis.
        timezone: IANA name of the reference timezone.
        total_facts: Facts that passed the filters and were aggregated.
        skipped: Facts excluded because their anchor timestamp is missing.
        available_years: Distinct anchor years across the whole input dataset.
        classification: Fact counts per form category across the whole input.
        unresolved: Per dimension, facts that resolved to the fallback category.
        aggregated_by_category: Aggregated fact counts per form category,
            independent of the requested dimensions.
    """

    granularity: Granularity
    timezone: str
    total_facts: int
    skipped: int
    available_years: tuple[int, ...]
    classification: Mapping[str, int]
    unresolved: Mapping[str, int]
    aggregated_by_category: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class RegistryReport(BaseEntity):
    """A complete report: gapless periods, overall totals, and metadata."""

    periods: tuple[PeriodBucket, ...]
    totals: CountMatrix
    meta: ReportMeta
    total_percentages: PercentMatrix | None = None
