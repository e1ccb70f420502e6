# src/registry_reports/domain/services/zero_fill.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Zero-fill reconciliation of sparse period buckets.

Purpose:
    Expand aggregated buckets onto a complete period axis so reports never
    have gaps: every period of the axis appears exactly once, periods without
    data carry explicit zero counts for every category, and real data always
    wins over the synthetic zeros.

Layer:
    domain/services

Notes:
    - The axis is either an explicit date range or the contiguous span of
      calendar years found in the dataset (gap years included).
    - ``reconcile`` is idempotent: reconciling its own output against the same
      axis returns an equal list.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from datetime import date, tzinfo

from registry_reports.domain.entities.report import PeriodBucket, ReportPeriod
from registry_reports.domain.enums.registry import Granularity
from registry_reports.domain.services.period_resolver import (
    iter_periods,
    period_sort_key,
    periods_for_year,
)

type CategoryTemplate = Mapping[str, Sequence[str]]


@dataclass(frozen=True, slots=True)
class PeriodAxis:
    """The full, ordered set of periods a report must cover.

    Attributes:
        granularity: Granularity of every period on the axis.
        periods: Periods in chronological order, unique by key.
    """

    granularity: Granularity
    periods: tuple[ReportPeriod, ...]

    @classmethod
    def from_range(
        cls,
        granularity: Granularity | str,
        start: date,
        end: date,
        tz: tzinfo,
    ) -> PeriodAxis:
        """Build an axis covering every period intersecting ``[start, end]``.

        Raises:
            InvalidDateRange: If ``start`` is after ``end``.
            InvalidGranularity: If ``granularity`` is not supported.
        """
        g = Granularity.parse(granularity)
        return cls(granularity=g, periods=tuple(iter_periods(start, end, g, tz)))

    @classmethod
    def from_years(
        cls,
        granularity: Granularity | str,
        years: Iterable[int],
        tz: tzinfo,
    ) -> PeriodAxis:
        """Build an axis spanning the earliest through the latest of ``years``.

        Years missing in between are included so a dataset with facts in 2022
        and 2024 still yields 2023.
        """
        g = Granularity.parse(granularity)
        distinct = sorted(set(years))
        if not distinct:
            return cls(granularity=g, periods=())
        seen: dict[str, ReportPeriod] = {}
        for year in range(distinct[0], distinct[-1] + 1):
            for period in periods_for_year(year, g, tz):
                seen.setdefault(period.key, period)
        return cls(granularity=g, periods=tuple(seen.values()))

    @property
    def keys(self) -> tuple[str, ...]:
        """Return the period keys of the axis."""
        return tuple(p.key for p in self.periods)


def category_template(buckets: Iterable[PeriodBucket]) -> dict[str, list[str]]:
    """Return the union of dimension categories found in ``buckets``."""
    template: dict[str, dict[str, None]] = {}
    for bucket in buckets:
        for dim, cats in bucket.counts.items():
            target = template.setdefault(dim, {})
            for category in cats:
                target.setdefault(category, None)
    return {dim: list(cats) for dim, cats in template.items()}


def _zero_bucket(period: ReportPeriod, template: CategoryTemplate) -> PeriodBucket:
    return PeriodBucket(
        key=period.key,
        start=period.start,
        end=period.end,
        total=0,
        counts={dim: dict.fromkeys(cats, 0) for dim, cats in template.items()},
    )


def _complete(bucket: PeriodBucket, template: CategoryTemplate) -> PeriodBucket:
    """Return ``bucket`` with any category missing from ``template`` added as zero."""
    missing = any(
        category not in bucket.counts.get(dim, {})
        for dim, cats in template.items()
        for category in cats
    )
    if not missing:
        return bucket

    counts: dict[str, dict[str, int]] = {}
    for dim, cats in template.items():
        existing = bucket.counts.get(dim, {})
        filled = {category: existing.get(category, 0) for category in cats}
        for category, count in existing.items():
            filled.setdefault(category, count)
        counts[dim] = filled
    for dim, cats in bucket.counts.items():
        counts.setdefault(dim, dict(cats))

    pct = None
    if bucket.percentages is not None:
        pct = {
            dim: {category: bucket.percentages.get(dim, {}).get(category, 0.0) for category in cats}
            for dim, cats in counts.items()
        }
    return replace(bucket, counts=counts, percentages=pct)


def reconcile(
    buckets: Iterable[PeriodBucket],
    axis: PeriodAxis,
    *,
    categories: CategoryTemplate | None = None,
) -> list[PeriodBucket]:
    """Merge real buckets onto ``axis``, zero-filling absent periods.

    Args:
        buckets: Real buckets (typically from the aggregator).
        axis: Full expected period axis.
        categories: ``dimension -> categories`` every bucket must expose. When
            omitted, the union of categories present in ``buckets`` is used.

    Returns:
        list[PeriodBucket]: One bucket per key, sorted chronologically. Real
        buckets outside the axis are kept.
    """
    real = list(buckets)
    template: CategoryTemplate = (
        categories if categories is not None else category_template(real)
    )

    merged: dict[str, PeriodBucket] = {
        period.key: _zero_bucket(period, template) for period in axis.periods
    }
    for bucket in real:
        merged[bucket.key] = _complete(bucket, template)

    return sorted(
        merged.values(),
        key=lambda b: period_sort_key(b.key, axis.granularity),
    )
