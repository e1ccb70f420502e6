# src/registry_reports/domain/services/report_engine.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Registry report engine.

Purpose:
    Compose the period resolver, matchers, bracket classifier, aggregator and
    zero-fill reconciler into one deterministic report build:

        facts -> filter -> aggregate -> reconcile -> percentages -> totals

Layer:
    domain/services

Notes:
    - Pure domain logic: the engine never logs. Callers read ``meta.skipped``
      and ``meta.unresolved`` for data-quality signals.
    - ``available_years`` and ``classification`` are computed over the whole
      input, before category or date filtering.
    - The engine holds only immutable vocabularies and a timezone, so one
      instance can serve concurrent requests.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from registry_reports.domain.entities.registry_fact import RegistryFact
from registry_reports.domain.entities.report import RegistryReport, ReportMeta
from registry_reports.domain.entities.vocabulary import VocabularyBundle
from registry_reports.domain.enums.registry import AnchorField, FormCategory, Granularity
from registry_reports.domain.exceptions.reports import InvalidDateRange
from registry_reports.domain.services.period_resolver import (
    DEFAULT_REPORT_TIMEZONE,
    reference_timezone,
    to_local_date,
)
from registry_reports.domain.services.report_aggregator import (
    DIMENSION_NAMES,
    aggregate,
    build_dimensions,
    matrix_percentages,
    merge_counts,
    with_percentages,
)
from registry_reports.domain.services.zero_fill import PeriodAxis, reconcile


@dataclass(frozen=True, slots=True)
class ReportRequest:
    """Parameters of one report build.

    Attributes:
        granularity: Period granularity.
        dimensions: Dimension names to count (see ``DIMENSION_NAMES``).
        categories: Form categories to include; ``None`` includes all.
        start: Inclusive start date (local); requires ``end``.
        end: Inclusive end date (local); requires ``start``.
        anchor: Fact timestamp used for bucketing and range filtering.
        include_percentages: Attach per-dimension percentages.
    """

    granularity: Granularity
    dimensions: tuple[str, ...] = ("category",)
    categories: frozenset[FormCategory] | None = None
    start: date | None = None
    end: date | None = None
    anchor: AnchorField = AnchorField.REGISTERED_AT
    include_percentages: bool = False

    def __post_init__(self) -> None:
        if (self.start is None) != (self.end is None):
            raise InvalidDateRange(
                "start and end dates must be provided together",
                details={
                    "start": self.start.isoformat() if self.start else None,
                    "end": self.end.isoformat() if self.end else None,
                },
            )
        if self.start is not None and self.end is not None and self.start > self.end:
            raise InvalidDateRange(
                "start date must not be after end date",
                details={"start": self.start.isoformat(), "end": self.end.isoformat()},
            )

    @property
    def has_range(self) -> bool:
        """Return True when an explicit date range was requested."""
        return self.start is not None and self.end is not None


class RegistryReportEngine:
    """Build registry reports against a fixed vocabulary bundle.

    Args:
        vocabularies: Immutable vocabularies loaded at process start.
        timezone: IANA name of the reference timezone for all bucketing.
    """

    __slots__ = ("_vocabularies", "_timezone_name", "_tz")

    def __init__(
        self,
        vocabularies: VocabularyBundle,
        *,
        timezone: str = DEFAULT_REPORT_TIMEZONE,
    ) -> None:
        self._vocabularies = vocabularies
        self._timezone_name = timezone
        self._tz = reference_timezone(timezone)

    @property
    def vocabularies(self) -> VocabularyBundle:
        """Return the vocabulary bundle used for classification."""
        return self._vocabularies

    @property
    def timezone_name(self) -> str:
        """Return the IANA name of the reference timezone."""
        return self._timezone_name

    def dimension_catalog(self) -> dict[str, tuple[str, ...]]:
        """Return every dimension name with the categories it can produce."""
        return {
            dim.name: dim.categories
            for dim in build_dimensions(DIMENSION_NAMES, self._vocabularies)
        }

    def build(self, facts: Iterable[RegistryFact], request: ReportRequest) -> RegistryReport:
        """Build a complete report.

        Args:
            facts: The whole candidate dataset (unfiltered).
            request: Report parameters.

        Returns:
            RegistryReport: Gapless, chronologically sorted periods with totals
            and metadata.

        Raises:
            InvalidGranularity: If the granularity is not supported.
            UnknownDimension: If a requested dimension is not in the catalog.
        """
        granularity = Granularity.parse(request.granularity)
        dimensions = build_dimensions(request.dimensions, self._vocabularies)
        all_facts = list(facts)

        years: set[int] = set()
        classification = {c.value: 0 for c in FormCategory}
        for fact in all_facts:
            classification[fact.category.value] += 1
            timestamp = fact.anchor(request.anchor)
            if timestamp is not None:
                years.add(to_local_date(timestamp, self._tz).year)

        aggregated_by_category = {c.value: 0 for c in FormCategory}
        selected: list[RegistryFact] = []
        skipped = 0
        for fact in all_facts:
            if request.categories and fact.category not in request.categories:
                continue
            timestamp = fact.anchor(request.anchor)
            if timestamp is None:
                skipped += 1
                continue
            if request.start is not None and request.end is not None:
                day = to_local_date(timestamp, self._tz)
                if not request.start <= day <= request.end:
                    continue
            selected.append(fact)
            aggregated_by_category[fact.category.value] += 1

        buckets = aggregate(
            selected, granularity, dimensions, tz=self._tz, anchor=request.anchor
        )

        if request.start is not None and request.end is not None:
            axis = PeriodAxis.from_range(granularity, request.start, request.end, self._tz)
        else:
            axis = PeriodAxis.from_years(granularity, years, self._tz)

        template = {dim.name: dim.categories for dim in dimensions}
        periods = reconcile(buckets, axis, categories=template)
        if request.include_percentages:
            periods = [with_percentages(bucket) for bucket in periods]

        totals = merge_counts(periods, seed=template)
        unresolved = {
            dim.name: totals[dim.name].get(dim.fallback, 0)
            for dim in dimensions
            if dim.fallback is not None
        }

        meta = ReportMeta(
            granularity=granularity,
            timezone=self._timezone_name,
            total_facts=len(selected),
            skipped=skipped,
            available_years=tuple(sorted(years)),
            classification=classification,
            unresolved=unresolved,
            aggregated_by_category=aggregated_by_category,
        )
        return RegistryReport(
            periods=tuple(periods),
            totals=totals,
            meta=meta,
            total_percentages=matrix_percentages(totals) if request.include_percentages else None,
        )
