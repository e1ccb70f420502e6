# src/registry_reports/adapters/presenters/reports_presenter.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Presenters for registry report HTTP responses.

Purpose:
    Transform application-layer report DTOs into stable HTTP envelopes and
    attach ETag / X-Request-ID headers.

Layer:
    adapters/presenters
"""

from __future__ import annotations

from typing import Any

from registry_reports.adapters.presenters.base_presenter import BasePresenter, PresentResult
from registry_reports.adapters.schemas.http.envelopes import SuccessEnvelope
from registry_reports.adapters.schemas.http.reports import (
    DimensionCatalogHTTP,
    PeriodBucketHTTP,
    RegistryReportHTTP,
    ReportMetaHTTP,
    ReportPeriodsPageHTTP,
)
from registry_reports.application.schemas.dto.reports import (
    DimensionCatalogDTO,
    PeriodBucketDTO,
    RegistryReportDTO,
    ReportMetaDTO,
    ReportPageDTO,
)


def _bucket(dto: PeriodBucketDTO) -> PeriodBucketHTTP:
    return PeriodBucketHTTP.model_validate(dto.model_dump())


def _meta(dto: ReportMetaDTO) -> ReportMetaHTTP:
    return ReportMetaHTTP.model_validate(dto.model_dump())


class ReportsPresenter(BasePresenter[Any]):
    """Presenter for the report endpoints."""

    def present_report(
        self,
        dto: RegistryReportDTO,
        *,
        trace_id: str | None = None,
    ) -> PresentResult[SuccessEnvelope[Any]]:
        """Present a complete report as ``{"data": {periods, totals, meta}}``."""
        data = RegistryReportHTTP(
            periods=[_bucket(b) for b in dto.periods],
            totals=dto.totals,
            total_percentages=dto.total_percentages,
            meta=_meta(dto.meta),
        )
        return self.present_success(data=data, trace_id=trace_id)

    def present_page(
        self,
        dto: ReportPageDTO,
        *,
        trace_id: str | None = None,
    ) -> PresentResult[ReportPeriodsPageHTTP]:
        """Present one page of report periods.

        The ETag covers the page body, so it changes with the page number as
        well as with the underlying facts.
        """
        body = ReportPeriodsPageHTTP(
            page=dto.page,
            page_size=dto.page_size,
            total=dto.total,
            items=[_bucket(b) for b in dto.items],
            totals=dto.totals,
            meta=_meta(dto.meta),
        )
        return PresentResult(body=body, headers=self._headers(body, trace_id))

    def present_dimensions(
        self,
        dto: DimensionCatalogDTO,
        *,
        trace_id: str | None = None,
    ) -> PresentResult[SuccessEnvelope[Any]]:
        """Present the dimension catalog."""
        data = DimensionCatalogHTTP(timezone=dto.timezone, dimensions=dto.dimensions)
        return self.present_success(data=data, trace_id=trace_id)
