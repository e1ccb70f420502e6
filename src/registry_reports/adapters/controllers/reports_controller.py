# src/registry_reports/adapters/controllers/reports_controller.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Reports Controller.

Summary:
    Thin adapter coordinating the report use-cases: maps HTTP payloads to
    application DTOs and domain facts, then delegates.

Layer:
    adapters/controllers
"""

from __future__ import annotations

from datetime import tzinfo

from registry_reports.adapters.controllers.base import BaseController
from registry_reports.adapters.mappers.fact_mapper import to_registry_facts
from registry_reports.adapters.schemas.http.reports import AggregateRequestHTTP
from registry_reports.application.schemas.dto.reports import (
    DimensionCatalogDTO,
    RegistryReportDTO,
    ReportPageDTO,
    ReportPageQueryDTO,
    ReportQueryDTO,
)
from registry_reports.application.use_cases.reports.generate_registry_report import (
    GenerateRegistryReportUseCase,
)
from registry_reports.application.use_cases.reports.get_registry_report_page import (
    GetRegistryReportPageUseCase,
)
from registry_reports.application.use_cases.reports.list_report_dimensions import (
    ListReportDimensionsUseCase,
)


class ReportsController(BaseController):
    """Controller orchestrating registry report generation."""

    def __init__(
        self,
        *,
        generate: GenerateRegistryReportUseCase,
        page: GetRegistryReportPageUseCase,
        dimensions: ListReportDimensionsUseCase,
        tz: tzinfo,
    ) -> None:
        """Initialize the controller.

        Args:
            generate: Use-case building a report from supplied facts.
            page: Use-case building a paginated report from stored facts.
            dimensions: Use-case describing the dimension catalog.
            tz: Reference timezone used by the fact mapper.
        """
        self._generate = generate
        self._page = page
        self._dimensions = dimensions
        self._tz = tz

    async def aggregate(self, body: AggregateRequestHTTP) -> RegistryReportDTO:
        """Aggregate the facts carried in the request body."""
        query = ReportQueryDTO(
            granularity=body.granularity,
            dimensions=tuple(body.dimensions),
            categories=tuple(body.categories) if body.categories else None,
            start_date=body.date_range.start if body.date_range else None,
            end_date=body.date_range.end if body.date_range else None,
            anchor=body.anchor,
            include_percentages=body.include_percentages,
        )
        facts = to_registry_facts(body.facts, tz=self._tz)
        return await self._generate.execute(query, facts=facts)

    async def periods(self, q: ReportPageQueryDTO) -> ReportPageDTO:
        """Return one page of the stored-data report."""
        return await self._page.execute(q)

    async def dimensions(self) -> DimensionCatalogDTO:
        """Return the dimension catalog."""
        return await self._dimensions.execute()
