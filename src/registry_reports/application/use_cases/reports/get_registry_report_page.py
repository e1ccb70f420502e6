# src/registry_reports/application/use_cases/reports/get_registry_report_page.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Use case: Paginated report over stored facts.

Purpose:
    Load facts from the configured :class:`FactSource`, build the full report
    and return one page of its periods together with the whole-report totals
    and metadata.

Layer:
    application/use_cases/reports

Notes:
    The whole dataset is loaded (no category pushdown) because
    ``meta.classification`` and ``meta.available_years`` describe every
    stored fact, not only the filtered ones.
"""

from __future__ import annotations

from registry_reports.application.interfaces.fact_source import FactSource
from registry_reports.application.schemas.dto.reports import ReportPageDTO, ReportPageQueryDTO
from registry_reports.application.use_cases.reports.generate_registry_report import (
    GenerateRegistryReportUseCase,
)


class GetRegistryReportPageUseCase:
    """Return one page of a stored-data report.

    Args:
        source: Fact source port.
        generator: Report generation use case.
    """

    def __init__(self, *, source: FactSource, generator: GenerateRegistryReportUseCase) -> None:
        self._source = source
        self._generator = generator

    async def execute(self, q: ReportPageQueryDTO) -> ReportPageDTO:
        """Execute the paginated report.

        Pages past the end return an empty ``items`` list with the real
        ``total``.
        """
        facts = await self._source.list_facts()
        report = await self._generator.execute(q.query, facts=facts, report_name="periods")

        offset = (q.page - 1) * q.page_size
        items = report.periods[offset : offset + q.page_size]
        return ReportPageDTO(
            items=items,
            page=q.page,
            page_size=q.page_size,
            total=len(report.periods),
            totals=report.totals,
            meta=report.meta,
        )
