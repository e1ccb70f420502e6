# src/registry_reports/application/use_cases/reports/generate_registry_report.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Use case: Generate a registry report from supplied facts.

Purpose:
    Run the report engine over a caller-supplied fact list, record metrics,
    and emit the data-quality log events (skipped facts, fallback
    resolutions) that the pure engine deliberately does not emit.

Layer:
    application/use_cases/reports
"""

from __future__ import annotations

from collections.abc import Sequence

from registry_reports.application.schemas.dto.reports import ReportQueryDTO, RegistryReportDTO
from registry_reports.domain.entities.registry_fact import RegistryFact
from registry_reports.domain.services.report_engine import RegistryReportEngine
from registry_reports.infrastructure.logging.logger import get_json_logger
from registry_reports.infrastructure.observability.metrics_reports import (
    observe_report_latency,
    record_report_meta,
)

logger = get_json_logger(__name__)


class GenerateRegistryReportUseCase:
    """Build a complete report for a fact list.

    Args:
        engine: Report engine bound to the loaded vocabularies and timezone.

    Raises:
        InvalidGranularity: If the query names an unsupported granularity.
        InvalidDateRange: If the query's date range is half specified or inverted.
        UnknownDimension: If the query names a dimension outside the catalog.
    """

    def __init__(self, *, engine: RegistryReportEngine) -> None:
        self._engine = engine

    async def execute(
        self,
        query: ReportQueryDTO,
        *,
        facts: Sequence[RegistryFact],
        report_name: str = "aggregate",
    ) -> RegistryReportDTO:
        """Execute the report build.

        Args:
            query: Report parameters.
            facts: The whole candidate dataset; filtering happens in the engine.
            report_name: Label for the latency histogram.

        Returns:
            RegistryReportDTO: Gapless periods, totals and metadata.
        """
        request = query.to_request()
        with observe_report_latency(report_name):
            report = self._engine.build(facts, request)

        meta = report.meta
        record_report_meta(meta)

        logger.info(
            "registry_report_built",
            extra={
                "extra": {
                    "report": report_name,
                    "granularity": meta.granularity.value,
                    "dimensions": list(request.dimensions),
                    "periods": len(report.periods),
                    "input_facts": len(facts),
                    "total_facts": meta.total_facts,
                    "skipped": meta.skipped,
                }
            },
        )
        unresolved = {dim: n for dim, n in meta.unresolved.items() if n}
        if unresolved:
            logger.info(
                "registry_report_unresolved",
                extra={"extra": {"report": report_name, "unresolved": unresolved}},
            )

        return RegistryReportDTO.from_domain(report)
