# src/registry_reports/application/use_cases/reports/list_report_dimensions.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Use case: List report dimensions and their category keys."""

from __future__ import annotations

from registry_reports.application.schemas.dto.reports import DimensionCatalogDTO
from registry_reports.domain.services.report_engine import RegistryReportEngine


class ListReportDimensionsUseCase:
    """Describe every dimension the engine can count, as configured."""

    def __init__(self, *, engine: RegistryReportEngine) -> None:
        self._engine = engine

    async def execute(self) -> DimensionCatalogDTO:
        catalog = self._engine.dimension_catalog()
        return DimensionCatalogDTO(
            timezone=self._engine.timezone_name,
            dimensions={name: list(categories) for name, categories in catalog.items()},
        )
