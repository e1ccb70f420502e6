# src/registry_reports/dependencies/reports.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Dependency wiring for registry reports.

Overview:
    FastAPI dependency providers for the report engine, the fact source and
    the reports controller consumed by ``/v1/reports``.

Layer:
    dependencies

Design:
    * Vocabularies are loaded once per (path) and the engine once per
      (timezone, path); both are immutable and shared across requests.
    * The fact source is a process-wide in-memory repository, filled once from
      ``FACTS_SEED_PATH`` when that setting is present. Tests override
      :func:`get_fact_source` (or the controller) via ``dependency_overrides``.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from registry_reports.adapters.controllers.reports_controller import ReportsController
from registry_reports.adapters.repositories.fact_seed import load_fact_seed
from registry_reports.adapters.repositories.in_memory_fact_repository import (
    InMemoryFactRepository,
)
from registry_reports.application.interfaces.fact_source import FactSource
from registry_reports.application.use_cases.reports.generate_registry_report import (
    GenerateRegistryReportUseCase,
)
from registry_reports.application.use_cases.reports.get_registry_report_page import (
    GetRegistryReportPageUseCase,
)
from registry_reports.application.use_cases.reports.list_report_dimensions import (
    ListReportDimensionsUseCase,
)
from registry_reports.config.settings import Settings
from registry_reports.config.settings import get_settings as core_get_settings
from registry_reports.domain.services.period_resolver import reference_timezone
from registry_reports.domain.services.report_engine import RegistryReportEngine
from registry_reports.infrastructure.vocabulary.loader import get_vocabularies


def get_settings() -> Settings:
    """Return application settings (patchable seam for tests)."""
    return core_get_settings()


@lru_cache(maxsize=4)
def _build_engine(timezone: str, vocabulary_path: str | None) -> RegistryReportEngine:
    return RegistryReportEngine(get_vocabularies(vocabulary_path), timezone=timezone)


def get_report_engine(settings: Settings = Depends(get_settings)) -> RegistryReportEngine:  # noqa: B008
    """Return the shared report engine for the configured timezone and vocabularies."""
    return _build_engine(settings.report_timezone, settings.vocabulary_path)


@lru_cache(maxsize=1)
def get_fact_repository() -> InMemoryFactRepository:
    """Return the process-wide in-memory fact repository, seeded once if configured."""
    settings = core_get_settings()
    if not settings.facts_seed_path:
        return InMemoryFactRepository()
    facts = load_fact_seed(
        Path(settings.facts_seed_path), tz=reference_timezone(settings.report_timezone)
    )
    return InMemoryFactRepository(facts)


def get_fact_source() -> FactSource:
    """FastAPI dependency: the fact source backing stored-data reports."""
    return get_fact_repository()


def get_reports_controller(
    engine: RegistryReportEngine = Depends(get_report_engine),  # noqa: B008
    source: FactSource = Depends(get_fact_source),  # noqa: B008
) -> ReportsController:
    """Build the reports controller for one request."""
    generate = GenerateRegistryReportUseCase(engine=engine)
    return ReportsController(
        generate=generate,
        page=GetRegistryReportPageUseCase(source=source, generator=generate),
        dimensions=ListReportDimensionsUseCase(engine=engine),
        tz=reference_timezone(engine.timezone_name),
    )
