# tests/unit/application/reports/test_report_use_cases.py
from __future__ import annotations

import logging
from datetime import date

import prometheus_client as prom
import pytest

from registry_reports.adapters.repositories.in_memory_fact_repository import (
    InMemoryFactRepository,
)
from registry_reports.application.schemas.dto.reports import ReportPageQueryDTO, ReportQueryDTO
from registry_reports.application.use_cases.reports.generate_registry_report import (
    GenerateRegistryReportUseCase,
)
from registry_reports.application.use_cases.reports.get_registry_report_page import (
    GetRegistryReportPageUseCase,
)
from registry_reports.application.use_cases.reports.list_report_dimensions import (
    ListReportDimensionsUseCase,
)
from registry_reports.domain.enums.registry import FormCategory
from registry_reports.domain.exceptions.reports import InvalidDateRange, InvalidGranularity
from registry_reports.domain.services.report_engine import RegistryReportEngine


@pytest.mark.anyio
async def test_generate_returns_dto_and_logs(
    engine: RegistryReportEngine, make_fact, caplog: pytest.LogCaptureFixture
) -> None:
    uc = GenerateRegistryReportUseCase(engine=engine)
    facts = [
        make_fact(FormCategory.DEATH, registered_at=date(2024, 3, 1), residence_barangay_raw="Atlantis"),
        make_fact(registered_at=None),
    ]
    with caplog.at_level(logging.INFO):
        dto = await uc.execute(
            ReportQueryDTO(granularity="Monthly", dimensions=("category", "barangay")), facts=facts
        )

    assert dto.meta.granularity == "monthly"
    assert len(dto.periods) == 12
    assert dto.totals["category"]["DEATH"] == 1
    assert dto.meta.skipped == 1
    assert dto.meta.unresolved == {"barangay": 1}

    messages = [r.getMessage() for r in caplog.records]
    assert "registry_report_built" in messages
    assert "registry_report_unresolved" in messages
    built = next(r for r in caplog.records if r.getMessage() == "registry_report_built")
    assert built.extra["skipped"] == 1  # type: ignore[attr-defined]


def _facts_sample(category: str) -> float:
    value = prom.REGISTRY.get_sample_value("registry_reports_facts_total", {"category": category})
    return value or 0.0


@pytest.mark.anyio
async def test_generate_counts_facts_metric_without_category_dimension(
    engine: RegistryReportEngine, make_fact
) -> None:
    uc = GenerateRegistryReportUseCase(engine=engine)
    deaths = _facts_sample("DEATH")
    births = _facts_sample("BIRTH")
    facts = [
        make_fact(FormCategory.DEATH, residence_barangay_raw="Bitano"),
        make_fact(FormCategory.DEATH, residence_barangay_raw="Rawis"),
        make_fact(residence_barangay_raw="Bitano"),
    ]

    dto = await uc.execute(
        ReportQueryDTO(granularity="yearly", dimensions=("barangay",)), facts=facts
    )

    assert "category" not in dto.totals
    assert _facts_sample("DEATH") == deaths + 2
    assert _facts_sample("BIRTH") == births + 1


@pytest.mark.anyio
async def test_generate_propagates_domain_errors(engine: RegistryReportEngine) -> None:
    uc = GenerateRegistryReportUseCase(engine=engine)
    with pytest.raises(InvalidGranularity):
        await uc.execute(ReportQueryDTO(granularity="hourly"), facts=[])
    with pytest.raises(InvalidDateRange):
        await uc.execute(ReportQueryDTO(start_date=date(2024, 1, 1)), facts=[])


def test_query_dto_to_request() -> None:
    request = ReportQueryDTO(
        granularity="weekly",
        categories=(FormCategory.BIRTH,),
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 31),
    ).to_request()
    assert request.granularity.value == "weekly"
    assert request.categories == frozenset({FormCategory.BIRTH})
    assert request.has_range is True


@pytest.mark.anyio
async def test_page_use_case_slices_periods(engine: RegistryReportEngine, make_fact) -> None:
    repo = InMemoryFactRepository(
        [
            make_fact(registered_at=date(2024, 1, 10)),
            make_fact(FormCategory.DEATH, registered_at=date(2024, 11, 2)),
        ]
    )
    uc = GetRegistryReportPageUseCase(source=repo, generator=GenerateRegistryReportUseCase(engine=engine))

    page = await uc.execute(
        ReportPageQueryDTO(query=ReportQueryDTO(granularity="monthly"), page=2, page_size=5)
    )
    assert page.total == 12
    assert [i.key for i in page.items] == ["2024-06", "2024-07", "2024-08", "2024-09", "2024-10"]
    assert page.totals["category"] == {"BIRTH": 1, "DEATH": 1, "MARRIAGE": 0}

    past_end = await uc.execute(
        ReportPageQueryDTO(query=ReportQueryDTO(granularity="monthly"), page=9, page_size=5)
    )
    assert past_end.items == []
    assert past_end.total == 12


@pytest.mark.anyio
async def test_page_use_case_classification_covers_whole_store(
    engine: RegistryReportEngine, make_fact
) -> None:
    repo = InMemoryFactRepository(
        [make_fact(), make_fact(FormCategory.DEATH), make_fact(FormCategory.DEATH)]
    )
    uc = GetRegistryReportPageUseCase(source=repo, generator=GenerateRegistryReportUseCase(engine=engine))

    page = await uc.execute(
        ReportPageQueryDTO(query=ReportQueryDTO(categories=(FormCategory.BIRTH,)))
    )
    assert page.meta.total_facts == 1
    assert page.meta.classification == {"BIRTH": 1, "DEATH": 2, "MARRIAGE": 0}


@pytest.mark.anyio
async def test_list_dimensions(engine: RegistryReportEngine) -> None:
    dto = await ListReportDimensionsUseCase(engine=engine).execute()
    assert dto.timezone == "Asia/Manila"
    assert dto.dimensions["registration"] == ["On time registration", "Late registration", "Not Stated"]
