# tests/unit/adapters/reports/test_reports_presenter.py
from __future__ import annotations

from datetime import date

from registry_reports.adapters.presenters.base_presenter import compute_quoted_etag
from registry_reports.adapters.presenters.reports_presenter import ReportsPresenter
from registry_reports.adapters.schemas.http.envelopes import ErrorEnvelope, SuccessEnvelope
from registry_reports.adapters.schemas.http.reports import RegistryReportHTTP
from registry_reports.application.schemas.dto.reports import (
    DimensionCatalogDTO,
    PeriodBucketDTO,
    RegistryReportDTO,
    ReportPageDTO,
)
from registry_reports.domain.enums.registry import Granularity
from registry_reports.domain.services.report_engine import RegistryReportEngine, ReportRequest


def _report(engine: RegistryReportEngine, make_fact) -> RegistryReportDTO:
    facts = [make_fact(registered_at=date(2024, 2, 1)), make_fact(registered_at=date(2024, 5, 1))]
    report = engine.build(facts, ReportRequest(granularity=Granularity.QUARTERLY))
    return RegistryReportDTO.from_domain(report)


def test_compute_quoted_etag_is_stable_and_quoted() -> None:
    a = compute_quoted_etag({"b": 1, "a": date(2024, 1, 1)})
    b = compute_quoted_etag({"a": date(2024, 1, 1), "b": 1})
    assert a == b
    assert a.startswith('"') and a.endswith('"')
    assert compute_quoted_etag({"b": 2}) != a


def test_present_report_wraps_data_and_sets_headers(engine: RegistryReportEngine, make_fact) -> None:
    result = ReportsPresenter().present_report(_report(engine, make_fact), trace_id="req-1")

    assert isinstance(result.body, SuccessEnvelope)
    data = result.body.data
    assert isinstance(data, RegistryReportHTTP)
    assert [p.key for p in data.periods] == ["2024-Q1", "2024-Q2", "2024-Q3", "2024-Q4"]
    assert data.meta.granularity == "quarterly"
    assert result.headers["X-Request-ID"] == "req-1"
    assert result.headers["ETag"].startswith('"')


def test_same_report_same_etag(engine: RegistryReportEngine, make_fact) -> None:
    dto = _report(engine, make_fact)
    presenter = ReportsPresenter()
    first = presenter.present_report(dto).headers["ETag"]
    second = presenter.present_report(dto).headers["ETag"]
    assert first == second
    assert "X-Request-ID" not in presenter.present_report(dto).headers


def test_present_page_etag_changes_with_page(engine: RegistryReportEngine, make_fact) -> None:
    dto = _report(engine, make_fact)
    presenter = ReportsPresenter()

    def _page(n: int) -> ReportPageDTO:
        return ReportPageDTO(
            items=[PeriodBucketDTO.model_validate(p.model_dump()) for p in dto.periods[n - 1 : n]],
            page=n,
            page_size=1,
            total=len(dto.periods),
            totals=dto.totals,
            meta=dto.meta,
        )

    one = presenter.present_page(_page(1), trace_id="t")
    two = presenter.present_page(_page(2), trace_id="t")
    assert one.body is not None and one.body.total == 4
    assert [i.key for i in one.body.items] == ["2024-Q1"]
    assert one.headers["ETag"] != two.headers["ETag"]


def test_present_dimensions() -> None:
    dto = DimensionCatalogDTO(timezone="Asia/Manila", dimensions={"sex": ["male", "female", "unknown"]})
    result = ReportsPresenter().present_dimensions(dto)
    assert result.body is not None
    assert result.body.data.dimensions == {"sex": ["male", "female", "unknown"]}


def test_present_error_has_status_and_no_etag() -> None:
    result = ReportsPresenter().present_error(
        code="INVALID_GRANULARITY", http_status=400, message="bad", trace_id="t-9"
    )
    assert isinstance(result.body, ErrorEnvelope)
    assert result.status_code == 400
    assert result.body.error.trace_id == "t-9"
    assert result.headers == {"X-Request-ID": "t-9"}
