# tests/unit/observability/test_report_metrics.py
from __future__ import annotations

import prometheus_client as prom
import pytest

from registry_reports.domain.entities.report import ReportMeta
from registry_reports.domain.enums.registry import Granularity
from registry_reports.infrastructure.observability.metrics_reports import (
    get_facts_total,
    get_skipped_facts_total,
    get_unresolved_total,
    get_usecase_latency_seconds,
    observe_report_latency,
    record_report_meta,
)


def _sample(name: str, labels: dict[str, str] | None = None) -> float:
    value = prom.REGISTRY.get_sample_value(name, labels or {})
    return value or 0.0


def _meta(
    *,
    skipped: int = 0,
    unresolved: dict[str, int] | None = None,
    aggregated: dict[str, int] | None = None,
) -> ReportMeta:
    return ReportMeta(
        granularity=Granularity.YEARLY,
        timezone="Asia/Manila",
        total_facts=3,
        skipped=skipped,
        available_years=(2024,),
        classification={"BIRTH": 2, "DEATH": 1, "MARRIAGE": 0},
        unresolved=unresolved or {},
        aggregated_by_category=aggregated or {},
    )


def test_collectors_are_singletons_per_registry() -> None:
    """Repeated lookups return the same collector instead of re-registering."""
    assert get_facts_total() is get_facts_total()
    assert get_skipped_facts_total() is get_skipped_facts_total()
    assert get_unresolved_total() is get_unresolved_total()
    assert get_usecase_latency_seconds() is get_usecase_latency_seconds()


def test_record_report_meta_increments_counters() -> None:
    get_facts_total()
    births = _sample("registry_reports_facts_total", {"category": "BIRTH"})
    skipped = _sample("registry_reports_skipped_facts_total")
    barangay = _sample("registry_reports_unresolved_total", {"dimension": "barangay"})

    record_report_meta(
        _meta(
            skipped=2,
            unresolved={"barangay": 1, "sex": 0},
            aggregated={"BIRTH": 2, "DEATH": 1, "MARRIAGE": 0},
        )
    )

    assert _sample("registry_reports_facts_total", {"category": "BIRTH"}) == births + 2
    assert _sample("registry_reports_skipped_facts_total") == skipped + 2
    assert _sample("registry_reports_unresolved_total", {"dimension": "barangay"}) == barangay + 1


def test_observe_report_latency_records_even_on_error() -> None:
    before = _sample("registry_reports_usecase_latency_seconds_count", {"report": "unit-test"})

    with observe_report_latency("unit-test"):
        pass
    with pytest.raises(ValueError), observe_report_latency("unit-test"):
        raise ValueError("boom")

    after = _sample("registry_reports_usecase_latency_seconds_count", {"report": "unit-test"})
    assert after == before + 2
