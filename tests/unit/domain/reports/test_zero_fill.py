# tests/unit/domain/reports/test_zero_fill.py
"""Gapless period axes and zero-fill reconciliation."""

from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

from registry_reports.domain.entities.report import PeriodBucket
from registry_reports.domain.services.period_resolver import resolve_period
from registry_reports.domain.services.zero_fill import PeriodAxis, category_template, reconcile


def _bucket(key_day: date, granularity: str, tz: ZoneInfo, **counts: int) -> PeriodBucket:
    period = resolve_period(key_day, granularity, tz)
    return PeriodBucket(
        key=period.key,
        start=period.start,
        end=period.end,
        total=sum(counts.values()),
        counts={"category": dict(counts)},
    )


def test_axis_from_years_fills_gap_years(manila: ZoneInfo) -> None:
    axis = PeriodAxis.from_years("yearly", [2024, 2022, 2022], manila)
    assert axis.keys == ("2022", "2023", "2024")


def test_axis_from_years_empty(manila: ZoneInfo) -> None:
    assert PeriodAxis.from_years("monthly", [], manila).periods == ()


def test_weekly_axis_from_years_has_unique_keys(manila: ZoneInfo) -> None:
    axis = PeriodAxis.from_years("weekly", [2020, 2021], manila)
    assert len(axis.keys) == 53 + 52
    assert len(set(axis.keys)) == len(axis.keys)


def test_reconcile_zero_fills_missing_periods(manila: ZoneInfo) -> None:
    real = [_bucket(date(2024, 3, 9), "monthly", manila, BIRTH=2, DEATH=1)]
    axis = PeriodAxis.from_range("monthly", date(2024, 1, 1), date(2024, 4, 30), manila)
    template = {"category": ["BIRTH", "DEATH", "MARRIAGE"]}

    out = reconcile(real, axis, categories=template)

    assert [b.key for b in out] == ["2024-01", "2024-02", "2024-03", "2024-04"]
    assert out[0].total == 0
    assert out[0].counts == {"category": {"BIRTH": 0, "DEATH": 0, "MARRIAGE": 0}}
    assert out[2].total == 3
    assert out[2].counts["category"] == {"BIRTH": 2, "DEATH": 1, "MARRIAGE": 0}


def test_real_data_wins_and_outside_axis_is_kept(manila: ZoneInfo) -> None:
    real = [
        _bucket(date(2023, 6, 1), "yearly", manila, BIRTH=4),
        _bucket(date(2025, 6, 1), "yearly", manila, BIRTH=1),
    ]
    axis = PeriodAxis.from_years("yearly", [2023, 2024], manila)
    out = reconcile(real, axis)
    assert [(b.key, b.total) for b in out] == [("2023", 4), ("2024", 0), ("2025", 1)]
    assert out[1].counts == {"category": {"BIRTH": 0}}


def test_reconcile_is_idempotent(manila: ZoneInfo) -> None:
    real = [_bucket(date(2024, 5, 2), "quarterly", manila, DEATH=2)]
    axis = PeriodAxis.from_range("quarterly", date(2024, 1, 1), date(2024, 12, 31), manila)
    template = {"category": ["BIRTH", "DEATH", "MARRIAGE"]}

    once = reconcile(real, axis, categories=template)
    twice = reconcile(once, axis, categories=template)
    assert twice == once


def test_category_template_unions_in_first_seen_order(manila: ZoneInfo) -> None:
    start = datetime(2024, 1, 1, tzinfo=manila)
    buckets = [
        PeriodBucket(key="a", start=start, end=start, counts={"sex": {"male": 1}}),
        PeriodBucket(key="b", start=start, end=start, counts={"sex": {"female": 1, "male": 0}}),
    ]
    assert category_template(buckets) == {"sex": ["male", "female"]}


def test_reconcile_completes_percentages_of_partial_buckets(manila: ZoneInfo) -> None:
    period = resolve_period(date(2024, 1, 1), "yearly", manila)
    partial = PeriodBucket(
        key=period.key,
        start=period.start,
        end=period.end,
        total=1,
        counts={"sex": {"male": 1}},
        percentages={"sex": {"male": 100.0}},
    )
    axis = PeriodAxis.from_years("yearly", [2024], manila)
    (out,) = reconcile([partial], axis, categories={"sex": ["male", "female"]})
    assert out.counts == {"sex": {"male": 1, "female": 0}}
    assert out.percentages == {"sex": {"male": 100.0, "female": 0.0}}
