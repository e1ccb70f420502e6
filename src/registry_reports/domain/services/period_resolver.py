# src/registry_reports/domain/services/period_resolver.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Period key resolution for report bucketing.

Purpose:
    Map a timestamp and a granularity to a canonical, chronologically sortable
    period key plus the inclusive calendar boundaries of that period, and
    enumerate the periods of a date range or a calendar year.

Layer:
    domain/services

Notes:
    - Pure domain logic: no logging, no I/O.
    - Every computation happens in ONE reference timezone (``Asia/Manila`` by
      default). Aware datetimes are converted into it; naive datetimes are
      treated as UTC, which is how registry timestamps are stored; bare
      ``date`` values are taken as local calendar dates already.
    - Key formats are zero-padded so lexicographic order equals chronological
      order for every granularity except ``yearly``, which sorts numerically.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterator
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo

from registry_reports.domain.entities.report import ReportPeriod
from registry_reports.domain.enums.registry import Granularity
from registry_reports.domain.exceptions.reports import InvalidDateRange

DEFAULT_REPORT_TIMEZONE = "Asia/Manila"

_END_OF_DAY = time(23, 59, 59, 999000)


@lru_cache(maxsize=16)
def reference_timezone(name: str = DEFAULT_REPORT_TIMEZONE) -> ZoneInfo:
    """Return the IANA zone used for all period computations.

    Raises:
        zoneinfo.ZoneInfoNotFoundError: If ``name`` is not a known zone.
    """
    return ZoneInfo(name)


def to_local_date(timestamp: datetime | date, tz: tzinfo) -> date:
    """Return the calendar date of ``timestamp`` in the reference timezone.

    Args:
        timestamp: Aware datetime, naive datetime (interpreted as UTC), or date.
        tz: Reference timezone.

    Returns:
        date: Local calendar date.
    """
    if isinstance(timestamp, datetime):
        aware = timestamp if timestamp.tzinfo is not None else timestamp.replace(tzinfo=UTC)
        return aware.astimezone(tz).date()
    return timestamp


def _calendar_bounds(day: date, granularity: Granularity) -> tuple[str, date, date]:
    """Return ``(key, first_day, last_day)`` of the period containing ``day``."""
    if granularity is Granularity.DAILY:
        return day.isoformat(), day, day

    if granularity is Granularity.WEEKLY:
        iso = day.isocalendar()
        first = day - timedelta(days=iso.weekday - 1)
        return f"{iso.year:04d}-W{iso.week:02d}", first, first + timedelta(days=6)

    if granularity is Granularity.MONTHLY:
        last_dom = calendar.monthrange(day.year, day.month)[1]
        return (
            f"{day.year:04d}-{day.month:02d}",
            date(day.year, day.month, 1),
            date(day.year, day.month, last_dom),
        )

    if granularity is Granularity.QUARTERLY:
        quarter = (day.month - 1) // 3 + 1
        first_month = 3 * quarter - 2
        last_month = 3 * quarter
        last_dom = calendar.monthrange(day.year, last_month)[1]
        return (
            f"{day.year:04d}-Q{quarter}",
            date(day.year, first_month, 1),
            date(day.year, last_month, last_dom),
        )

    return f"{day.year:04d}", date(day.year, 1, 1), date(day.year, 12, 31)


def period_for_date(day: date, granularity: Granularity | str, tz: tzinfo) -> ReportPeriod:
    """Return the period of ``granularity`` containing the local date ``day``.

    Raises:
        InvalidGranularity: If ``granularity`` is not supported.
    """
    g = Granularity.parse(granularity)
    key, first, last = _calendar_bounds(day, g)
    return ReportPeriod(
        key=key,
        start=datetime.combine(first, time.min, tzinfo=tz),
        end=datetime.combine(last, _END_OF_DAY, tzinfo=tz),
    )


def period_for_key(key: str, granularity: Granularity | str, tz: tzinfo) -> ReportPeriod:
    """Parse a canonical period key back into its period.

    Raises:
        InvalidGranularity: If ``granularity`` is not supported.
        InvalidDateRange: If ``key`` is not a well-formed key of ``granularity``.
    """
    g = Granularity.parse(granularity)
    try:
        if g is Granularity.DAILY:
            day = date.fromisoformat(key)
        elif g is Granularity.WEEKLY:
            year, week = key.split("-W")
            day = date.fromisocalendar(int(year), int(week), 1)
        elif g is Granularity.MONTHLY:
            year, month = key.split("-")
            day = date(int(year), int(month), 1)
        elif g is Granularity.QUARTERLY:
            year, quarter = key.split("-Q")
            if not 1 <= int(quarter) <= 4:
                raise ValueError(key)
            day = date(int(year), 3 * int(quarter) - 2, 1)
        else:
            day = date(int(key), 1, 1)
    except ValueError as exc:
        raise InvalidDateRange(
            f"malformed {g.value} period key",
            details={"key": key, "granularity": g.value},
        ) from exc
    period = period_for_date(day, g, tz)
    if period.key != key:
        raise InvalidDateRange(
            f"malformed {g.value} period key",
            details={"key": key, "granularity": g.value},
        )
    return period


def resolve_period(
    timestamp: datetime | date,
    granularity: Granularity | str,
    tz: tzinfo | None = None,
) -> ReportPeriod:
    """Resolve the canonical period of ``timestamp``.

    Args:
        timestamp: Anchor timestamp of a fact.
        granularity: ``daily``, ``weekly``, ``monthly``, ``quarterly`` or ``yearly``.
        tz: Reference timezone; defaults to :data:`DEFAULT_REPORT_TIMEZONE`.

    Returns:
        ReportPeriod: Key plus inclusive start/end boundaries.

    Raises:
        InvalidGranularity: If ``granularity`` is not one of the five values.
    """
    g = Granularity.parse(granularity)
    zone = tz if tz is not None else reference_timezone()
    return period_for_date(to_local_date(timestamp, zone), g, zone)


def iter_periods(
    start: date,
    end: date,
    granularity: Granularity | str,
    tz: tzinfo,
) -> Iterator[ReportPeriod]:
    """Yield every period intersecting the inclusive range ``[start, end]``.

    Partial periods at either edge are included whole, so a range starting on
    a Wednesday still yields that ISO week.

    Raises:
        InvalidDateRange: If ``start`` is after ``end``.
        InvalidGranularity: If ``granularity`` is not supported.
    """
    if start > end:
        raise InvalidDateRange(
            "start date must not be after end date",
            details={"start": start.isoformat(), "end": end.isoformat()},
        )
    g = Granularity.parse(granularity)
    cursor = start
    while cursor <= end:
        key, first, last = _calendar_bounds(cursor, g)
        yield ReportPeriod(
            key=key,
            start=datetime.combine(first, time.min, tzinfo=tz),
            end=datetime.combine(last, _END_OF_DAY, tzinfo=tz),
        )
        cursor = last + timedelta(days=1)


def periods_for_year(year: int, granularity: Granularity | str, tz: tzinfo) -> list[ReportPeriod]:
    """Return every period of ``granularity`` belonging to calendar ``year``.

    Weekly axes use ISO weeks 1..52/53 of the ISO year ``year``; the other
    granularities cover January 1 through December 31.
    """
    g = Granularity.parse(granularity)
    if g is Granularity.WEEKLY:
        # December 28 always falls in the last ISO week of its year.
        first, last = date.fromisocalendar(year, 1, 1), date(year, 12, 28)
    else:
        first, last = date(year, 1, 1), date(year, 12, 31)
    return list(iter_periods(first, last, g, tz))


def period_sort_key(key: str, granularity: Granularity | str) -> tuple[int, str]:
    """Return a sort key giving chronological order for ``key``.

    Yearly keys compare numerically; the rest compare lexicographically.
    """
    if Granularity.parse(granularity) is Granularity.YEARLY:
        return int(key), ""
    return 0, key
