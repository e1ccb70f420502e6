# src/registry_reports/infrastructure/observability/metrics_reports.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Report observability helpers and Prometheus metrics.

Collectors (names are part of the public contract):

* ``registry_reports_facts_total`` (Counter, ``category``)
* ``registry_reports_skipped_facts_total`` (Counter)
* ``registry_reports_unresolved_total`` (Counter, ``dimension``)
* ``registry_reports_usecase_latency_seconds`` (Histogram, ``report``)

Design
------
Collectors are looked up or created against the *current* default registry
(:data:`prometheus_client.REGISTRY`) on every access, so tests that swap the
registry and repeated imports never hit ``Duplicated timeseries`` errors.
"""

from __future__ import annotations

from collections.abc import Generator, Sequence
from contextlib import contextmanager
from time import perf_counter

import prometheus_client as prom
from prometheus_client import Counter, Histogram
from prometheus_client.registry import CollectorRegistry

from registry_reports.domain.entities.report import ReportMeta


def _get_or_create_histogram(
    name: str,
    doc: str,
    labelnames: Sequence[str] | None = None,
) -> Histogram:
    """Return a histogram bound to the current default registry (idempotent)."""
    registry: CollectorRegistry = prom.REGISTRY
    mapping = getattr(registry, "_names_to_collectors", {})
    existing = mapping.get(name)
    if isinstance(existing, Histogram):
        return existing

    labels = tuple(labelnames) if labelnames is not None else ()
    try:
        return Histogram(name, doc, labels, registry=registry)
    except ValueError as exc:
        if "Duplicated timeseries" in str(exc):
            again = getattr(registry, "_names_to_collectors", {}).get(name)
            if isinstance(again, Histogram):
                return again
        raise


def _get_or_create_counter(
    name: str,
    doc: str,
    labelnames: Sequence[str] | None = None,
) -> Counter:
    """Return a counter bound to the current default registry (idempotent).

    Counters register under both ``name`` and ``name_total`` in the registry
    mapping, so the lookup tries both spellings.
    """
    registry: CollectorRegistry = prom.REGISTRY
    mapping = getattr(registry, "_names_to_collectors", {})
    base = name.removesuffix("_total")
    existing = mapping.get(base) or mapping.get(f"{base}_total")
    if isinstance(existing, Counter):
        return existing

    labels = tuple(labelnames) if labelnames is not None else ()
    try:
        return Counter(base, doc, labels, registry=registry)
    except ValueError as exc:
        if "Duplicated timeseries" in str(exc):
            mapping = getattr(registry, "_names_to_collectors", {})
            again = mapping.get(base) or mapping.get(f"{base}_total")
            if isinstance(again, Counter):
                return again
        raise


def get_facts_total() -> Counter:
    """Facts aggregated into reports, by form category."""
    return _get_or_create_counter(
        "registry_reports_facts_total",
        "Registry facts aggregated into reports.",
        ("category",),
    )


def get_skipped_facts_total() -> Counter:
    """Facts skipped because their anchor timestamp was missing."""
    return _get_or_create_counter(
        "registry_reports_skipped_facts_total",
        "Registry facts skipped for lack of an anchor timestamp.",
    )


def get_unresolved_total() -> Counter:
    """Facts resolved to a dimension's fallback category."""
    return _get_or_create_counter(
        "registry_reports_unresolved_total",
        "Facts that resolved to a fallback category, by dimension.",
        ("dimension",),
    )


def get_usecase_latency_seconds() -> Histogram:
    """Latency of report use cases."""
    return _get_or_create_histogram(
        "registry_reports_usecase_latency_seconds",
        "Latency of registry report use cases in seconds.",
        ("report",),
    )


@contextmanager
def observe_report_latency(report: str) -> Generator[None, None, None]:
    """Time a report build and record it in the latency histogram."""
    t0 = perf_counter()
    try:
        yield
    finally:
        get_usecase_latency_seconds().labels(report).observe(perf_counter() - t0)


def record_report_meta(meta: ReportMeta) -> None:
    """Record counters for one finished report build.

    Args:
        meta: Report metadata (per-category aggregated facts, skipped and
            unresolved tallies).
    """
    facts = get_facts_total()
    for category, count in meta.aggregated_by_category.items():
        if count:
            facts.labels(category).inc(count)
    if meta.skipped:
        get_skipped_facts_total().inc(meta.skipped)
    unresolved = get_unresolved_total()
    for dimension, count in meta.unresolved.items():
        if count:
            unresolved.labels(dimension).inc(count)
