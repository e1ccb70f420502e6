# src/registry_reports/adapters/routers/metrics_router.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Prometheus scrape endpoint (`/metrics`).

Exposes the text-format Prometheus endpoint. The report collectors are
created on first scrape so their series are visible before any report ran.

Layer:
    adapters/routers
"""

from __future__ import annotations

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from registry_reports.infrastructure.observability.metrics_reports import (
    get_facts_total,
    get_skipped_facts_total,
    get_unresolved_total,
    get_usecase_latency_seconds,
)

router = APIRouter()


@router.get("/metrics", include_in_schema=False)
async def metrics_probe() -> Response:
    """Expose Prometheus metrics."""
    get_facts_total()
    get_skipped_facts_total()
    get_unresolved_total()
    get_usecase_latency_seconds()
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
