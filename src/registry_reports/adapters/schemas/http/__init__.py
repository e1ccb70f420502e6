# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""HTTP Schemas package (Adapters Layer).

Purpose:
    Public, adapter-facing HTTP schema surface. Re-exports the canonical
    envelopes and report schemas used by routers and presenters.

Layer:
    adapters/schemas/http
"""

from __future__ import annotations

from registry_reports.adapters.schemas.http.envelopes import (
    ErrorEnvelope,
    ErrorObject,
    PaginatedEnvelope,
    SuccessEnvelope,
)
from registry_reports.adapters.schemas.http.reports import (
    AggregateRequestHTTP,
    DimensionCatalogHTTP,
    FactHTTP,
    PeriodBucketHTTP,
    RegistryReportHTTP,
    ReportMetaHTTP,
    ReportPeriodsPageHTTP,
)

__all__ = [
    # Envelopes
    "ErrorObject",
    "ErrorEnvelope",
    "SuccessEnvelope",
    "PaginatedEnvelope",
    # Reports
    "AggregateRequestHTTP",
    "DimensionCatalogHTTP",
    "FactHTTP",
    "PeriodBucketHTTP",
    "RegistryReportHTTP",
    "ReportMetaHTTP",
    "ReportPeriodsPageHTTP",
]
