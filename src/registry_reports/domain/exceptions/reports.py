# src/registry_reports/domain/exceptions/reports.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Report engine domain exceptions.

Purpose:
    Error types raised by the report engine for caller mistakes (bad
    granularity, inverted date range, unknown dimension) and for invalid
    vocabulary or fact seed configuration.

Layer:
    domain/exceptions

Notes:
    Malformed facts and unmatched free text never raise; they are tallied by
    the engine instead.
"""

from __future__ import annotations

from registry_reports.domain.exceptions.base import DomainError


class ReportError(DomainError):
    """Base class for report engine errors."""

    code = "REPORT_ERROR"


class InvalidGranularity(ReportError):
    """Raised when a granularity string is not supported."""

    code = "INVALID_GRANULARITY"


class InvalidDateRange(ReportError):
    """Raised when a date range is inverted or only half specified."""

    code = "INVALID_DATE_RANGE"


class UnknownDimension(ReportError):
    """Raised when a requested dimension is not in the catalog."""

    code = "UNKNOWN_DIMENSION"


class InvalidVocabulary(ReportError):
    """Raised when vocabulary data is missing, malformed, or overlapping."""

    code = "INVALID_VOCABULARY"


class InvalidFactSeed(ReportError):
    """Raised when the configured fact seed file cannot be loaded."""

    code = "INVALID_FACT_SEED"
