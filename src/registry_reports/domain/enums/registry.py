# src/registry_reports/domain/enums/registry.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Civil registry enumerations.

Purpose:
    Closed vocabularies shared by the report engine: registry form categories,
    report granularities, and the canonical sex buckets.

Layer:
    domain/enums
"""

from __future__ import annotations

from enum import Enum

from registry_reports.domain.exceptions.reports import InvalidGranularity


class FormCategory(str, Enum):
    """Civil registry form category (one per certificate type)."""

    BIRTH = "BIRTH"
    DEATH = "DEATH"
    MARRIAGE = "MARRIAGE"

    @classmethod
    def parse(cls, raw: str) -> FormCategory:
        """Parse a category name case-insensitively.

        Raises:
            ValueError: If the value is not a known category.
        """
        return cls(raw.strip().upper())


class Granularity(str, Enum):
    """Time bucket granularity for report periods."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"

    @classmethod
    def parse(cls, raw: str | Granularity) -> Granularity:
        """Return the granularity for ``raw`` or raise.

        Unknown values never fall back to a default granularity.

        Args:
            raw: Granularity name (case-insensitive) or an enum member.

        Returns:
            Granularity: Canonical member.

        Raises:
            InvalidGranularity: If ``raw`` does not name a supported granularity.
        """
        if isinstance(raw, Granularity):
            return raw
        try:
            return cls(str(raw).strip().lower())
        except ValueError as exc:
            raise InvalidGranularity(
                f"Unsupported granularity: {raw!r}",
                details={"granularity": raw, "allowed": [g.value for g in cls]},
            ) from exc


class AnchorField(str, Enum):
    """Which fact timestamp places a fact into a period.

    Time-series reports bucket by registration date; demographic reports
    bucket by the date the event occurred.
    """

    REGISTERED_AT = "registered_at"
    OCCURRED_AT = "occurred_at"


class Sex(str, Enum):
    """Canonical sex buckets used by the ``sex`` dimension."""

    MALE = "male"
    FEMALE = "female"
    UNKNOWN = "unknown"

    @classmethod
    def from_raw(cls, raw: str | None) -> Sex:
        """Normalize a free-text sex value (``"Male"``, ``"F"``, ...)."""
        if raw is None:
            return cls.UNKNOWN
        value = raw.strip().lower()
        if value in {"male", "m"}:
            return cls.MALE
        if value in {"female", "f"}:
            return cls.FEMALE
        return cls.UNKNOWN
