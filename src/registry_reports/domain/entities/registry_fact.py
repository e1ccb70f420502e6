# src/registry_reports/domain/entities/registry_fact.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Registry fact entity.

Purpose:
    A single civil registry record reduced to the fields the report engine
    needs. Facts are validated and defaulted once at the boundary (see the
    fact mapper) so the engine only ever sees well-typed values.

Layer:
    domain/entities
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from registry_reports.domain.entities.base import BaseEntity
from registry_reports.domain.enums.registry import AnchorField, FormCategory


@dataclass(frozen=True, slots=True)
class AgeAtDeath(BaseEntity):
    """Structured age at death as printed on a death certificate.

    Attributes:
        years: Completed years, if stated.
        months: Completed months (for infants), if stated.
        days: Completed days, if stated.
        hours: Hours (for deaths within the first day), if stated.
        minutes: Minutes, if stated.
    """

    years: int | None = None
    months: int | None = None
    days: int | None = None
    hours: int | None = None
    minutes: int | None = None

    def has_sub_year_component(self) -> bool:
        """Return True when any of months/days/hours/minutes is positive."""
        return any(
            (part or 0) > 0 for part in (self.months, self.days, self.hours, self.minutes)
        )

    def is_empty(self) -> bool:
        """Return True when no component is stated at all."""
        return all(
            part is None
            for part in (self.years, self.months, self.days, self.hours, self.minutes)
        )


@dataclass(frozen=True, slots=True)
class RegistryFact(BaseEntity):
    """One registry record relevant to a report.

    Attributes:
        id: Opaque unique identifier.
        category: Registry form category (exactly one per fact).
        registered_at: Registration timestamp (anchor for time-series reports).
        occurred_at: Date of birth, death, or marriage (anchor for demographic reports).
        sex: Raw sex value.
        age_years: Age in completed years, if known.
        age_at_death: Structured age at death (DEATH facts only).
        residence_barangay_raw: Free-text barangay of residence.
        residence_city_raw: Free-text city/municipality of residence.
        residence_country_raw: Free-text country of residence.
        cause_of_death_raw: Free-text underlying (or immediate) cause of death.
        weight_grams: Birth weight in grams (BIRTH facts only).
        is_late_registration: Whether the record was registered late.
        ceremony_type: Free-text ceremony or solemnizing officer (MARRIAGE facts only).
        place_of_death_type: Place-of-death location type, e.g. "Hospital" (DEATH).
        place_of_death_institution: Hospital or institution name (DEATH).
        corpse_disposal: Disposal method, e.g. "Burial" or "Cremation" (DEATH).
        cemetery_name: Cemetery or crematory name (DEATH).
        cemetery_city: City/municipality of the cemetery (DEATH).
        has_transfer_permit: Whether a transfer permit was issued (DEATH).
        birth_attendant: Attendant type, e.g. "Midwife" (BIRTH).
        place_of_birth: Hospital, clinic or institution named as place of birth (BIRTH).
    """

    id: str
    category: FormCategory
    registered_at: datetime | date | None = None
    occurred_at: datetime | date | None = None
    sex: str | None = None
    age_years: float | None = None
    age_at_death: AgeAtDeath | None = None
    residence_barangay_raw: str | None = None
    residence_city_raw: str | None = None
    residence_country_raw: str | None = None
    cause_of_death_raw: str | None = None
    weight_grams: float | None = None
    is_late_registration: bool | None = None
    ceremony_type: str | None = None
    place_of_death_type: str | None = None
    place_of_death_institution: str | None = None
    corpse_disposal: str | None = None
    cemetery_name: str | None = None
    cemetery_city: str | None = None
    has_transfer_permit: bool | None = None
    birth_attendant: str | None = None
    place_of_birth: str | None = None

    def anchor(self, field: AnchorField) -> datetime | date | None:
        """Return the timestamp this fact is bucketed by for ``field``."""
        if field is AnchorField.OCCURRED_AT:
            return self.occurred_at
        return self.registered_at
