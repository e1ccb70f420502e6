# src/registry_reports/adapters/mappers/fact_mapper.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""HTTP fact mapping adapter.

Purpose:
    Convert transport-level fact payloads into pure-domain
    :class:`RegistryFact` values at the service boundary.

Layer:
    adapters/mappers

Notes:
    - Lenient by construction: numbers may arrive as strings, non-numeric
      values become ``None`` and later resolve to fallback labels.
    - ``age_years`` is derived from ``date_of_birth`` and ``occurred_at`` only
      when the caller did not supply an age.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import tzinfo

from registry_reports.adapters.schemas.http.reports import AgeAtDeathHTTP, FactHTTP
from registry_reports.domain.entities.registry_fact import AgeAtDeath, RegistryFact
from registry_reports.domain.enums.registry import FormCategory
from registry_reports.domain.services.bracket_classifier import (
    age_in_completed_years,
    coerce_number,
)
from registry_reports.domain.services.period_resolver import to_local_date


def _age_at_death(payload: AgeAtDeathHTTP | None) -> AgeAtDeath | None:
    if payload is None:
        return None
    age = AgeAtDeath(
        years=payload.years,
        months=payload.months,
        days=payload.days,
        hours=payload.hours,
        minutes=payload.minutes,
    )
    return None if age.is_empty() else age


def _age_years(payload: FactHTTP, tz: tzinfo) -> float | None:
    explicit = coerce_number(payload.age_years)
    if explicit is not None or payload.age_years not in (None, ""):
        return explicit
    if payload.date_of_birth is None or payload.occurred_at is None:
        return None
    years = age_in_completed_years(payload.date_of_birth, to_local_date(payload.occurred_at, tz))
    return float(years) if years is not None else None


def to_registry_fact(payload: FactHTTP, *, tz: tzinfo) -> RegistryFact:
    """Map one HTTP fact to a domain fact.

    Args:
        payload: Validated HTTP fact.
        tz: Reference timezone, used to take the local date of ``occurred_at``
            when deriving an age from ``date_of_birth``.

    Returns:
        RegistryFact: Immutable domain fact.
    """
    return RegistryFact(
        id=payload.id,
        category=FormCategory(payload.category),
        registered_at=payload.registered_at,
        occurred_at=payload.occurred_at,
        sex=payload.sex,
        age_years=_age_years(payload, tz),
        age_at_death=_age_at_death(payload.age_at_death),
        residence_barangay_raw=payload.residence_barangay,
        residence_city_raw=payload.residence_city,
        residence_country_raw=payload.residence_country,
        cause_of_death_raw=payload.cause_of_death,
        weight_grams=coerce_number(payload.weight_grams),
        is_late_registration=payload.is_late_registration,
        ceremony_type=payload.ceremony_type,
        place_of_death_type=payload.place_of_death_type,
        place_of_death_institution=payload.place_of_death_institution,
        corpse_disposal=payload.corpse_disposal,
        cemetery_name=payload.cemetery_name,
        cemetery_city=payload.cemetery_city,
        has_transfer_permit=payload.has_transfer_permit,
        birth_attendant=payload.birth_attendant,
        place_of_birth=payload.place_of_birth,
    )


def to_registry_facts(payloads: Iterable[FactHTTP], *, tz: tzinfo) -> list[RegistryFact]:
    """Map a batch of HTTP facts, preserving order."""
    return [to_registry_fact(p, tz=tz) for p in payloads]
