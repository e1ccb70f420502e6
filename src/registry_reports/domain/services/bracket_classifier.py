# src/registry_reports/domain/services/bracket_classifier.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Numeric bracket classification (ages, birth weights).

Purpose:
    Map a numeric value onto one label of an ordered, disjoint
    :class:`BracketSet`, including the death-certificate rule that sub-year
    age components win over a bare ``years`` field.

Layer:
    domain/services

Notes:
    Classification is total: ``None``, booleans, blank or non-numeric strings
    and NaN resolve to the bracket set's fallback label. Every other number
    lands in exactly one bracket (see :meth:`BracketSet.bracket_for`), unless
    the set itself is bounded at an end and the value lies beyond it.
"""

from __future__ import annotations

import math
from datetime import date
from decimal import Decimal

from registry_reports.domain.entities.registry_fact import AgeAtDeath
from registry_reports.domain.entities.vocabulary import BracketSet


def coerce_number(value: object) -> float | None:
    """Return ``value`` as a finite float, or ``None`` when it is not numeric.

    Strings may carry thousands separators (``"2,500"``).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float | Decimal):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def completed_years(value: object) -> int | None:
    """Return ``value`` floored to whole years, or ``None`` when not numeric."""
    number = coerce_number(value)
    return math.floor(number) if number is not None else None


def classify_bracket(value: object, brackets: BracketSet) -> str:
    """Return the label of the bracket covering ``value``.

    Args:
        value: Number, numeric string, or anything else (resolves to fallback).
        brackets: Validated bracket set.

    Returns:
        str: Bracket label or ``brackets.fallback``.
    """
    number = coerce_number(value)
    if number is None:
        return brackets.fallback
    bracket = brackets.bracket_for(number)
    return bracket.label if bracket is not None else brackets.fallback


def classify_age_at_death(
    age: AgeAtDeath | None,
    brackets: BracketSet,
    *,
    age_years: float | None = None,
) -> str:
    """Classify a structured death-certificate age.

    Rules, in order:
        * ``years`` absent and ``months >= 12``: use ``months // 12`` years.
        * ``years`` 0 or absent with any positive months/days/hours/minutes:
          the first (under one year) bracket.
        * ``years`` present: classify ``years``.
        * otherwise fall back to ``age_years`` (usually ``None`` -> fallback).
    """
    if age is None or age.is_empty():
        return classify_bracket(completed_years(age_years), brackets)

    if age.years is None and age.months is not None and age.months >= 12:
        return classify_bracket(age.months // 12, brackets)

    if not age.years and age.has_sub_year_component():
        return brackets.first.label

    if age.years is not None:
        return classify_bracket(age.years, brackets)

    return classify_bracket(completed_years(age_years), brackets)


def age_in_completed_years(born: date, at: date) -> int | None:
    """Return completed years between ``born`` and ``at`` (``None`` if inverted)."""
    if at < born:
        return None
    before_birthday = (at.month, at.day) < (born.month, born.day)
    return at.year - born.year - int(before_birthday)
