# src/registry_reports/domain/services/report_aggregator.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Grouping and counting of registry facts per period and dimension.

Purpose:
    Fold facts into period buckets and, inside each bucket, into independent
    category count spaces ("dimensions"). Also provides the dimension catalog
    (category, sex, barangay, cause of death, age and weight brackets,
    registration timeliness, ceremony, residence, place of death, burial
    method, transfer permit, birth attendant, place of birth, sex x age
    cross-tab) and percentage derivation.

Layer:
    domain/services

Notes:
    - Pure domain logic: no logging, no I/O.
    - Dimensions are independent: one death record increments its barangay,
      age bracket and cause buckets at the same time. Cross-tabulation exists
      only as an explicit dimension with composite ``"<sex>|<bracket>"`` keys.
    - A fact missing a dimension's field lands in that dimension's fallback
      category, so each dimension's counts sum to the bucket total.
    - Facts without an anchor timestamp are not aggregated; the report engine
      tallies them as skipped.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import tzinfo
from decimal import ROUND_HALF_UP, Decimal

from registry_reports.domain.entities.registry_fact import RegistryFact
from registry_reports.domain.entities.report import PeriodBucket, ReportPeriod
from registry_reports.domain.entities.vocabulary import VocabularyBundle
from registry_reports.domain.enums.registry import AnchorField, FormCategory, Granularity, Sex
from registry_reports.domain.exceptions.reports import UnknownDimension
from registry_reports.domain.services.bracket_classifier import (
    classify_age_at_death,
    classify_bracket,
    completed_years,
)
from registry_reports.domain.services.category_matcher import CategoryMatcher, matcher_for
from registry_reports.domain.services.period_resolver import (
    period_sort_key,
    reference_timezone,
    resolve_period,
)

type Classifier = Callable[[RegistryFact], str]

REGISTRATION_ON_TIME = "On time registration"
REGISTRATION_LATE = "Late registration"
REGISTRATION_NOT_STATED = "Not Stated"

TRANSFER_PERMIT_WITH = "withTransferPermit"
TRANSFER_PERMIT_WITHOUT = "withoutTransferPermit"

CROSS_TAB_SEPARATOR = "|"

_ONE_DECIMAL = Decimal("0.1")


@dataclass(frozen=True, slots=True)
class DimensionSpec:
    """One independent count space.

    Attributes:
        name: Dimension name, used as the key in bucket ``counts``.
        categories: Every category key, pre-seeded with zero in each bucket.
        classify: Maps a fact to exactly one category key.
        fallback: Category used for missing or unmatched values, when the
            dimension has one. Fallback hits are reported as unresolved.
    """

    name: str
    categories: tuple[str, ...]
    classify: Classifier
    fallback: str | None = None


def _matching(matcher: CategoryMatcher, getter: Callable[[RegistryFact], str | None]) -> Classifier:
    """Classify the field read by ``getter`` with ``matcher`` (which memoizes)."""

    def classify(fact: RegistryFact) -> str:
        return matcher.match(getter(fact))

    return classify


def _registration(fact: RegistryFact) -> str:
    if fact.is_late_registration is None:
        return REGISTRATION_NOT_STATED
    return REGISTRATION_LATE if fact.is_late_registration else REGISTRATION_ON_TIME


def _category_dimension(_: VocabularyBundle) -> DimensionSpec:
    return DimensionSpec(
        name="category",
        categories=tuple(c.value for c in FormCategory),
        classify=lambda fact: fact.category.value,
    )


def _sex_dimension(_: VocabularyBundle) -> DimensionSpec:
    return DimensionSpec(
        name="sex",
        categories=tuple(s.value for s in Sex),
        classify=lambda fact: Sex.from_raw(fact.sex).value,
        fallback=Sex.UNKNOWN.value,
    )


def _barangay_dimension(vocab: VocabularyBundle) -> DimensionSpec:
    return DimensionSpec(
        name="barangay",
        categories=vocab.barangays.categories,
        classify=_matching(matcher_for(vocab.barangays), lambda f: f.residence_barangay_raw),
        fallback=vocab.barangays.fallback,
    )


def _cause_dimension(vocab: VocabularyBundle) -> DimensionSpec:
    return DimensionSpec(
        name="cause_of_death",
        categories=vocab.causes_of_death.categories,
        classify=_matching(matcher_for(vocab.causes_of_death), lambda f: f.cause_of_death_raw),
        fallback=vocab.causes_of_death.fallback,
    )


def _ceremony_dimension(vocab: VocabularyBundle) -> DimensionSpec:
    return DimensionSpec(
        name="ceremony",
        categories=vocab.ceremonies.categories,
        classify=_matching(matcher_for(vocab.ceremonies), lambda f: f.ceremony_type),
        fallback=vocab.ceremonies.fallback,
    )


def _age_dimension(vocab: VocabularyBundle) -> DimensionSpec:
    brackets = vocab.death_age_brackets
    return DimensionSpec(
        name="age_bracket",
        categories=brackets.labels,
        classify=lambda f: classify_age_at_death(f.age_at_death, brackets, age_years=f.age_years),
        fallback=brackets.fallback,
    )


def _marriage_age_dimension(vocab: VocabularyBundle) -> DimensionSpec:
    brackets = vocab.marriage_age_brackets
    return DimensionSpec(
        name="marriage_age_bracket",
        categories=brackets.labels,
        classify=lambda f: classify_bracket(completed_years(f.age_years), brackets),
        fallback=brackets.fallback,
    )


def _weight_dimension(vocab: VocabularyBundle) -> DimensionSpec:
    brackets = vocab.weight_brackets
    return DimensionSpec(
        name="weight_bracket",
        categories=brackets.labels,
        classify=lambda f: classify_bracket(f.weight_grams, brackets),
        fallback=brackets.fallback,
    )


def _transfer_permit(fact: RegistryFact) -> str:
    return TRANSFER_PERMIT_WITH if fact.has_transfer_permit else TRANSFER_PERMIT_WITHOUT


def _registration_dimension(_: VocabularyBundle) -> DimensionSpec:
    return DimensionSpec(
        name="registration",
        categories=(REGISTRATION_ON_TIME, REGISTRATION_LATE, REGISTRATION_NOT_STATED),
        classify=_registration,
        fallback=REGISTRATION_NOT_STATED,
    )


def _residence_dimension(vocab: VocabularyBundle) -> DimensionSpec:
    policy = vocab.residence
    return DimensionSpec(
        name="residence",
        categories=policy.labels,
        classify=lambda f: policy.classify(f.residence_city_raw, f.residence_country_raw),
        fallback=policy.unknown_label,
    )


def _place_of_death_dimension(vocab: VocabularyBundle) -> DimensionSpec:
    policy = vocab.places_of_death
    return DimensionSpec(
        name="place_of_death",
        categories=policy.labels,
        classify=lambda f: policy.classify(f.place_of_death_type, f.place_of_death_institution),
        fallback=policy.other_label,
    )


def _burial_dimension(vocab: VocabularyBundle) -> DimensionSpec:
    policy = vocab.burial
    return DimensionSpec(
        name="burial_method",
        categories=policy.labels,
        classify=lambda f: policy.classify(f.corpse_disposal, f.cemetery_name, f.cemetery_city),
        fallback=policy.not_stated_label,
    )


def _transfer_permit_dimension(_: VocabularyBundle) -> DimensionSpec:
    # An absent permit counts as "without"; there is no unknown category.
    return DimensionSpec(
        name="transfer_permit",
        categories=(TRANSFER_PERMIT_WITH, TRANSFER_PERMIT_WITHOUT),
        classify=_transfer_permit,
    )


def _birth_attendant_dimension(vocab: VocabularyBundle) -> DimensionSpec:
    return DimensionSpec(
        name="birth_attendant",
        categories=vocab.birth_attendants.categories,
        classify=_matching(matcher_for(vocab.birth_attendants), lambda f: f.birth_attendant),
        fallback=vocab.birth_attendants.fallback,
    )


def _place_of_birth_dimension(vocab: VocabularyBundle) -> DimensionSpec:
    return DimensionSpec(
        name="place_of_birth",
        categories=vocab.places_of_birth.categories,
        classify=_matching(matcher_for(vocab.places_of_birth), lambda f: f.place_of_birth),
        fallback=vocab.places_of_birth.fallback,
    )


def _sex_age_dimension(vocab: VocabularyBundle) -> DimensionSpec:
    brackets = vocab.death_age_brackets

    def classify(fact: RegistryFact) -> str:
        sex = Sex.from_raw(fact.sex).value
        age = classify_age_at_death(fact.age_at_death, brackets, age_years=fact.age_years)
        return f"{sex}{CROSS_TAB_SEPARATOR}{age}"

    return DimensionSpec(
        name="sex_age",
        categories=tuple(
            f"{sex.value}{CROSS_TAB_SEPARATOR}{label}" for sex in Sex for label in brackets.labels
        ),
        classify=classify,
    )


_CATALOG: dict[str, Callable[[VocabularyBundle], DimensionSpec]] = {
    "category": _category_dimension,
    "sex": _sex_dimension,
    "barangay": _barangay_dimension,
    "cause_of_death": _cause_dimension,
    "age_bracket": _age_dimension,
    "marriage_age_bracket": _marriage_age_dimension,
    "weight_bracket": _weight_dimension,
    "registration": _registration_dimension,
    "ceremony": _ceremony_dimension,
    "residence": _residence_dimension,
    "place_of_death": _place_of_death_dimension,
    "burial_method": _burial_dimension,
    "transfer_permit": _transfer_permit_dimension,
    "birth_attendant": _birth_attendant_dimension,
    "place_of_birth": _place_of_birth_dimension,
    "sex_age": _sex_age_dimension,
}

DIMENSION_NAMES: tuple[str, ...] = tuple(_CATALOG)


def build_dimensions(names: Iterable[str], vocabularies: VocabularyBundle) -> tuple[DimensionSpec, ...]:
    """Build dimension specs for ``names`` from the supplied vocabularies.

    Duplicate names are collapsed, keeping first-seen order.

    Raises:
        UnknownDimension: If a name is not in the dimension catalog.
    """
    ordered = list(dict.fromkeys(n.strip() for n in names))
    unknown = [n for n in ordered if n not in _CATALOG]
    if unknown:
        raise UnknownDimension(
            f"Unknown dimension(s): {', '.join(unknown)}",
            details={"unknown": unknown, "allowed": list(DIMENSION_NAMES)},
        )
    return tuple(_CATALOG[name](vocabularies) for name in ordered)


@dataclass(slots=True)
class _Slot:
    period: ReportPeriod
    total: int = 0
    counts: dict[str, dict[str, int]] = field(default_factory=dict)


def aggregate(
    facts: Iterable[RegistryFact],
    granularity: Granularity | str,
    dimensions: Sequence[DimensionSpec],
    *,
    tz: tzinfo | None = None,
    anchor: AnchorField = AnchorField.REGISTERED_AT,
) -> list[PeriodBucket]:
    """Partition facts by period and count them per dimension category.

    Args:
        facts: Facts to fold in.
        granularity: Period granularity.
        dimensions: Independent count spaces to fill.
        tz: Reference timezone (defaults to the module default zone).
        anchor: Which fact timestamp places a fact into a period.

    Returns:
        list[PeriodBucket]: Buckets for periods that received at least one fact,
        in chronological order. Every category of every dimension is present.

    Raises:
        InvalidGranularity: If ``granularity`` is not supported.
    """
    g = Granularity.parse(granularity)
    zone = tz if tz is not None else reference_timezone()
    slots: dict[str, _Slot] = {}

    for fact in facts:
        timestamp = fact.anchor(anchor)
        if timestamp is None:
            continue
        period = resolve_period(timestamp, g, zone)
        slot = slots.get(period.key)
        if slot is None:
            slot = slots[period.key] = _Slot(
                period=period,
                counts={d.name: dict.fromkeys(d.categories, 0) for d in dimensions},
            )
        slot.total += 1
        for dim in dimensions:
            counts = slot.counts[dim.name]
            category = dim.classify(fact)
            counts[category] = counts.get(category, 0) + 1

    ordered = sorted(slots, key=lambda key: period_sort_key(key, g))
    return [
        PeriodBucket(
            key=key,
            start=slots[key].period.start,
            end=slots[key].period.end,
            total=slots[key].total,
            counts=slots[key].counts,
        )
        for key in ordered
    ]


def round_percent(count: int, total: int) -> float:
    """Return ``count / total * 100`` rounded half away from zero to 1 decimal.

    A zero ``total`` yields ``0.0``.
    """
    if total == 0:
        return 0.0
    value = Decimal(count) * 100 / Decimal(total)
    return float(value.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def percentages(counts: Mapping[str, int], total: int | None = None) -> dict[str, float]:
    """Return per-category percentages of ``counts``.

    Args:
        counts: Category -> count for one dimension.
        total: Denominator; defaults to the sum of ``counts``.
    """
    denominator = sum(counts.values()) if total is None else total
    return {category: round_percent(count, denominator) for category, count in counts.items()}


def matrix_percentages(
    counts: Mapping[str, Mapping[str, int]],
) -> dict[str, dict[str, float]]:
    """Apply :func:`percentages` to every dimension of a count matrix."""
    return {dim: percentages(cats) for dim, cats in counts.items()}


def with_percentages(bucket: PeriodBucket) -> PeriodBucket:
    """Return a copy of ``bucket`` carrying per-dimension percentages."""
    return replace(bucket, percentages=matrix_percentages(bucket.counts))


def merge_counts(
    buckets: Iterable[PeriodBucket],
    *,
    seed: Mapping[str, Sequence[str]] | None = None,
) -> dict[str, dict[str, int]]:
    """Sum count matrices across buckets, keeping first-seen category order.

    Args:
        buckets: Buckets to sum.
        seed: Optional ``dimension -> categories`` pre-filled with zeros.
    """
    merged: dict[str, dict[str, int]] = {
        dim: dict.fromkeys(cats, 0) for dim, cats in (seed or {}).items()
    }
    for bucket in buckets:
        for dim, cats in bucket.counts.items():
            target = merged.setdefault(dim, {})
            for category, count in cats.items():
                target[category] = target.get(category, 0) + count
    return merged
