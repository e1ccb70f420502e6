# src/registry_reports/domain/entities/vocabulary.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Vocabulary entities (Domain Layer).

Purpose:
    Immutable configuration objects the report engine classifies against:
    canonical category vocabularies (barangays, causes of death, ceremony
    types, birth attendants, places of birth), ordered numeric bracket sets
    (ages, birth weights), and the residence, place-of-death and burial
    policies for the home municipality.

Layer:
    domain/entities

Notes:
    - Vocabularies are loaded once at process start and passed to the engine
      explicitly. Nothing in the aggregation logic reads module globals.
    - Bracket sets validate disjointness at construction time; classification
      never re-checks it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from registry_reports.domain.entities.base import BaseEntity
from registry_reports.domain.exceptions.reports import InvalidVocabulary


@dataclass(frozen=True, slots=True)
class KeywordCategory(BaseEntity):
    """A category backed by lowercase substring keywords.

    Attributes:
        name: Canonical category name returned on a match.
        keywords: Lowercase keywords; any keyword contained in the input matches.
    """

    name: str
    keywords: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise InvalidVocabulary("Keyword category name must be non-empty")
        if any(k != k.lower() or not k.strip() for k in self.keywords):
            raise InvalidVocabulary(
                "Keywords must be non-empty and lowercase",
                details={"category": self.name},
            )


@dataclass(frozen=True, slots=True)
class CategoryVocabulary(BaseEntity):
    """A closed, ordered vocabulary of canonical names for one dimension.

    Attributes:
        name: Vocabulary identifier (``barangay``, ``cause_of_death``...).
        canonical: Canonical names in display order, original casing.
        fallback: Category returned when nothing matches.
        direction_aware: Enable compass-direction safety checks.
        substring_fallback: Accept containment matches in either direction.
        keyword_categories: Ordered keyword categories; order is priority.
    """

    name: str
    canonical: tuple[str, ...]
    fallback: str
    direction_aware: bool = False
    substring_fallback: bool = False
    keyword_categories: tuple[KeywordCategory, ...] = ()

    def __post_init__(self) -> None:
        if not self.fallback.strip():
            raise InvalidVocabulary(
                "Vocabulary fallback must be non-empty", details={"vocabulary": self.name}
            )
        if len(set(self.canonical)) != len(self.canonical):
            raise InvalidVocabulary(
                "Duplicate canonical names", details={"vocabulary": self.name}
            )

    @property
    def categories(self) -> tuple[str, ...]:
        """Return every category key this vocabulary can produce, fallback last."""
        seen: dict[str, None] = dict.fromkeys(self.canonical)
        for kc in self.keyword_categories:
            seen.setdefault(kc.name, None)
        seen.pop(self.fallback, None)
        return (*seen, self.fallback)


@dataclass(frozen=True, slots=True)
class Bracket(BaseEntity):
    """One numeric range of a :class:`BracketSet`.

    Attributes:
        label: Category key returned for values in range.
        min: Inclusive lower bound, or ``None`` for an open lower end.
        max: Inclusive upper bound as printed on the report, or ``None`` for an
            open upper end. Inside a set, an inner bracket also takes every
            value below the next bracket's ``min``.
    """

    label: str
    min: float | None = None
    max: float | None = None

    def __post_init__(self) -> None:
        if self.min is not None and self.max is not None and self.min > self.max:
            raise InvalidVocabulary(
                "Bracket lower bound exceeds upper bound", details={"label": self.label}
            )


@dataclass(frozen=True, slots=True)
class BracketSet(BaseEntity):
    """An ordered, pairwise disjoint list of brackets.

    Only the first bracket may omit its lower bound and only the last may omit
    its upper bound. Brackets must ascend without overlapping. Classification
    is contiguous: an inner bracket covers ``[min, next.min)``, so a value
    between one bracket's printed ``max`` and the next ``min`` (2999.5 g,
    0.5 years) still lands in exactly one bracket.

    Raises:
        InvalidVocabulary: When the brackets are empty, unordered, overlapping,
            or open-ended in the middle.
    """

    name: str
    brackets: tuple[Bracket, ...]
    fallback: str

    def __post_init__(self) -> None:
        if not self.brackets:
            raise InvalidVocabulary("Bracket set is empty", details={"bracket_set": self.name})

        labels = [b.label for b in self.brackets]
        if len(set(labels)) != len(labels) or self.fallback in labels:
            raise InvalidVocabulary(
                "Bracket labels must be unique and differ from the fallback",
                details={"bracket_set": self.name},
            )

        last = len(self.brackets) - 1
        for idx, bracket in enumerate(self.brackets):
            if bracket.min is None and idx != 0:
                raise InvalidVocabulary(
                    "Only the first bracket may omit its lower bound",
                    details={"bracket_set": self.name, "label": bracket.label},
                )
            if bracket.max is None and idx != last:
                raise InvalidVocabulary(
                    "Only the last bracket may omit its upper bound",
                    details={"bracket_set": self.name, "label": bracket.label},
                )

        for prev, cur in zip(self.brackets, self.brackets[1:], strict=False):
            if prev.max is None or cur.min is None or cur.min <= prev.max:
                raise InvalidVocabulary(
                    "Brackets overlap or are out of order",
                    details={
                        "bracket_set": self.name,
                        "previous": prev.label,
                        "current": cur.label,
                    },
                )

        for bracket in self.brackets:
            for bound in (bracket.min, bracket.max):
                if bound is not None and not math.isfinite(bound):
                    raise InvalidVocabulary(
                        "Bracket bounds must be finite; use None for an open end",
                        details={"bracket_set": self.name, "label": bracket.label},
                    )

    def bracket_for(self, value: float) -> Bracket | None:
        """Return the single bracket covering ``value``, or ``None`` when out of range.

        Only a first bracket with a lower bound or a last bracket with an
        upper bound can leave values out of range.
        """
        brackets = self.brackets
        first, last = brackets[0], brackets[-1]
        if first.min is not None and value < first.min:
            return None
        if last.max is not None and value > last.max:
            return None
        for bracket, following in zip(brackets, brackets[1:], strict=False):
            # Validation guarantees every non-first bracket has a lower bound.
            if value < following.min:  # type: ignore[operator]
                return bracket
        return last

    @property
    def labels(self) -> tuple[str, ...]:
        """Return bracket labels in ascending order, fallback last."""
        return (*(b.label for b in self.brackets), self.fallback)

    @property
    def first(self) -> Bracket:
        """Return the lowest bracket."""
        return self.brackets[0]


@dataclass(frozen=True, slots=True)
class ResidencePolicy(BaseEntity):
    """How a free-text residence is classified against the home municipality.

    Attributes:
        home_municipality: Lowercase keyword identifying the home city.
        home_country_aliases: Lowercase names treated as the home country.
        home_label: Category for residents of the home municipality.
        domestic_label: Category for other residents of the home country.
        foreign_label: Category for residents of any other country.
        unknown_label: Category when neither city nor country is stated.
    """

    home_municipality: str
    home_country_aliases: tuple[str, ...]
    home_label: str = "home"
    domestic_label: str = "outsideHomeDomestic"
    foreign_label: str = "foreign"
    unknown_label: str = "unknown"

    @property
    def labels(self) -> tuple[str, ...]:
        """Return residence categories in display order."""
        return (self.home_label, self.domestic_label, self.foreign_label, self.unknown_label)

    def classify(self, city: str | None, country: str | None) -> str:
        """Classify a free-text residence.

        A stated country outside the home aliases is foreign. Otherwise the
        residence is home when the city mentions the home municipality and
        domestic when it does not.
        """
        city_norm = (city or "").strip().lower()
        country_norm = (country or "").strip().lower()
        if not city_norm and not country_norm:
            return self.unknown_label
        if country_norm and country_norm not in self.home_country_aliases:
            return self.foreign_label
        if self.home_municipality and self.home_municipality in city_norm:
            return self.home_label
        return self.domestic_label


@dataclass(frozen=True, slots=True)
class PlaceOfDeathPolicy(BaseEntity):
    """How a death certificate's place of death is classified.

    A location type naming a health facility counts as ``facility_label``
    unless the institution is flagged transient. A location type that is
    itself transient counts as ``transient_label``. Everything else,
    including a missing location, is ``other_label``.
    """

    facility_keywords: tuple[str, ...]
    transient_keywords: tuple[str, ...]
    facility_label: str = "hospital"
    transient_label: str = "transient"
    other_label: str = "others"

    @property
    def labels(self) -> tuple[str, ...]:
        """Return place-of-death categories in display order."""
        return (self.facility_label, self.transient_label, self.other_label)

    def classify(self, location_type: str | None, institution: str | None) -> str:
        """Classify a location type and hospital/institution name."""
        location = (location_type or "").lower()
        if any(k in location for k in self.facility_keywords):
            name = (institution or "").lower()
            if any(k in name for k in self.transient_keywords):
                return self.transient_label
            return self.facility_label
        if any(k in location for k in self.transient_keywords):
            return self.transient_label
        return self.other_label


@dataclass(frozen=True, slots=True)
class BurialPolicy(BaseEntity):
    """How corpse disposal and cemetery details are classified.

    Rules, in order:
        * disposal mentions cremation: ``cremation_label``
        * cemetery name blank or a not-stated phrase: ``not_stated_label``
        * disposal mentions burial: ``"<location>|<cemetery type>"`` where the
          location is home when the cemetery city mentions the home
          municipality, and the type is public when the cemetery name carries
          a public keyword
        * anything else: ``other_label``
    """

    home_municipality: str
    cremation_keywords: tuple[str, ...]
    burial_keywords: tuple[str, ...]
    public_keywords: tuple[str, ...]
    not_stated_phrases: tuple[str, ...]
    home_label: str = "home"
    outside_label: str = "outsideHome"
    public_label: str = "publicCemetery"
    private_label: str = "privateCemetery"
    cremation_label: str = "cremation"
    other_label: str = "other"
    not_stated_label: str = "notStated"

    def cemetery_label(self, location: str, kind: str) -> str:
        """Return the composite key for a burial location and cemetery type."""
        return f"{location}|{kind}"

    @property
    def labels(self) -> tuple[str, ...]:
        """Return burial categories in display order, not-stated last."""
        cemeteries = tuple(
            self.cemetery_label(loc, kind)
            for loc in (self.home_label, self.outside_label)
            for kind in (self.public_label, self.private_label)
        )
        return (*cemeteries, self.cremation_label, self.other_label, self.not_stated_label)

    def classify(
        self, disposal: str | None, cemetery_name: str | None, cemetery_city: str | None
    ) -> str:
        """Classify one death's disposal method and cemetery."""
        method = (disposal or "").lower()
        if any(k in method for k in self.cremation_keywords):
            return self.cremation_label

        name = (cemetery_name or "").strip().lower()
        if not name or any(p in name for p in self.not_stated_phrases):
            return self.not_stated_label

        if not any(k in method for k in self.burial_keywords):
            return self.other_label

        city = (cemetery_city or "").lower()
        location = self.home_label if self.home_municipality in city else self.outside_label
        kind = (
            self.public_label
            if any(k in name for k in self.public_keywords)
            else self.private_label
        )
        return self.cemetery_label(location, kind)


@dataclass(frozen=True, slots=True)
class VocabularyBundle(BaseEntity):
    """Every vocabulary the report engine needs, loaded together."""

    barangays: CategoryVocabulary
    causes_of_death: CategoryVocabulary
    ceremonies: CategoryVocabulary
    death_age_brackets: BracketSet
    marriage_age_brackets: BracketSet
    weight_brackets: BracketSet
    residence: ResidencePolicy
    places_of_death: PlaceOfDeathPolicy
    burial: BurialPolicy
    birth_attendants: CategoryVocabulary
    places_of_birth: CategoryVocabulary
