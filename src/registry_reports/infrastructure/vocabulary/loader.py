# src/registry_reports/infrastructure/vocabulary/loader.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Vocabulary loading (Infrastructure Layer).

Purpose:
    Read the vocabulary document (barangays, cause-of-death keyword map,
    ceremony keywords, age and weight brackets, birth attendants, places of
    birth, and the residence, place-of-death and burial policies) from JSON,
    validate it with Pydantic, and convert it into immutable domain
    :class:`VocabularyBundle` objects.

Layer:
    infrastructure/vocabulary

Notes:
    - The packaged ``data/legazpi.json`` is the default; deployments override
      it with the ``VOCABULARY_PATH`` setting so corrections need no code change.
    - Loading happens once per path (LRU cached). Any I/O, JSON, schema or
      bracket-overlap problem raises :class:`InvalidVocabulary` so the service
      fails at startup instead of producing wrong reports.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from registry_reports.domain.entities.vocabulary import (
    Bracket,
    BracketSet,
    BurialPolicy,
    CategoryVocabulary,
    KeywordCategory,
    PlaceOfDeathPolicy,
    ResidencePolicy,
    VocabularyBundle,
)
from registry_reports.domain.exceptions.reports import InvalidVocabulary
from registry_reports.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)

DEFAULT_VOCABULARY_FILE = Path(__file__).parent / "data" / "legazpi.json"


class _Model(BaseModel):
    # No whitespace stripping: keywords such as "rev " are space-sensitive.
    model_config = ConfigDict(extra="forbid", frozen=True)


def _lowered(values: list[str]) -> tuple[str, ...]:
    return tuple(v.lower() for v in values)


class KeywordCategoryModel(_Model):
    """One keyword-backed category."""

    name: str = Field(..., min_length=1)
    keywords: list[str] = Field(default_factory=list)


class CategoryVocabularyModel(_Model):
    """A canonical vocabulary section of the document."""

    fallback: str = Field(..., min_length=1)
    canonical: list[str] = Field(..., min_length=1)
    direction_aware: bool = False
    substring_fallback: bool = False
    keyword_categories: list[KeywordCategoryModel] = Field(default_factory=list)

    def to_domain(self, name: str) -> CategoryVocabulary:
        """Convert to the immutable domain vocabulary."""
        return CategoryVocabulary(
            name=name,
            canonical=tuple(self.canonical),
            fallback=self.fallback,
            direction_aware=self.direction_aware,
            substring_fallback=self.substring_fallback,
            keyword_categories=tuple(
                # Keywords keep their spacing ("rev ", "fr "); only case is folded.
                KeywordCategory(name=kc.name, keywords=tuple(k.lower() for k in kc.keywords))
                for kc in self.keyword_categories
            ),
        )


class BracketModel(_Model):
    """One bracket; ``min``/``max`` omitted for open ends."""

    label: str = Field(..., min_length=1)
    min: float | None = None
    max: float | None = None


class BracketSetModel(_Model):
    """An ordered bracket section of the document."""

    fallback: str = Field(..., min_length=1)
    brackets: list[BracketModel] = Field(..., min_length=1)

    def to_domain(self, name: str) -> BracketSet:
        """Convert to a validated domain bracket set."""
        return BracketSet(
            name=name,
            brackets=tuple(Bracket(label=b.label, min=b.min, max=b.max) for b in self.brackets),
            fallback=self.fallback,
        )


class ResidenceModel(_Model):
    """Residence classification section of the document."""

    home_municipality: str = Field(..., min_length=1)
    home_country_aliases: list[str] = Field(..., min_length=1)
    home_label: str = "home"
    domestic_label: str = "outsideHomeDomestic"
    foreign_label: str = "foreign"
    unknown_label: str = "unknown"

    def to_domain(self) -> ResidencePolicy:
        """Convert to the domain residence policy."""
        return ResidencePolicy(
            home_municipality=self.home_municipality.lower(),
            home_country_aliases=tuple(a.strip().lower() for a in self.home_country_aliases),
            home_label=self.home_label,
            domestic_label=self.domestic_label,
            foreign_label=self.foreign_label,
            unknown_label=self.unknown_label,
        )


class PlaceOfDeathModel(_Model):
    """Place-of-death classification section of the document."""

    facility_keywords: list[str] = Field(..., min_length=1)
    transient_keywords: list[str] = Field(..., min_length=1)
    facility_label: str = "hospital"
    transient_label: str = "transient"
    other_label: str = "others"

    def to_domain(self) -> PlaceOfDeathPolicy:
        """Convert to the domain place-of-death policy."""
        return PlaceOfDeathPolicy(
            facility_keywords=_lowered(self.facility_keywords),
            transient_keywords=_lowered(self.transient_keywords),
            facility_label=self.facility_label,
            transient_label=self.transient_label,
            other_label=self.other_label,
        )


class BurialModel(_Model):
    """Burial method section of the document."""

    home_municipality: str = Field(..., min_length=1)
    cremation_keywords: list[str] = Field(..., min_length=1)
    burial_keywords: list[str] = Field(..., min_length=1)
    public_keywords: list[str] = Field(default_factory=list)
    not_stated_phrases: list[str] = Field(default_factory=list)
    home_label: str = "home"
    outside_label: str = "outsideHome"

    def to_domain(self) -> BurialPolicy:
        """Convert to the domain burial policy."""
        return BurialPolicy(
            home_municipality=self.home_municipality.lower(),
            cremation_keywords=_lowered(self.cremation_keywords),
            burial_keywords=_lowered(self.burial_keywords),
            public_keywords=_lowered(self.public_keywords),
            not_stated_phrases=_lowered(self.not_stated_phrases),
            home_label=self.home_label,
            outside_label=self.outside_label,
        )


class VocabularyDocument(_Model):
    """Top-level vocabulary JSON document."""

    version: int = Field(default=1, ge=1)
    municipality: str = Field(..., min_length=1)
    barangays: CategoryVocabularyModel
    causes_of_death: CategoryVocabularyModel
    ceremonies: CategoryVocabularyModel
    death_age_brackets: BracketSetModel
    marriage_age_brackets: BracketSetModel
    weight_brackets: BracketSetModel
    residence: ResidenceModel
    places_of_death: PlaceOfDeathModel
    burial: BurialModel
    birth_attendants: CategoryVocabularyModel
    places_of_birth: CategoryVocabularyModel

    def to_domain(self) -> VocabularyBundle:
        """Convert the document to a :class:`VocabularyBundle`.

        Raises:
            InvalidVocabulary: If a section violates a domain invariant.
        """
        return VocabularyBundle(
            barangays=self.barangays.to_domain("barangay"),
            causes_of_death=self.causes_of_death.to_domain("cause_of_death"),
            ceremonies=self.ceremonies.to_domain("ceremony"),
            death_age_brackets=self.death_age_brackets.to_domain("death_age"),
            marriage_age_brackets=self.marriage_age_brackets.to_domain("marriage_age"),
            weight_brackets=self.weight_brackets.to_domain("birth_weight"),
            residence=self.residence.to_domain(),
            places_of_death=self.places_of_death.to_domain(),
            burial=self.burial.to_domain(),
            birth_attendants=self.birth_attendants.to_domain("birth_attendant"),
            places_of_birth=self.places_of_birth.to_domain("place_of_birth"),
        )


def parse_vocabularies(payload: Mapping[str, Any]) -> VocabularyBundle:
    """Validate a decoded vocabulary document and build the domain bundle.

    Args:
        payload: Decoded JSON object.

    Returns:
        VocabularyBundle: Immutable vocabularies.

    Raises:
        InvalidVocabulary: On schema errors or domain invariant violations.
    """
    try:
        document = VocabularyDocument.model_validate(payload)
    except ValidationError as exc:
        raise InvalidVocabulary(
            "Vocabulary document failed validation",
            details={"errors": exc.errors(include_url=False, include_context=False)},
        ) from exc
    return document.to_domain()


def load_vocabulary_file(path: Path) -> VocabularyBundle:
    """Read and parse a vocabulary JSON file.

    Raises:
        InvalidVocabulary: If the file cannot be read, decoded, or validated.
    """
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise InvalidVocabulary(
            f"Vocabulary file not readable: {path}", details={"path": str(path)}
        ) from exc
    except json.JSONDecodeError as exc:
        raise InvalidVocabulary(
            f"Vocabulary file is not valid JSON: {path}",
            details={"path": str(path), "line": exc.lineno, "column": exc.colno},
        ) from exc

    if not isinstance(payload, dict):
        raise InvalidVocabulary(
            "Vocabulary document must be a JSON object", details={"path": str(path)}
        )

    bundle = parse_vocabularies(payload)
    logger.info(
        "vocabulary_loaded",
        extra={
            "extra": {
                "path": str(path),
                "municipality": payload.get("municipality"),
                "barangays": len(bundle.barangays.canonical),
                "cause_categories": len(bundle.causes_of_death.keyword_categories),
            }
        },
    )
    return bundle


@lru_cache(maxsize=8)
def get_vocabularies(path: str | None = None) -> VocabularyBundle:
    """Return the cached vocabulary bundle for ``path`` (default: packaged file)."""
    return load_vocabulary_file(Path(path) if path else DEFAULT_VOCABULARY_FILE)
