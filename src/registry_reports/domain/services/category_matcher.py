# src/registry_reports/domain/services/category_matcher.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Fuzzy category matching against canonical vocabularies.

Purpose:
    Normalize free-text labels (barangay names, causes of death, ceremony
    descriptions) onto a closed vocabulary. Matching tries, in order:

        1. missing/blank input -> vocabulary fallback
        2. normalization (case, apostrophes/backticks, whitespace)
        3. exact normalized match
        4. direction-aware match (vocabularies with ``direction_aware``)
        5. containment match (vocabularies with ``substring_fallback``)
        6. ordered keyword categories
        7. vocabulary fallback

Layer:
    domain/services

Notes:
    - Pure and deterministic. A :class:`CategoryMatcher` pre-indexes its
      vocabulary once (hash map for exact hits) so the O(vocabulary) scan only
      runs for labels that are not already canonical. Resolved labels are
      memoized per matcher instance, up to ``MEMO_LIMIT`` distinct inputs.
    - The direction rule accepts a candidate when the direction-stripped
      bases are equal and the two labels share at least one direction word.
    - A candidate involved in a compass direction is either accepted by the
      direction rule or rejected outright; it never reaches the containment
      step. "Victory Village South" can therefore never resolve to
      "Victory Village North".
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache

from registry_reports.domain.entities.vocabulary import CategoryVocabulary

DIRECTIONS: tuple[str, ...] = ("south", "north", "east", "west")

_STRIP_RE = re.compile(r"['`´’‘]")
_SPACE_RE = re.compile(r"\s+")

# Distinct raw labels remembered per matcher before the memo is reset.
MEMO_LIMIT = 4096


def normalize_label(raw: str) -> str:
    """Lowercase, drop apostrophes/backticks, and collapse whitespace."""
    value = _STRIP_RE.sub("", raw.lower())
    return _SPACE_RE.sub(" ", value).strip()


def _directions_in(value: str) -> frozenset[str]:
    return frozenset(d for d in DIRECTIONS if d in value)


def _strip_directions(value: str) -> str:
    for direction in DIRECTIONS:
        value = value.replace(direction, "")
    return _SPACE_RE.sub(" ", value).strip()


@dataclass(frozen=True, slots=True)
class _Candidate:
    canonical: str
    normalized: str
    base: str
    directions: frozenset[str]


class CategoryMatcher:
    """Pre-indexed, memoizing matcher for one :class:`CategoryVocabulary`.

    Results are memoized per instance by raw label. The memo is cleared once it
    holds ``MEMO_LIMIT`` labels, so a long-lived shared matcher stays bounded.

    Args:
        vocabulary: Immutable vocabulary to match against.
    """

    __slots__ = ("_vocabulary", "_exact", "_candidates", "_memo")

    def __init__(self, vocabulary: CategoryVocabulary) -> None:
        self._vocabulary = vocabulary
        self._exact: dict[str, str] = {}
        candidates: list[_Candidate] = []
        for name in vocabulary.canonical:
            normalized = normalize_label(name)
            if not normalized:
                continue
            # First declaration wins if two canonical names normalize alike.
            self._exact.setdefault(normalized, name)
            candidates.append(
                _Candidate(
                    canonical=name,
                    normalized=normalized,
                    base=_strip_directions(normalized),
                    directions=_directions_in(normalized),
                )
            )
        self._candidates: tuple[_Candidate, ...] = tuple(candidates)
        self._memo: dict[str, str] = {}

    @property
    def vocabulary(self) -> CategoryVocabulary:
        """Return the vocabulary this matcher was built from."""
        return self._vocabulary

    def match(self, raw: str | None) -> str:
        """Return the canonical category for ``raw`` (never raises)."""
        vocab = self._vocabulary
        if raw is None:
            return vocab.fallback
        hit = self._memo.get(raw)
        if hit is None:
            if len(self._memo) >= MEMO_LIMIT:
                self._memo.clear()
            hit = self._memo[raw] = self._resolve(raw)
        return hit

    def _resolve(self, raw: str) -> str:
        vocab = self._vocabulary
        normalized = normalize_label(raw)
        if not normalized:
            return vocab.fallback

        exact = self._exact.get(normalized)
        if exact is not None:
            return exact

        if vocab.direction_aware or vocab.substring_fallback:
            scanned = self._scan(normalized)
            if scanned is not None:
                return scanned

        for category in vocab.keyword_categories:
            if any(keyword in normalized for keyword in category.keywords):
                return category.name

        return vocab.fallback

    def memo_size(self) -> int:
        """Return how many raw labels are currently memoized."""
        return len(self._memo)

    def _scan(self, normalized: str) -> str | None:
        vocab = self._vocabulary
        input_dirs = _directions_in(normalized) if vocab.direction_aware else frozenset()
        input_base = _strip_directions(normalized) if input_dirs else normalized

        for cand in self._candidates:
            if vocab.direction_aware and (input_dirs or cand.directions):
                # Same base and at least one direction word in common.
                if input_dirs & cand.directions and input_base == cand.base:
                    return cand.canonical
                continue
            if vocab.substring_fallback and (
                normalized in cand.normalized or cand.normalized in normalized
            ):
                return cand.canonical
        return None


@lru_cache(maxsize=32)
def matcher_for(vocabulary: CategoryVocabulary) -> CategoryMatcher:
    """Return a shared pre-indexed matcher for an immutable vocabulary."""
    return CategoryMatcher(vocabulary)


def match_category(raw: str | None, vocabulary: CategoryVocabulary) -> str:
    """Resolve ``raw`` to a canonical category of ``vocabulary``.

    Args:
        raw: Free-text label, possibly ``None`` or blank.
        vocabulary: Vocabulary to match against.

    Returns:
        str: Canonical name (original casing) or the vocabulary fallback.
    """
    return matcher_for(vocabulary).match(raw)
