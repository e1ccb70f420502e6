# tests/unit/infrastructure/test_vocabulary_loader.py
from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

import pytest

from registry_reports.domain.exceptions.reports import InvalidVocabulary
from registry_reports.infrastructure.vocabulary.loader import (
    DEFAULT_VOCABULARY_FILE,
    get_vocabularies,
    load_vocabulary_file,
    parse_vocabularies,
)


def _packaged_payload() -> dict[str, Any]:
    return json.loads(DEFAULT_VOCABULARY_FILE.read_text(encoding="utf-8"))


def test_packaged_vocabularies_load() -> None:
    bundle = get_vocabularies()
    assert "Bitano" in bundle.barangays.canonical
    assert bundle.barangays.direction_aware is True
    assert bundle.causes_of_death.fallback == "Other causes of death"
    assert bundle.death_age_brackets.first.label == "lessThan1Year"
    assert bundle.residence.home_label == "legazpi"
    assert get_vocabularies() is bundle


def test_packaged_place_burial_and_birth_sections_load() -> None:
    bundle = get_vocabularies()
    assert bundle.places_of_death.labels == ("hospital", "transient", "others")
    assert bundle.burial.home_label == "legazpi"
    assert bundle.burial.labels[0] == "legazpi|publicCemetery"
    assert bundle.burial.labels[-1] == "notStated"
    assert "don't know" in bundle.burial.not_stated_phrases
    assert bundle.birth_attendants.name == "birth_attendant"
    assert bundle.birth_attendants.categories[-1] == "Others"
    assert bundle.places_of_birth.categories == ("Health facility", "Home", "Others")


def test_ceremony_keywords_keep_trailing_spaces() -> None:
    bundle = get_vocabularies()
    catholic = next(kc for kc in bundle.ceremonies.keyword_categories if kc.name == "catholic")
    assert "rev " in catholic.keywords
    assert "fr " in catholic.keywords


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(InvalidVocabulary) as ei:
        load_vocabulary_file(tmp_path / "nope.json")
    assert ei.value.code == "INVALID_VOCABULARY"


def test_bad_json_raises(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(InvalidVocabulary) as ei:
        load_vocabulary_file(path)
    assert ei.value.details["path"] == str(path)
    assert ei.value.details["line"] == 1


def test_non_object_document_raises(tmp_path: Path) -> None:
    path = tmp_path / "list.json"
    path.write_text("[]", encoding="utf-8")
    with pytest.raises(InvalidVocabulary):
        load_vocabulary_file(path)


def test_schema_errors_raise() -> None:
    payload = _packaged_payload()
    del payload["barangays"]
    with pytest.raises(InvalidVocabulary) as ei:
        parse_vocabularies(payload)
    assert ei.value.details["errors"]


def test_unknown_keys_are_rejected() -> None:
    payload = _packaged_payload()
    payload["surprise"] = True
    with pytest.raises(InvalidVocabulary):
        parse_vocabularies(payload)


def test_overlapping_brackets_raise() -> None:
    payload = copy.deepcopy(_packaged_payload())
    payload["weight_brackets"]["brackets"][1]["min"] = 900
    with pytest.raises(InvalidVocabulary) as ei:
        parse_vocabularies(payload)
    assert ei.value.details["bracket_set"] == "birth_weight"


def test_custom_file_overrides_packaged_one(tmp_path: Path) -> None:
    payload = _packaged_payload()
    payload["barangays"]["canonical"] = ["Alpha", "Beta North"]
    path = tmp_path / "custom.json"
    path.write_text(json.dumps(payload), encoding="utf-8")

    bundle = get_vocabularies(str(path))
    assert bundle.barangays.canonical == ("Alpha", "Beta North")
    assert get_vocabularies() is not bundle
