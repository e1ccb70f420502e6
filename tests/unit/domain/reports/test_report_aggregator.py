# tests/unit/domain/reports/test_report_aggregator.py
"""Per-period, per-dimension counting and percentage derivation."""

from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest

from registry_reports.domain.entities.registry_fact import AgeAtDeath
from registry_reports.domain.entities.report import PeriodBucket
from registry_reports.domain.entities.vocabulary import VocabularyBundle
from registry_reports.domain.enums.registry import AnchorField, FormCategory
from registry_reports.domain.exceptions.reports import UnknownDimension
from registry_reports.domain.services.report_aggregator import (
    DIMENSION_NAMES,
    aggregate,
    build_dimensions,
    merge_counts,
    percentages,
    round_percent,
    with_percentages,
)


def test_build_dimensions_rejects_unknown_names(vocabularies: VocabularyBundle) -> None:
    with pytest.raises(UnknownDimension) as ei:
        build_dimensions(["category", "zodiac", "blood_type"], vocabularies)
    assert ei.value.code == "UNKNOWN_DIMENSION"
    assert ei.value.details["unknown"] == ["zodiac", "blood_type"]
    assert ei.value.details["allowed"] == list(DIMENSION_NAMES)


def test_build_dimensions_collapses_duplicates(vocabularies: VocabularyBundle) -> None:
    specs = build_dimensions(["sex", "category", "sex"], vocabularies)
    assert [s.name for s in specs] == ["sex", "category"]


def test_aggregate_groups_by_period_and_sorts(
    make_fact, vocabularies: VocabularyBundle, manila: ZoneInfo
) -> None:
    facts = [
        make_fact(registered_at=date(2024, 3, 2)),
        make_fact(FormCategory.DEATH, registered_at=date(2024, 1, 20)),
        make_fact(FormCategory.MARRIAGE, registered_at=date(2024, 1, 5)),
        make_fact(registered_at=None),
    ]
    dims = build_dimensions(["category"], vocabularies)
    buckets = aggregate(facts, "monthly", dims, tz=manila)

    assert [b.key for b in buckets] == ["2024-01", "2024-03"]
    jan = buckets[0]
    assert jan.total == 2
    assert jan.counts["category"] == {"BIRTH": 0, "DEATH": 1, "MARRIAGE": 1}


def test_every_dimension_sums_to_the_bucket_total(
    make_fact, vocabularies: VocabularyBundle, manila: ZoneInfo
) -> None:
    """One death record counts once in each dimension at the same time."""
    facts = [
        make_fact(
            FormCategory.DEATH,
            sex="F",
            residence_barangay_raw="Bitano",
            cause_of_death_raw="Pneumonia",
            age_at_death=AgeAtDeath(years=0, months=3),
            residence_city_raw="Legazpi City",
        ),
        make_fact(FormCategory.DEATH, sex="male", cause_of_death_raw="stroke", age_years=70),
        make_fact(FormCategory.DEATH),
    ]
    dims = build_dimensions(DIMENSION_NAMES, vocabularies)
    (bucket,) = aggregate(facts, "yearly", dims, tz=manila)

    assert bucket.total == 3
    for name in DIMENSION_NAMES:
        assert sum(bucket.counts[name].values()) == 3, name

    assert bucket.counts["barangay"]["Bitano"] == 1
    assert bucket.counts["barangay"]["Unknown"] == 2
    assert bucket.counts["cause_of_death"]["Pneumonia"] == 1
    assert bucket.counts["cause_of_death"]["Cerebrovascular diseases"] == 1
    assert bucket.counts["age_bracket"]["lessThan1Year"] == 1
    assert bucket.counts["age_bracket"]["sixtyFiveAndAbove"] == 1
    assert bucket.counts["sex"] == {"male": 1, "female": 1, "unknown": 1}
    assert bucket.counts["sex_age"]["female|lessThan1Year"] == 1
    assert bucket.counts["sex_age"]["male|sixtyFiveAndAbove"] == 1
    assert bucket.counts["sex_age"]["unknown|unknown"] == 1
    assert bucket.counts["residence"]["legazpi"] == 1
    assert bucket.counts["registration"]["Not Stated"] == 3
    assert bucket.counts["place_of_death"]["others"] == 3
    assert bucket.counts["burial_method"]["notStated"] == 3
    assert bucket.counts["transfer_permit"]["withoutTransferPermit"] == 3
    assert bucket.counts["birth_attendant"]["Others"] == 3
    assert bucket.counts["place_of_birth"]["Others"] == 3


def test_categories_are_preseeded_with_zero(
    make_fact, vocabularies: VocabularyBundle, manila: ZoneInfo
) -> None:
    dims = build_dimensions(["weight_bracket", "registration"], vocabularies)
    (bucket,) = aggregate(
        [make_fact(weight_grams=3200.0, is_late_registration=True)], "yearly", dims, tz=manila
    )
    assert list(bucket.counts["weight_bracket"]) == list(vocabularies.weight_brackets.labels)
    assert bucket.counts["weight_bracket"]["3,000 - 3,499"] == 1
    assert bucket.counts["weight_bracket"]["Under 1,000"] == 0
    assert bucket.counts["registration"] == {
        "On time registration": 0,
        "Late registration": 1,
        "Not Stated": 0,
    }


def test_fractional_weights_count_in_their_bracket(
    make_fact, vocabularies: VocabularyBundle, manila: ZoneInfo
) -> None:
    dims = build_dimensions(["weight_bracket"], vocabularies)
    (bucket,) = aggregate(
        [make_fact(weight_grams=2999.5), make_fact(weight_grams=999.5), make_fact()],
        "yearly",
        dims,
        tz=manila,
    )
    weights = bucket.counts["weight_bracket"]
    assert weights["2,500 - 2,999"] == 1
    assert weights["Under 1,000"] == 1
    assert weights["Not Stated"] == 1


def test_aggregate_respects_anchor(make_fact, vocabularies: VocabularyBundle, manila: ZoneInfo) -> None:
    fact = make_fact(
        FormCategory.DEATH,
        registered_at=datetime(2024, 2, 3, 1, 0),
        occurred_at=date(2023, 12, 30),
    )
    dims = build_dimensions(["category"], vocabularies)
    by_registration = aggregate([fact], "yearly", dims, tz=manila)
    by_occurrence = aggregate([fact], "yearly", dims, tz=manila, anchor=AnchorField.OCCURRED_AT)
    assert [b.key for b in by_registration] == ["2024"]
    assert [b.key for b in by_occurrence] == ["2023"]


@pytest.mark.parametrize(
    ("count", "total", "expected"),
    [
        (1, 16, 6.3),
        (1, 3, 33.3),
        (2, 3, 66.7),
        (1, 8, 12.5),
        (1, 40, 2.5),
        (5, 5, 100.0),
        (0, 0, 0.0),
        (3, 0, 0.0),
    ],
)
def test_round_percent_rounds_half_up(count: int, total: int, expected: float) -> None:
    assert round_percent(count, total) == expected


def test_percentages_default_to_sum_of_counts() -> None:
    assert percentages({"a": 1, "b": 3}) == {"a": 25.0, "b": 75.0}
    assert percentages({"a": 0, "b": 0}) == {"a": 0.0, "b": 0.0}
    assert percentages({"a": 1}, total=4) == {"a": 25.0}


def test_with_percentages_keeps_counts(manila: ZoneInfo) -> None:
    bucket = PeriodBucket(
        key="2024",
        start=datetime(2024, 1, 1, tzinfo=manila),
        end=datetime(2024, 12, 31, 23, 59, 59, 999000, tzinfo=manila),
        total=3,
        counts={"sex": {"male": 1, "female": 2, "unknown": 0}},
    )
    out = with_percentages(bucket)
    assert out.counts == bucket.counts
    assert out.percentages == {"sex": {"male": 33.3, "female": 66.7, "unknown": 0.0}}
    assert bucket.percentages is None


def test_merge_counts_sums_and_seeds(manila: ZoneInfo) -> None:
    start = datetime(2024, 1, 1, tzinfo=manila)
    buckets = [
        PeriodBucket(key="2024-01", start=start, end=start, total=2, counts={"sex": {"male": 2}}),
        PeriodBucket(key="2024-02", start=start, end=start, total=1, counts={"sex": {"female": 1}}),
    ]
    merged = merge_counts(buckets, seed={"sex": ["female", "male", "unknown"], "category": ["BIRTH"]})
    assert merged == {
        "sex": {"female": 1, "male": 2, "unknown": 0},
        "category": {"BIRTH": 0},
    }
    assert list(merged["sex"]) == ["female", "male", "unknown"]


def _one_bucket(facts, names, vocabularies: VocabularyBundle, manila: ZoneInfo) -> PeriodBucket:
    (bucket,) = aggregate(facts, "yearly", build_dimensions(names, vocabularies), tz=manila)
    return bucket


def test_place_of_death_separates_transient_institutions(
    make_fact, vocabularies: VocabularyBundle, manila: ZoneInfo
) -> None:
    facts = [
        make_fact(
            FormCategory.DEATH,
            place_of_death_type="Hospital",
            place_of_death_institution="Bicol Regional Hospital",
        ),
        make_fact(
            FormCategory.DEATH,
            place_of_death_type="Hospital",
            place_of_death_institution="Transient Ward",
        ),
        make_fact(FormCategory.DEATH, place_of_death_type="Transient"),
        make_fact(FormCategory.DEATH, place_of_death_type="Residence"),
        make_fact(FormCategory.DEATH),
    ]
    bucket = _one_bucket(facts, ["place_of_death"], vocabularies, manila)
    assert bucket.counts["place_of_death"] == {"hospital": 1, "transient": 2, "others": 2}


def test_burial_method_splits_cemeteries_by_location_and_type(
    make_fact, vocabularies: VocabularyBundle, manila: ZoneInfo
) -> None:
    facts = [
        make_fact(FormCategory.DEATH, corpse_disposal="Cremation"),
        make_fact(FormCategory.DEATH, corpse_disposal="Burial", cemetery_name="Not stated"),
        make_fact(FormCategory.DEATH, corpse_disposal="Burial", cemetery_name="  "),
        make_fact(
            FormCategory.DEATH,
            corpse_disposal="Burial",
            cemetery_name="Legazpi City Cemetery",
            cemetery_city="Legazpi City",
        ),
        make_fact(
            FormCategory.DEATH,
            corpse_disposal="Burial",
            cemetery_name="Holy Gardens Memorial Park",
            cemetery_city="Daraga",
        ),
        make_fact(FormCategory.DEATH, corpse_disposal="Donation", cemetery_name="UST Anatomy"),
    ]
    counts = _one_bucket(facts, ["burial_method"], vocabularies, manila).counts["burial_method"]

    assert list(counts) == list(vocabularies.burial.labels)
    assert counts["cremation"] == 1
    assert counts["notStated"] == 2
    assert counts["legazpi|publicCemetery"] == 1
    assert counts["outsideLegazpi|privateCemetery"] == 1
    assert counts["other"] == 1
    assert counts["legazpi|privateCemetery"] == 0


def test_transfer_permit_counts_missing_as_without(
    make_fact, vocabularies: VocabularyBundle, manila: ZoneInfo
) -> None:
    facts = [
        make_fact(FormCategory.DEATH, has_transfer_permit=True),
        make_fact(FormCategory.DEATH, has_transfer_permit=False),
        make_fact(FormCategory.DEATH),
    ]
    bucket = _one_bucket(facts, ["transfer_permit"], vocabularies, manila)
    assert bucket.counts["transfer_permit"] == {
        "withTransferPermit": 1,
        "withoutTransferPermit": 2,
    }


def test_birth_attendant_and_place_of_birth(
    make_fact, vocabularies: VocabularyBundle, manila: ZoneInfo
) -> None:
    facts = [
        make_fact(birth_attendant="midwife", place_of_birth="Bicol Regional Hospital"),
        make_fact(birth_attendant="Physician", place_of_birth="Barangay Bitano"),
        make_fact(birth_attendant="Doctor", place_of_birth="home"),
        make_fact(),
    ]
    bucket = _one_bucket(facts, ["birth_attendant", "place_of_birth"], vocabularies, manila)
    assert bucket.counts["birth_attendant"] == {
        "Physician": 1,
        "Nurse": 0,
        "Midwife": 1,
        "Hilot": 0,
        "Others": 2,
    }
    assert bucket.counts["place_of_birth"] == {"Health facility": 1, "Home": 2, "Others": 1}
