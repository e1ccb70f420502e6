# tests/conftest.py
"""Shared fixtures for the registry reports test-suite.

Scope:
    - Packaged vocabularies and a report engine bound to Asia/Manila.
    - A ``make_fact`` factory for terse RegistryFact construction.
    - Settings cache isolation so env-driven tests never leak.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import date, datetime
from typing import Any
from zoneinfo import ZoneInfo

import pytest

from registry_reports.config.settings import get_settings
from registry_reports.domain.entities.registry_fact import RegistryFact
from registry_reports.domain.entities.vocabulary import VocabularyBundle
from registry_reports.domain.enums.registry import FormCategory
from registry_reports.domain.services.report_engine import RegistryReportEngine
from registry_reports.infrastructure.vocabulary.loader import get_vocabularies

FactFactory = Callable[..., RegistryFact]


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("ENVIRONMENT", "test")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(scope="session")
def vocabularies() -> VocabularyBundle:
    return get_vocabularies()


@pytest.fixture(scope="session")
def manila() -> ZoneInfo:
    return ZoneInfo("Asia/Manila")


@pytest.fixture()
def engine(vocabularies: VocabularyBundle) -> RegistryReportEngine:
    return RegistryReportEngine(vocabularies, timezone="Asia/Manila")


@pytest.fixture()
def make_fact() -> FactFactory:
    counter = {"n": 0}

    def _make(
        category: FormCategory = FormCategory.BIRTH,
        registered_at: datetime | date | None = date(2024, 1, 15),
        **overrides: Any,
    ) -> RegistryFact:
        counter["n"] += 1
        overrides.setdefault("id", f"f-{counter['n']:05d}")
        return RegistryFact(category=category, registered_at=registered_at, **overrides)

    return _make
