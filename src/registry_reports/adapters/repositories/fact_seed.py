# src/registry_reports/adapters/repositories/fact_seed.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Fact seed loading.

Purpose:
    Read a JSON array of facts (the same shape as ``facts`` in
    ``POST /v1/reports/aggregate`` bodies) and map it to domain facts, so the
    in-memory repository behind ``GET /v1/reports/periods`` can be filled from
    an export at startup via the ``FACTS_SEED_PATH`` setting.

Layer:
    adapters/repositories

Notes:
    A seed file is all-or-nothing: unreadable files, bad JSON and records
    failing schema validation raise :class:`InvalidFactSeed` so a bad export
    never serves a partial dataset.
"""

from __future__ import annotations

import json
from datetime import tzinfo
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from registry_reports.adapters.mappers.fact_mapper import to_registry_facts
from registry_reports.adapters.schemas.http.reports import FactHTTP
from registry_reports.domain.entities.registry_fact import RegistryFact
from registry_reports.domain.exceptions.reports import InvalidFactSeed
from registry_reports.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)

_FACTS = TypeAdapter(list[FactHTTP])


def load_fact_seed(path: Path, *, tz: tzinfo) -> list[RegistryFact]:
    """Load and map every fact in a seed file.

    Args:
        path: JSON file holding an array of fact objects.
        tz: Reference timezone used by the fact mapper.

    Returns:
        list[RegistryFact]: Facts in file order.

    Raises:
        InvalidFactSeed: If the file cannot be read, decoded, or validated.
    """
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise InvalidFactSeed(
            f"Fact seed file not readable: {path}", details={"path": str(path)}
        ) from exc
    except json.JSONDecodeError as exc:
        raise InvalidFactSeed(
            f"Fact seed file is not valid JSON: {path}",
            details={"path": str(path), "line": exc.lineno, "column": exc.colno},
        ) from exc

    try:
        records = _FACTS.validate_python(payload)
    except ValidationError as exc:
        raise InvalidFactSeed(
            "Fact seed failed validation",
            details={
                "path": str(path),
                "errors": exc.errors(include_url=False, include_context=False, include_input=False),
            },
        ) from exc

    facts = to_registry_facts(records, tz=tz)
    logger.info("fact_seed_loaded", extra={"extra": {"path": str(path), "facts": len(facts)}})
    return facts
