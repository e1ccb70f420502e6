# src/registry_reports/application/interfaces/fact_source.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Application Interface: Fact Source Port.

Synopsis:
    Read-only supply of normalized registry facts for stored-data reports.
    Lets the service run against an in-memory fixture, a warehouse export, or
    any other store without the use cases knowing which.

Layer:
    application/interfaces
"""

from __future__ import annotations

from collections.abc import Collection, Sequence
from typing import Protocol

from registry_reports.domain.entities.registry_fact import RegistryFact
from registry_reports.domain.enums.registry import FormCategory


class FactSource(Protocol):
    """Provider of registry facts."""

    async def list_facts(
        self,
        categories: Collection[FormCategory] | None = None,
    ) -> Sequence[RegistryFact]:
        """Return stored facts.

        Args:
            categories: Restrict to these form categories; ``None`` returns all.

        Returns:
            Facts in a stable order (ids ascending is sufficient).
        """
        ...
