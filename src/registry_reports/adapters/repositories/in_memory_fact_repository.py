# src/registry_reports/adapters/repositories/in_memory_fact_repository.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""In-memory fact repository.

Purpose:
    Default :class:`FactSource` implementation. Holds normalized facts in
    process memory; the service has no persistence of its own, so deployments
    feed it from an export or tests seed it directly.

Layer:
    adapters/repositories
"""

from __future__ import annotations

import asyncio
from collections.abc import Collection, Iterable, Sequence

from registry_reports.domain.entities.registry_fact import RegistryFact
from registry_reports.domain.enums.registry import FormCategory


class InMemoryFactRepository:
    """A small, concurrency-safe in-memory fact store.

    Facts are keyed by ``id``; adding a fact with an existing id replaces it.
    """

    def __init__(self, facts: Iterable[RegistryFact] = ()) -> None:
        self._store: dict[str, RegistryFact] = {f.id: f for f in facts}
        self._lock = asyncio.Lock()

    async def add_many(self, facts: Iterable[RegistryFact]) -> int:
        """Insert or replace facts; return the number written."""
        written = 0
        async with self._lock:
            for fact in facts:
                self._store[fact.id] = fact
                written += 1
        return written

    async def clear(self) -> None:
        """Remove every stored fact."""
        async with self._lock:
            self._store.clear()

    async def list_facts(
        self,
        categories: Collection[FormCategory] | None = None,
    ) -> Sequence[RegistryFact]:
        """Return stored facts ordered by id, optionally restricted by category."""
        async with self._lock:
            facts = sorted(self._store.values(), key=lambda f: f.id)
        if categories:
            wanted = set(categories)
            facts = [f for f in facts if f.category in wanted]
        return facts
