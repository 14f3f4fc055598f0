"""
reqmods Catalog — Provider Protocol and In-Memory Catalog
===========================================================
The module loader owns the catalog. This package only reads it,
except for the one-way Local → Global promotion done by
require module { } blocks.
"""

from __future__ import annotations

import dataclasses
from typing import Iterable, Optional, Protocol

from reqmods.catalog.models import ModuleCatalogEntry, ModuleScope


class ModuleCatalog(Protocol):
    def entries(self) -> tuple[ModuleCatalogEntry, ...]:
        ...

    def lookup(self, name: str) -> Optional[ModuleCatalogEntry]:
        """Case-insensitive match in any load state."""
        ...

    def lookup_strict(self, name: str) -> Optional[ModuleCatalogEntry]:
        """Case-insensitive match among fully loaded modules only."""
        ...

    def promote_to_global(self, name: str) -> bool:
        ...


class InMemoryModuleCatalog:
    """
    Deterministic in-memory catalog used by tests/bootstrap.

    Natural order is registration order; the broadcaster relies on it.
    """

    def __init__(self, entries: Iterable[ModuleCatalogEntry] | None = None):
        self._entries: list[ModuleCatalogEntry] = []
        for entry in entries or ():
            self.add(entry)

    def add(self, entry: ModuleCatalogEntry) -> None:
        if self._index_of(entry.name) is not None:
            raise ValueError(
                f"Duplicate module '{entry.name}' in catalog."
            )
        self._entries.append(entry)

    def mark_loaded(self, name: str) -> bool:
        index = self._index_of(name)
        if index is None:
            return False
        self._entries[index] = dataclasses.replace(
            self._entries[index], loaded=True
        )
        return True

    def entries(self) -> tuple[ModuleCatalogEntry, ...]:
        return tuple(self._entries)

    def lookup(self, name: str) -> Optional[ModuleCatalogEntry]:
        index = self._index_of(name)
        if index is None:
            return None
        return self._entries[index]

    def lookup_strict(self, name: str) -> Optional[ModuleCatalogEntry]:
        entry = self.lookup(name)
        if entry is None or not entry.loaded:
            return None
        return entry

    def promote_to_global(self, name: str) -> bool:
        """
        Flip a module to Global scope. Never reversed.

        Returns False when the module is unknown.
        """
        index = self._index_of(name)
        if index is None:
            return False
        entry = self._entries[index]
        if not entry.is_global:
            self._entries[index] = dataclasses.replace(
                entry, scope=ModuleScope.GLOBAL
            )
        return True

    def _index_of(self, name: str) -> Optional[int]:
        # First match wins, as the loader walks its list
        wanted = name.lower()
        for index, entry in enumerate(self._entries):
            if entry.key() == wanted:
                return index
        return None

    def __len__(self) -> int:
        return len(self._entries)
