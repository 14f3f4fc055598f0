"""
reqmods Catalog — Immutable Models
=====================================
Read-only view of one module known to the local module loader.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ModuleScope(Enum):
    LOCAL = "LOCAL"    # Tolerated when absent on a peer
    GLOBAL = "GLOBAL"  # Expected on every server of the network


SCOPE_FLAGS = {
    ModuleScope.GLOBAL: "G",
    ModuleScope.LOCAL: "L",
}


def scope_for_flag(flag: str) -> ModuleScope:
    """Only 'G' means Global; any other flag character reads as Local."""
    if flag == SCOPE_FLAGS[ModuleScope.GLOBAL]:
        return ModuleScope.GLOBAL
    return ModuleScope.LOCAL


@dataclass(frozen=True)
class ModuleCatalogEntry:
    name: str
    version: str
    scope: ModuleScope = ModuleScope.LOCAL
    loaded: bool = True

    def __post_init__(self):
        if not self.name or not isinstance(self.name, str):
            raise ValueError("name must be a non-empty string.")

        if not isinstance(self.version, str):
            raise ValueError("version must be a string.")

        if not isinstance(self.scope, ModuleScope):
            raise ValueError(
                f"scope '{self.scope}' not valid. "
                f"Must be one of: {sorted(s.value for s in ModuleScope)}"
            )

    @property
    def is_global(self) -> bool:
        return self.scope == ModuleScope.GLOBAL

    @property
    def scope_flag(self) -> str:
        return SCOPE_FLAGS[self.scope]

    def key(self) -> str:
        return self.name.lower()
