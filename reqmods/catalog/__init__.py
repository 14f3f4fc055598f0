"""
reqmods Catalog - Public API
============================
"""

from reqmods.catalog.models import (
    SCOPE_FLAGS,
    ModuleCatalogEntry,
    ModuleScope,
    scope_for_flag,
)
from reqmods.catalog.provider import (
    InMemoryModuleCatalog,
    ModuleCatalog,
)

__all__ = [
    "SCOPE_FLAGS",
    "ModuleScope",
    "ModuleCatalogEntry",
    "scope_for_flag",
    "ModuleCatalog",
    "InMemoryModuleCatalog",
]
