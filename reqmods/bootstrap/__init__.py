"""
reqmods Bootstrap — Host Wiring
==================================
"""

from reqmods.bootstrap.module import MODULE_HEADER, ModuleHeader, RequireModules

__all__ = [
    "MODULE_HEADER",
    "ModuleHeader",
    "RequireModules",
]
