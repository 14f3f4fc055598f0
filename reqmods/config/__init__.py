"""
reqmods Config — Public API
==============================
deny module { }, require module { } and policy require-modules { }
blocks: parsing, validation and application.
"""

from reqmods.config.entries import ConfigEntry, ConfigError
from reqmods.config.handlers import (
    DEFAULT_HANDLERS,
    ApplyContext,
    BlockHandler,
    BlockKind,
    DenyModuleHandler,
    PolicySwitchHandler,
    RequireModuleHandler,
    classify_blocks,
)
from reqmods.config.loader import ConfigLoader, ConfigReport
from reqmods.config.parser import parse_config, parse_config_file

__all__ = [
    "ConfigEntry",
    "ConfigError",
    "BlockKind",
    "BlockHandler",
    "ApplyContext",
    "DenyModuleHandler",
    "RequireModuleHandler",
    "PolicySwitchHandler",
    "DEFAULT_HANDLERS",
    "classify_blocks",
    "ConfigLoader",
    "ConfigReport",
    "parse_config",
    "parse_config_file",
]
