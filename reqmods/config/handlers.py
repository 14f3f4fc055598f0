"""
reqmods Config — Block Handlers (Two-Phase)
==============================================
One handler per block kind:

    DENY     deny module { name; reason; }
    REQUIRE  require module { name; }
    POLICY   policy require-modules { squit-on-*; }
             (also set { require-modules { ... }; })

Every handler exposes:
    validate(entry, catalog) → list[ConfigError]   (no side effects)
    apply(entry, context)    → bool                (only after a clean pass)

Validation is replayable. Apply is never reached by a block
whose pass reported errors; the loader guarantees that.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from reqmods.catalog.provider import ModuleCatalog
from reqmods.config.entries import ConfigEntry, ConfigError
from reqmods.policy.settings import DEFAULT_POLICY, VALID_SWITCHES, PolicyConfig
from reqmods.policy.store import PolicyStore

logger = logging.getLogger("reqmods.config")


class BlockKind(Enum):
    DENY = "DENY"
    REQUIRE = "REQUIRE"
    POLICY = "POLICY"


@dataclass
class ApplyContext:
    """Targets mutated while a validated configuration is applied."""

    catalog: ModuleCatalog
    store: PolicyStore
    policy: PolicyConfig = field(default=DEFAULT_POLICY)


# ══════════════════════════════════════════════════════════════
# HANDLER CONTRACT
# ══════════════════════════════════════════════════════════════

class BlockHandler(ABC):
    kind: BlockKind
    label: str = ""

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if getattr(cls, "__abstractmethods__", None):
            return
        if not isinstance(getattr(cls, "kind", None), BlockKind):
            raise TypeError(
                f"Handler class {cls.__name__} must declare kind as BlockKind."
            )
        if not cls.label:
            raise TypeError(
                f"Handler class {cls.__name__} must declare a label."
            )

    @abstractmethod
    def validate(
        self, entry: ConfigEntry, catalog: ModuleCatalog
    ) -> List[ConfigError]:
        ...

    @abstractmethod
    def apply(self, entry: ConfigEntry, context: ApplyContext) -> bool:
        ...

    def _check_directive(
        self, child: ConfigEntry, errors: List[ConfigError]
    ) -> bool:
        """Blank directive / blank value checks shared by every block."""
        if not child.name:
            errors.append(
                ConfigError.at(child, f"blank directive for {self.label} block")
            )
            return False

        if not child.value:
            errors.append(
                ConfigError.at(
                    child,
                    f"blank {child.name} without value for {self.label} block",
                )
            )
            return False

        return True

    def _unknown(self, child: ConfigEntry) -> ConfigError:
        return ConfigError.at(
            child, f"unknown directive {child.name} for {self.label} block"
        )

    def _missing_name(self, entry: ConfigEntry) -> ConfigError:
        return ConfigError.at(
            entry,
            f"missing required 'name' directive for {self.label} block",
        )


# ══════════════════════════════════════════════════════════════
# deny module { }
# ══════════════════════════════════════════════════════════════

class DenyModuleHandler(BlockHandler):
    kind = BlockKind.DENY
    label = "deny module { }"

    def validate(
        self, entry: ConfigEntry, catalog: ModuleCatalog
    ) -> List[ConfigError]:
        errors: List[ConfigError] = []
        has_name = False

        for child in entry:
            if not self._check_directive(child, errors):
                continue

            if child.name == "name":
                # Loose check: the module may not be fully loaded yet
                if catalog.lookup(child.value) is not None:
                    errors.append(
                        ConfigError.at(
                            child,
                            f"Module '{child.value}' was specified as "
                            "denied but we've actually loaded it ourselves",
                        )
                    )
                has_name = True
                continue

            if child.name == "reason":
                continue

            errors.append(self._unknown(child))

        if not has_name:
            errors.append(self._missing_name(entry))

        return errors

    def apply(self, entry: ConfigEntry, context: ApplyContext) -> bool:
        name: Optional[str] = None
        reason: Optional[str] = None
        for child in entry:
            if child.name == "name":
                name = child.value
            elif child.name == "reason":
                reason = child.value

        context.store.add_deny_rule(name, reason)
        return True


# ══════════════════════════════════════════════════════════════
# require module { }
# ══════════════════════════════════════════════════════════════

class RequireModuleHandler(BlockHandler):
    kind = BlockKind.REQUIRE
    label = "require module { }"

    def validate(
        self, entry: ConfigEntry, catalog: ModuleCatalog
    ) -> List[ConfigError]:
        errors: List[ConfigError] = []
        has_name = False

        for child in entry:
            if not self._check_directive(child, errors):
                continue

            if child.name == "name":
                if catalog.lookup(child.value) is None:
                    errors.append(
                        ConfigError.at(
                            child,
                            f"Module '{child.value}' was specified as "
                            "required but we didn't even load it ourselves "
                            "(maybe double check the name?)",
                        )
                    )
                has_name = True
                continue

            # reason is not accepted here either
            errors.append(self._unknown(child))

        if not has_name:
            errors.append(self._missing_name(entry))

        return errors

    def apply(self, entry: ConfigEntry, context: ApplyContext) -> bool:
        for child in entry:
            if child.name != "name":
                continue

            if not context.catalog.promote_to_global(child.value):
                logger.error(
                    f"{child.location}: [BUG?] require module "
                    f"'{child.value}' passed validation but is missing "
                    f"from the module catalog at apply time"
                )
                continue

            logger.info(f"Module '{child.value}' is now globally required")

        return True


# ══════════════════════════════════════════════════════════════
# policy require-modules { }
# ══════════════════════════════════════════════════════════════

class PolicySwitchHandler(BlockHandler):
    kind = BlockKind.POLICY
    label = "policy require-modules { }"

    def validate(
        self, entry: ConfigEntry, catalog: ModuleCatalog
    ) -> List[ConfigError]:
        errors: List[ConfigError] = []

        for child in entry:
            if not self._check_directive(child, errors):
                continue

            if child.name in VALID_SWITCHES:
                continue

            errors.append(self._unknown(child))

        return errors

    def apply(self, entry: ConfigEntry, context: ApplyContext) -> bool:
        switches: Dict[str, str] = {}
        for child in entry:
            if child.name in VALID_SWITCHES:
                switches[child.name] = child.value

        context.policy = context.policy.with_switches(switches)
        return True


DEFAULT_HANDLERS = (
    DenyModuleHandler(),
    RequireModuleHandler(),
    PolicySwitchHandler(),
)


def classify_blocks(entries) -> List[tuple[BlockKind, ConfigEntry]]:
    """
    Pick the blocks addressed to this module, in file order.

    Other blocks (deny channel { }, set::other, ...) belong to
    other consumers and are skipped.
    """
    blocks: List[tuple[BlockKind, ConfigEntry]] = []
    for entry in entries:
        if entry.name == "deny" and entry.value == "module":
            blocks.append((BlockKind.DENY, entry))
        elif entry.name == "require" and entry.value == "module":
            blocks.append((BlockKind.REQUIRE, entry))
        elif entry.name == "policy" and entry.value == "require-modules":
            blocks.append((BlockKind.POLICY, entry))
        elif entry.name == "set":
            for child in entry:
                if child.name == "require-modules":
                    blocks.append((BlockKind.POLICY, child))
    return blocks
