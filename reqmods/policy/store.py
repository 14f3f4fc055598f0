"""
reqmods Policy — Deny Rule Store
===================================
Holds deny module { } rules keyed by lowercase module name.

Lifecycle:
    1. Built when configuration is applied
    2. Read by the reconciler for every inventory token
    3. Cleared on unload and before every reload

No persistence. A restart rebuilds it from configuration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

logger = logging.getLogger("reqmods.policy")

DEFAULT_DENY_REASON = "A forbidden module is being used"


@dataclass(frozen=True)
class DeniedModuleRule:
    """
    A module that must not be loaded anywhere on a linked peer.

    Fields:
        name:   Module name as configured (matching is case-insensitive).
        reason: Operator-facing reason, also used as the abort reason.
    """

    name: str
    reason: str = DEFAULT_DENY_REASON

    def __post_init__(self):
        if not self.name or not isinstance(self.name, str):
            raise ValueError("name must be a non-empty string.")

        if not self.reason or not isinstance(self.reason, str):
            raise ValueError("reason must be a non-empty string.")

    def key(self) -> str:
        return self.name.lower()


class PolicyStore:
    """
    Case-insensitive collection of DeniedModuleRule.

    Usage:
        store = PolicyStore()
        store.add_deny_rule("chanfilter", "banned")
        store.find_deny_rule("ChanFilter")  # → DeniedModuleRule
        store.clear()
    """

    def __init__(self):
        self._rules: Dict[str, DeniedModuleRule] = {}

    def add_deny_rule(
        self, name: str, reason: Optional[str] = None
    ) -> DeniedModuleRule:
        """Insert or overwrite; an empty reason falls back to the default."""
        rule = DeniedModuleRule(
            name=name,
            reason=reason if reason else DEFAULT_DENY_REASON,
        )
        if rule.key() in self._rules:
            logger.debug(f"Deny rule for '{name}' overwritten")
        self._rules[rule.key()] = rule
        logger.info(f"Deny rule added: '{rule.name}' (reason: {rule.reason})")
        return rule

    def find_deny_rule(self, name: str) -> Optional[DeniedModuleRule]:
        return self._rules.get(name.lower())

    def clear(self) -> None:
        count = len(self._rules)
        self._rules.clear()
        if count:
            logger.info(f"Policy store cleared: {count} deny rule(s) dropped")

    def rules(self) -> List[DeniedModuleRule]:
        """All rules, sorted by key."""
        return [self._rules[key] for key in sorted(self._rules)]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._rules

    def __len__(self) -> int:
        return len(self._rules)
