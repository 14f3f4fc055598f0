"""
reqmods Policy — Deny Rules and Abort Switches
=================================================
The state the reconciler evaluates against.
Built from configuration, never persisted.
"""

from reqmods.policy.settings import (
    DEFAULT_POLICY,
    SWITCH_SQUIT_ON_DENY,
    SWITCH_SQUIT_ON_MISMATCH,
    SWITCH_SQUIT_ON_MISSING,
    VALID_SWITCHES,
    PolicyConfig,
    parse_yes_no,
)
from reqmods.policy.store import (
    DEFAULT_DENY_REASON,
    DeniedModuleRule,
    PolicyStore,
)

__all__ = [
    # ── Store ─────────────────────────────────────────────────
    "DEFAULT_DENY_REASON",
    "DeniedModuleRule",
    "PolicyStore",
    # ── Switches ──────────────────────────────────────────────
    "DEFAULT_POLICY",
    "PolicyConfig",
    "SWITCH_SQUIT_ON_DENY",
    "SWITCH_SQUIT_ON_MISSING",
    "SWITCH_SQUIT_ON_MISMATCH",
    "VALID_SWITCHES",
    "parse_yes_no",
]
