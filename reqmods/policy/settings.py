"""
reqmods Policy — Link Abort Switches
=======================================
Three independent switches, each deciding whether a finding of
its kind aborts the link or only warns operators.

Replaced wholesale on every successful configuration apply.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

SWITCH_SQUIT_ON_DENY = "squit-on-deny"
SWITCH_SQUIT_ON_MISSING = "squit-on-missing"
SWITCH_SQUIT_ON_MISMATCH = "squit-on-mismatch"

VALID_SWITCHES = frozenset({
    SWITCH_SQUIT_ON_DENY,
    SWITCH_SQUIT_ON_MISSING,
    SWITCH_SQUIT_ON_MISMATCH,
})

_YES_VALUES = frozenset({"yes", "true", "on", "1"})


def parse_yes_no(value: str) -> bool:
    """Host yes/no convention: anything not affirmative is 'no'."""
    return value.strip().lower() in _YES_VALUES


@dataclass(frozen=True)
class PolicyConfig:
    squit_on_deny: bool = False
    squit_on_missing: bool = False
    squit_on_mismatch: bool = False

    def with_switches(self, switches: dict[str, str]) -> "PolicyConfig":
        """
        Copy with the given directive → raw value switches applied.
        Switches not named keep their current value.
        """
        fields = {}
        for directive, raw in switches.items():
            if directive not in VALID_SWITCHES:
                raise ValueError(f"Unknown policy switch '{directive}'.")
            fields[directive.replace("-", "_")] = parse_yes_no(raw)
        return replace(self, **fields)

    def to_dict(self) -> dict:
        return {
            SWITCH_SQUIT_ON_DENY: self.squit_on_deny,
            SWITCH_SQUIT_ON_MISSING: self.squit_on_missing,
            SWITCH_SQUIT_ON_MISMATCH: self.squit_on_mismatch,
        }


DEFAULT_POLICY = PolicyConfig()
