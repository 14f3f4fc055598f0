"""
reqmods Inventory — Reconciler (Decision Matrix)
===================================================
Evaluates a peer's REQMODS inventory against local policy.

Decision matrix, per entry, in message order:

    denied by a deny rule          → LOCAL notice
                                     squit-on-deny:     abort (rule reason)
    not fully loaded here, 'G'     → NETWORK notice
                                     squit-on-missing:  abort
    not fully loaded here, 'L'     → nothing
    loaded, version absent/differs → LOCAL notice
                                     squit-on-mismatch: abort
    loaded, version equal          → nothing

Version equality is exact and case-insensitive.

Outcome per entry: CONTINUE | WARNED | TERMINATE.
The first TERMINATE ends processing of the message; the link
is being torn down, so nothing after it matters.

decide() is pure. reconcile() performs the notices and the abort.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from reqmods.catalog.provider import ModuleCatalog
from reqmods.inventory.wire import WireInventoryEntry, parse_message
from reqmods.link.contracts import LinkTransport, Notifier, NotifyScope, Peer
from reqmods.policy.settings import PolicyConfig
from reqmods.policy.store import PolicyStore

logger = logging.getLogger("reqmods.inventory")

REASON_MISSING = "Missing globally required module"
REASON_MISMATCH = "Module version mismatch"

NO_VERSION = "(none)"


class Outcome(Enum):
    CONTINUE = "CONTINUE"
    WARNED = "WARNED"
    TERMINATE = "TERMINATE"


class Finding(Enum):
    """What the matrix found for an entry. None when nothing."""

    DENIED = "DENIED"
    MISSING = "MISSING"
    MISMATCH = "MISMATCH"


# ══════════════════════════════════════════════════════════════
# DECISIONS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class EntryDecision:
    """
    Fields:
        entry:        The inventory entry evaluated.
        outcome:      CONTINUE | WARNED | TERMINATE.
        finding:      DENIED | MISSING | MISMATCH, or None.
        notices:      (scope, message) pairs to deliver, in order.
        abort_reason: Link abort reason when outcome is TERMINATE.
    """

    entry: WireInventoryEntry
    outcome: Outcome
    finding: Optional[Finding] = None
    notices: Tuple[Tuple[NotifyScope, str], ...] = field(default_factory=tuple)
    abort_reason: Optional[str] = None

    def __post_init__(self):
        if self.outcome == Outcome.TERMINATE and not self.abort_reason:
            raise ValueError("TERMINATE requires an abort_reason.")


@dataclass(frozen=True)
class ReconcileReport:
    peer: str
    decisions: Tuple[EntryDecision, ...] = field(default_factory=tuple)
    ignored: bool = False
    terminated: bool = False
    abort_reason: Optional[str] = None

    @property
    def warnings(self) -> List[EntryDecision]:
        return [d for d in self.decisions if d.outcome == Outcome.WARNED]

    @property
    def entries_evaluated(self) -> int:
        return len(self.decisions)

    def to_dict(self) -> dict:
        return {
            "peer": self.peer,
            "ignored": self.ignored,
            "terminated": self.terminated,
            "abort_reason": self.abort_reason,
            "entries_evaluated": self.entries_evaluated,
            "warn_count": len(self.warnings),
            "details": [
                {
                    "name": d.entry.name,
                    "flag": d.entry.flag,
                    "version": d.entry.version,
                    "outcome": d.outcome.value,
                    "finding": d.finding.value if d.finding else None,
                }
                for d in self.decisions
            ],
        }


# ══════════════════════════════════════════════════════════════
# RECONCILER
# ══════════════════════════════════════════════════════════════

class InventoryReconciler:
    """
    Usage:
        reconciler = InventoryReconciler(
            server_name="hub.example.net",
            catalog=catalog,
            store=store,
            notifier=notifier,
            transport=transport,
        )
        report = reconciler.reconcile(peer, parv1, policy=loader.policy)
    """

    def __init__(
        self,
        server_name: str,
        catalog: ModuleCatalog,
        store: PolicyStore,
        notifier: Notifier,
        transport: LinkTransport,
    ):
        self._server_name = server_name
        self._catalog = catalog
        self._store = store
        self._notifier = notifier
        self._transport = transport

    def _aborting(self, peer: Peer, reason: Optional[str] = None) -> str:
        text = f"ABORTING LINK: {self._server_name} <=> {peer.name}"
        if reason is not None:
            text += f" (reason: {reason})"
        return text

    def decide(
        self,
        peer: Peer,
        entry: WireInventoryEntry,
        policy: PolicyConfig,
    ) -> EntryDecision:
        """Run one entry through the matrix. No side effects."""

        # ── Deny rules apply whatever the peer's scope flag ───
        rule = self._store.find_deny_rule(entry.name)
        if rule is not None:
            notices = [(
                NotifyScope.LOCAL,
                f"Server {peer.name} is using module '{entry.name}' which "
                f"is specified in a deny module {{ }} config block "
                f"(reason: {rule.reason})",
            )]
            if policy.squit_on_deny:
                notices.append(
                    (NotifyScope.NETWORK, self._aborting(peer, rule.reason))
                )
                return EntryDecision(
                    entry=entry,
                    outcome=Outcome.TERMINATE,
                    finding=Finding.DENIED,
                    notices=tuple(notices),
                    abort_reason=rule.reason,
                )
            return EntryDecision(
                entry=entry,
                outcome=Outcome.WARNED,
                finding=Finding.DENIED,
                notices=tuple(notices),
            )

        # ── Strict lookup: half-loaded counts as missing ──────
        local = self._catalog.lookup_strict(entry.name)
        if local is None:
            if not entry.is_global:
                return EntryDecision(entry=entry, outcome=Outcome.CONTINUE)

            # Only the server lacking the module notices, so tell everyone
            notices = [(
                NotifyScope.NETWORK,
                f"Globally required module '{entry.name}' wasn't (fully) "
                f"loaded or is missing entirely",
            )]
            if policy.squit_on_missing:
                notices.append((NotifyScope.NETWORK, self._aborting(peer)))
                return EntryDecision(
                    entry=entry,
                    outcome=Outcome.TERMINATE,
                    finding=Finding.MISSING,
                    notices=tuple(notices),
                    abort_reason=REASON_MISSING,
                )
            return EntryDecision(
                entry=entry,
                outcome=Outcome.WARNED,
                finding=Finding.MISSING,
                notices=tuple(notices),
            )

        # ── Version check, Local modules included ─────────────
        if entry.version is None or (
            local.version.lower() != entry.version.lower()
        ):
            theirs = NO_VERSION if entry.version is None else entry.version
            # Both ends report a mismatch, so a local notice suffices
            notices = [(
                NotifyScope.LOCAL,
                f"Version mismatch for module '{entry.name}' "
                f"(ours: {local.version}, theirs: {theirs})",
            )]
            if policy.squit_on_mismatch:
                notices.append((NotifyScope.NETWORK, self._aborting(peer)))
                return EntryDecision(
                    entry=entry,
                    outcome=Outcome.TERMINATE,
                    finding=Finding.MISMATCH,
                    notices=tuple(notices),
                    abort_reason=REASON_MISMATCH,
                )
            return EntryDecision(
                entry=entry,
                outcome=Outcome.WARNED,
                finding=Finding.MISMATCH,
                notices=tuple(notices),
            )

        return EntryDecision(entry=entry, outcome=Outcome.CONTINUE)

    def reconcile(
        self,
        peer: Peer,
        message: Optional[str],
        policy: PolicyConfig,
    ) -> ReconcileReport:
        """
        Handle one REQMODS parameter from peer.

        Never raises on malformed input. Stops at the first abort.
        """
        if not peer.is_direct_server:
            logger.debug(
                f"Ignoring {peer.name} inventory: not a directly linked server"
            )
            return ReconcileReport(peer=peer.name, ignored=True)

        if not message:
            logger.debug(f"Ignoring empty inventory from {peer.name}")
            return ReconcileReport(peer=peer.name, ignored=True)

        decisions: List[EntryDecision] = []
        for entry in parse_message(message):
            decision = self.decide(peer, entry, policy)
            decisions.append(decision)

            for scope, text in decision.notices:
                self._notifier.notify(scope, text)

            if decision.outcome == Outcome.TERMINATE:
                logger.warning(
                    f"Aborting link to {peer.name}: {decision.abort_reason} "
                    f"(module '{entry.name}', {decision.finding})"
                )
                self._transport.terminate(peer, decision.abort_reason)
                return ReconcileReport(
                    peer=peer.name,
                    decisions=tuple(decisions),
                    terminated=True,
                    abort_reason=decision.abort_reason,
                )

            logger.debug(
                f"{peer.name} module '{entry.name}' "
                f"[{entry.flag}] → {decision.outcome.value}"
            )

        return ReconcileReport(peer=peer.name, decisions=tuple(decisions))
