"""
reqmods Inventory — Public API
=================================
REQMODS wire format, the link-up broadcaster and the
inventory reconciler.
"""

from reqmods.inventory.broadcaster import InventoryBroadcaster, serialize
from reqmods.inventory.reconciler import (
    REASON_MISMATCH,
    REASON_MISSING,
    EntryDecision,
    Finding,
    InventoryReconciler,
    Outcome,
    ReconcileReport,
)
from reqmods.inventory.wire import (
    MAX_MESSAGE_LENGTH,
    MAX_NAME_LENGTH,
    MAX_TOKEN_LENGTH,
    MSG_REQMODS,
    WireInventoryEntry,
    encoded_length,
    format_token,
    parse_message,
    parse_token,
    truncate_encoded,
)

__all__ = [
    # ── Wire ──────────────────────────────────────────────────
    "MSG_REQMODS",
    "MAX_MESSAGE_LENGTH",
    "MAX_NAME_LENGTH",
    "MAX_TOKEN_LENGTH",
    "WireInventoryEntry",
    "format_token",
    "parse_token",
    "parse_message",
    "encoded_length",
    "truncate_encoded",
    # ── Broadcaster ───────────────────────────────────────────
    "InventoryBroadcaster",
    "serialize",
    # ── Reconciler ────────────────────────────────────────────
    "InventoryReconciler",
    "EntryDecision",
    "ReconcileReport",
    "Outcome",
    "Finding",
    "REASON_MISSING",
    "REASON_MISMATCH",
]
