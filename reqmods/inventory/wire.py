"""
reqmods Inventory — REQMODS Wire Format
==========================================
One message, one trailing parameter, space-separated tokens:

    :<sender id> REQMODS :Gchanfilter:3.2 Lreputation:5.0 ...

Token:  <flag><name>[:<version>]
        flag  'G' Global, 'L' Local (anything else reads as Local)

Bounds:
    token buffer    64 → tokens longer than 63 bytes are cut
    name buffer     64 → '<name>[:<version>]' longer than 63 bytes is cut
                          before the version is split off
    message         transport line (512) minus sender id (63)
                    minus framing (4) minus terminator (1) = 444

All bounds count UTF-8 bytes; cuts never split a character.

Anomalies (no version, cut name, odd flag) never raise; the
reconciler folds them into its decision matrix.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from reqmods.catalog.models import ModuleCatalogEntry, ModuleScope, scope_for_flag

logger = logging.getLogger("reqmods.inventory")

MSG_REQMODS = "REQMODS"

TRANSPORT_LINE_LENGTH = 512
SERVER_NAME_MAX = 63
FRAMING_OVERHEAD = 4  # ':' + ' ' around the prefix, ' :' before the text
MAX_MESSAGE_LENGTH = TRANSPORT_LINE_LENGTH - SERVER_NAME_MAX - FRAMING_OVERHEAD - 1

MAX_TOKEN_LENGTH = 63
MAX_NAME_LENGTH = 63

TOKEN_SEPARATOR = " "
VERSION_SEPARATOR = ":"

WIRE_ENCODING = "utf-8"


def encoded_length(text: str) -> int:
    """Length of text on the wire, in bytes."""
    return len(text.encode(WIRE_ENCODING))


def truncate_encoded(text: str, limit: int) -> str:
    """Cut text to at most limit encoded bytes, never inside a character."""
    data = text.encode(WIRE_ENCODING)
    if len(data) <= limit:
        return text
    return data[:limit].decode(WIRE_ENCODING, errors="ignore")


@dataclass(frozen=True)
class WireInventoryEntry:
    """One module as announced by a peer. Lives for one message."""

    flag: str
    name: str
    version: Optional[str] = None

    @property
    def scope(self) -> ModuleScope:
        return scope_for_flag(self.flag)

    @property
    def is_global(self) -> bool:
        return self.scope == ModuleScope.GLOBAL


def format_token(entry: ModuleCatalogEntry) -> str:
    token = f"{entry.scope_flag}{entry.name}{VERSION_SEPARATOR}{entry.version}"
    return truncate_encoded(token, MAX_TOKEN_LENGTH)


def parse_token(token: str) -> Optional[WireInventoryEntry]:
    """
    Parse one token. Returns None for a token with nothing after
    the flag character.
    """
    if not token:
        return None

    flag = token[0]
    body = truncate_encoded(token[1:], MAX_NAME_LENGTH)
    name, sep, version = body.partition(VERSION_SEPARATOR)
    if not name:
        # Flag-only tokens are dropped, not evaluated as a nameless module
        return None

    return WireInventoryEntry(
        flag=flag,
        name=name,
        version=version if sep else None,
    )


def iter_tokens(text: str) -> List[str]:
    # Runs of spaces collapse; empty tokens never reach the parser
    return [token for token in text.split(TOKEN_SEPARATOR) if token]


def parse_message(text: str) -> List[WireInventoryEntry]:
    """Parse a whole REQMODS parameter, skipping unusable tokens."""
    entries: List[WireInventoryEntry] = []
    for token in iter_tokens(text):
        entry = parse_token(token)
        if entry is None:
            logger.debug(f"Skipping unusable inventory token {token!r}")
            continue
        entries.append(entry)
    return entries
