"""
reqmods Inventory — Broadcaster
==================================
Dumps the whole local module catalog to a newly linked peer.

Every module is sent, Global or Local, loaded or not, so the
peer can apply its deny rules to anything we carry.

Packing:
    tokens in catalog order, space-separated, greedy;
    a message is flushed when the next token would push it past
    max_length bytes; the remainder is flushed at the end.

Only the side that owns the physical connection broadcasts.
A hub introducing servers behind it does not re-send for them.
"""

from __future__ import annotations

import logging
from typing import Iterable, List

from reqmods.catalog.models import ModuleCatalogEntry
from reqmods.catalog.provider import ModuleCatalog
from reqmods.inventory.wire import (
    MAX_MESSAGE_LENGTH,
    MAX_TOKEN_LENGTH,
    MSG_REQMODS,
    TOKEN_SEPARATOR,
    encoded_length,
    format_token,
)
from reqmods.link.contracts import LinkTransport, Peer

logger = logging.getLogger("reqmods.inventory")


def serialize(
    entries: Iterable[ModuleCatalogEntry],
    max_length: int = MAX_MESSAGE_LENGTH,
) -> List[str]:
    """
    Pack catalog entries into the fewest messages of at most
    max_length encoded bytes, preserving order.
    """
    if max_length < MAX_TOKEN_LENGTH:
        raise ValueError(
            f"max_length {max_length} cannot hold a full token "
            f"({MAX_TOKEN_LENGTH})."
        )

    messages: List[str] = []
    buffer: List[str] = []
    length = 0

    for entry in entries:
        token = format_token(entry)
        size = encoded_length(token)
        needed = size + (len(TOKEN_SEPARATOR) if buffer else 0)
        if buffer and length + needed > max_length:
            messages.append(TOKEN_SEPARATOR.join(buffer))
            buffer = []
            length = 0
            needed = size

        buffer.append(token)
        length += needed

    if buffer:
        messages.append(TOKEN_SEPARATOR.join(buffer))

    return messages


class InventoryBroadcaster:
    """
    Usage:
        broadcaster = InventoryBroadcaster(catalog, transport)
        broadcaster.broadcast(peer)   # on link-up
    """

    def __init__(
        self,
        catalog: ModuleCatalog,
        transport: LinkTransport,
        max_length: int = MAX_MESSAGE_LENGTH,
    ):
        if max_length < MAX_TOKEN_LENGTH:
            raise ValueError(
                f"max_length {max_length} cannot hold a full token "
                f"({MAX_TOKEN_LENGTH})."
            )
        self._catalog = catalog
        self._transport = transport
        self._max_length = max_length

    def broadcast(self, peer: Peer) -> List[str]:
        """
        Send the inventory to peer. Returns the messages sent;
        empty when peer is not directly connected here.
        """
        if not peer.is_local:
            logger.debug(
                f"Skipping inventory for '{peer.name}': not directly linked"
            )
            return []

        messages = serialize(self._catalog.entries(), self._max_length)
        for text in messages:
            self._transport.send(peer, MSG_REQMODS, text)

        logger.info(
            f"Sent module inventory to '{peer.name}': "
            f"{len(self._catalog.entries())} module(s) in "
            f"{len(messages)} message(s)"
        )
        return messages
