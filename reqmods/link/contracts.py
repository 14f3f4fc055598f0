"""
reqmods Link — Collaborator Contracts
========================================
What this package needs from the server it runs in:

    Notifier       deliver a notice to local or network-wide operators
    LinkTransport  send one protocol line to a peer, or tear the link down

Both are owned by the host. Nothing here frames lines or
touches sockets.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol


class NotifyScope(Enum):
    LOCAL = "LOCAL"      # Operators on this server only
    NETWORK = "NETWORK"  # Operators on every server


@dataclass(frozen=True)
class Peer:
    """
    A link endpoint as seen by the hooks.

    Fields:
        name:      Server name, used in operator notices.
        is_server: False for clients; REQMODS is server-only.
        is_local:  True when the link is directly connected here.
        sid:       Server id, when the host knows it.
    """

    name: str
    is_server: bool = True
    is_local: bool = True
    sid: Optional[str] = None

    def __post_init__(self):
        if not self.name or not isinstance(self.name, str):
            raise ValueError("name must be a non-empty string.")

    @property
    def is_direct_server(self) -> bool:
        return self.is_server and self.is_local


class Notifier(Protocol):
    def notify(self, scope: NotifyScope, message: str) -> None:
        ...


class LinkTransport(Protocol):
    def send(self, peer: Peer, command: str, text: str) -> None:
        """Send one line ':<our id> <command> :<text>' to peer."""
        ...

    def terminate(self, peer: Peer, reason: str) -> None:
        """
        Drop the link and announce it to the network.

        After this call the host delivers nothing more from peer.
        """
        ...
