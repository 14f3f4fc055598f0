"""
reqmods Link — In-Memory Collaborators
=========================================
Recording implementations used by tests and the smoke runner.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from reqmods.link.contracts import NotifyScope, Peer


class RecordingNotifier:
    def __init__(self):
        self.notices: List[Tuple[NotifyScope, str]] = []

    def notify(self, scope: NotifyScope, message: str) -> None:
        self.notices.append((scope, message))

    def local(self) -> List[str]:
        return [m for s, m in self.notices if s == NotifyScope.LOCAL]

    def network(self) -> List[str]:
        return [m for s, m in self.notices if s == NotifyScope.NETWORK]


class InMemoryLinkTransport:
    """
    Records sent lines and terminations per peer name.

    Sending to a terminated peer raises, so callers that keep
    talking to a dropped link are caught in tests.
    """

    def __init__(self):
        self.sent: List[Tuple[str, str, str]] = []  # (peer, command, text)
        self.terminated: Dict[str, str] = {}        # peer → reason

    def send(self, peer: Peer, command: str, text: str) -> None:
        if peer.name in self.terminated:
            raise RuntimeError(f"Link to '{peer.name}' is already closed.")
        self.sent.append((peer.name, command, text))

    def terminate(self, peer: Peer, reason: str) -> None:
        if peer.name in self.terminated:
            raise RuntimeError(f"Link to '{peer.name}' is already closed.")
        self.terminated[peer.name] = reason

    def is_linked(self, peer: Peer) -> bool:
        return peer.name not in self.terminated

    def messages_to(self, peer: Peer, command: str) -> List[str]:
        return [
            text
            for name, cmd, text in self.sent
            if name == peer.name and cmd == command
        ]
