"""
reqmods Link - Public API
=========================
"""

from reqmods.link.contracts import (
    LinkTransport,
    Notifier,
    NotifyScope,
    Peer,
)
from reqmods.link.memory import InMemoryLinkTransport, RecordingNotifier

__all__ = [
    "NotifyScope",
    "Peer",
    "Notifier",
    "LinkTransport",
    "RecordingNotifier",
    "InMemoryLinkTransport",
]
