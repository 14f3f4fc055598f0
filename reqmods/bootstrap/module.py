"""
reqmods Bootstrap — Module Lifecycle
=======================================
Wires the policy state, the config loader, the broadcaster and
the reconciler into the hooks a host server calls.

Host hook             → method
    module load       → load()
    config test pass  → config_test(entries)
    config run pass   → config_run(report)
    rehash            → rehash(entries)
    module unload     → unload()
    server connect    → on_server_connect(peer)
    REQMODS received  → on_command(peer, params)

All hooks run on the host's single event thread. Nothing here
blocks, spawns or locks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from reqmods.catalog.provider import ModuleCatalog
from reqmods.config.entries import ConfigEntry
from reqmods.config.loader import ConfigLoader, ConfigReport
from reqmods.inventory.broadcaster import InventoryBroadcaster
from reqmods.inventory.reconciler import InventoryReconciler, ReconcileReport
from reqmods.inventory.wire import MAX_MESSAGE_LENGTH, MSG_REQMODS
from reqmods.link.contracts import LinkTransport, Notifier, Peer
from reqmods.policy.settings import PolicyConfig
from reqmods.policy.store import PolicyStore

logger = logging.getLogger("reqmods.bootstrap")


@dataclass(frozen=True)
class ModuleHeader:
    name: str
    version: str
    description: str
    author: str


MODULE_HEADER = ModuleHeader(
    name="require-modules",
    version="5.0",
    description="Check for required modules across the network",
    author="reqmods",
)


class RequireModules:
    """
    One instance per running server.

    Usage:
        module = RequireModules(
            server_name="hub.example.net",
            catalog=catalog,
            notifier=notifier,
            transport=transport,
        )
        module.load()
        module.rehash(parse_config(text))
        module.on_server_connect(peer)
        module.on_command(peer, ["Gfoo:1.0 Lbar:2.0"])
    """

    header = MODULE_HEADER
    command = MSG_REQMODS

    def __init__(
        self,
        server_name: str,
        catalog: ModuleCatalog,
        notifier: Notifier,
        transport: LinkTransport,
        max_length: int = MAX_MESSAGE_LENGTH,
    ):
        self._catalog = catalog
        self.store = PolicyStore()
        self.loader = ConfigLoader(catalog=catalog, store=self.store)
        self.broadcaster = InventoryBroadcaster(
            catalog=catalog,
            transport=transport,
            max_length=max_length,
        )
        self.reconciler = InventoryReconciler(
            server_name=server_name,
            catalog=catalog,
            store=self.store,
            notifier=notifier,
            transport=transport,
        )

    @property
    def policy(self) -> PolicyConfig:
        return self.loader.policy

    # ══════════════════════════════════════════════════════════
    # LIFECYCLE
    # ══════════════════════════════════════════════════════════

    def load(self) -> None:
        # This module is itself required network-wide
        if self._catalog.promote_to_global(self.header.name):
            logger.info(
                f"Module {self.header.name} {self.header.version} loaded "
                f"(global)"
            )
        else:
            logger.info(
                f"Module {self.header.name} {self.header.version} loaded "
                f"(not listed in catalog)"
            )

    def unload(self) -> None:
        self.store.clear()
        self.loader.reset_policy()
        logger.info(f"Module {self.header.name} unloaded")

    # ══════════════════════════════════════════════════════════
    # CONFIGURATION
    # ══════════════════════════════════════════════════════════

    def test(self) -> None:
        """Start of a configuration pass: switches go back to defaults."""
        self.loader.reset_policy()

    def config_test(self, entries: Iterable[ConfigEntry]) -> ConfigReport:
        return self.loader.validate(entries)

    def config_run(self, report: ConfigReport) -> ConfigReport:
        return self.loader.apply(report)

    def rehash(
        self, entries: Iterable[ConfigEntry], strict: bool = False
    ) -> ConfigReport:
        """Full reload. A rejected pass keeps the previous rules."""
        return self.loader.load(entries, strict=strict)

    # ══════════════════════════════════════════════════════════
    # LINK HOOKS
    # ══════════════════════════════════════════════════════════

    def on_server_connect(self, peer: Peer) -> List[str]:
        return self.broadcaster.broadcast(peer)

    def on_command(
        self, peer: Peer, params: Sequence[str]
    ) -> ReconcileReport:
        """REQMODS handler. params[0] is the trailing parameter."""
        message: Optional[str] = params[0] if params else None
        return self.reconciler.reconcile(peer, message, policy=self.policy)
