"""
Manual smoke runner: link two in-memory servers and show what
require-modules does with their inventories.

Usage:
    python scripts/smoke_link.py
    python scripts/smoke_link.py --hub-config hub.conf --leaf-config leaf.conf
"""

from __future__ import annotations

import argparse
import json
import logging

from reqmods.bootstrap import RequireModules
from reqmods.catalog import InMemoryModuleCatalog, ModuleCatalogEntry
from reqmods.config import parse_config, parse_config_file
from reqmods.link import Peer, RecordingNotifier


DEFAULT_HUB_CONFIG = """
require module { name "chanfilter"; };
deny module { name "floodbot"; reason "Flood bots are not allowed here"; };
policy require-modules {
    squit-on-deny yes;
    squit-on-missing no;
    squit-on-mismatch no;
};
"""

DEFAULT_LEAF_CONFIG = """
policy require-modules { squit-on-mismatch no; };
"""


class _LoopbackTransport:
    """Delivers REQMODS lines straight into the other side's handler."""

    def __init__(self, name: str):
        self.name = name
        self.remote: RequireModules | None = None
        self.closed: dict[str, str] = {}

    def send(self, peer: Peer, command: str, text: str) -> None:
        print(f"  {self.name} -> {peer.name}: :{self.name} {command} :{text}")
        if peer.name in self.closed or self.remote is None:
            return
        report = self.remote.on_command(Peer(name=self.name), [text])
        _print_case(f"{peer.name} reconciles {self.name}", report.to_dict())

    def terminate(self, peer: Peer, reason: str) -> None:
        self.closed[peer.name] = reason
        print(f"  {self.name} SQUIT {peer.name} :{reason}")


def _print_case(label: str, payload: dict) -> None:
    print(f"\n[{label}]")
    print(json.dumps(payload, indent=2, sort_keys=True))


def _server(name: str, modules, config_entries):
    catalog = InMemoryModuleCatalog(modules)
    notifier = RecordingNotifier()
    transport = _LoopbackTransport(name)
    module = RequireModules(
        server_name=name,
        catalog=catalog,
        notifier=notifier,
        transport=transport,
    )
    module.load()
    report = module.rehash(config_entries)
    _print_case(
        f"{name} config",
        {
            "applied": report.applied,
            "errors": [str(e) for e in report.errors],
            "policy": module.policy.to_dict(),
        },
    )
    return module, transport, notifier


def run(hub_entries, leaf_entries) -> None:
    hub, hub_link, hub_notices = _server(
        "hub.example.net",
        [
            ModuleCatalogEntry(name="require-modules", version="5.0"),
            ModuleCatalogEntry(name="chanfilter", version="3.2"),
            ModuleCatalogEntry(name="reputation", version="5.0"),
        ],
        hub_entries,
    )
    leaf, leaf_link, leaf_notices = _server(
        "leaf.example.net",
        [
            ModuleCatalogEntry(name="require-modules", version="5.0"),
            ModuleCatalogEntry(name="reputation", version="5.1"),
            ModuleCatalogEntry(name="floodbot", version="0.9"),
        ],
        leaf_entries,
    )
    hub_link.remote = leaf
    leaf_link.remote = hub

    print("\n== link up ==")
    hub.on_server_connect(Peer(name="leaf.example.net"))
    leaf.on_server_connect(Peer(name="hub.example.net"))

    _print_case(
        "operator notices",
        {
            "hub.example.net": [
                [scope.value, text] for scope, text in hub_notices.notices
            ],
            "leaf.example.net": [
                [scope.value, text] for scope, text in leaf_notices.notices
            ],
        },
    )


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--hub-config", help="Config file for the hub.")
    parser.add_argument("--leaf-config", help="Config file for the leaf.")
    parser.add_argument(
        "--verbose", action="store_true", help="Show library logging."
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    hub_entries = (
        parse_config_file(args.hub_config)
        if args.hub_config
        else parse_config(DEFAULT_HUB_CONFIG, filename="hub.conf")
    )
    leaf_entries = (
        parse_config_file(args.leaf_config)
        if args.leaf_config
        else parse_config(DEFAULT_LEAF_CONFIG, filename="leaf.conf")
    )
    run(hub_entries, leaf_entries)


if __name__ == "__main__":
    main()
