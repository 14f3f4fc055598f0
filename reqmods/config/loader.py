"""
reqmods Config — Two-Phase Loader
====================================
Runs a complete configuration pass for the require-modules blocks.

Flow:
    1. Classify blocks (deny / require / policy)
    2. Validate every block, collect ConfigErrors with file:line
    3. Any error → reject the whole pass, keep the active state
    4. Zero errors → clear the store, reset switches, apply each block
    5. Publish the new PolicyConfig

Apply is NEVER invoked for a pass that reported errors.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, Optional, Sequence, Tuple

from reqmods.catalog.provider import ModuleCatalog
from reqmods.config.entries import ConfigEntry, ConfigError
from reqmods.config.handlers import (
    DEFAULT_HANDLERS,
    ApplyContext,
    BlockHandler,
    BlockKind,
    classify_blocks,
)
from reqmods.exceptions import (
    ConfigRejectedError,
    ConfigurationNotValidatedError,
)
from reqmods.policy.settings import DEFAULT_POLICY, PolicyConfig
from reqmods.policy.store import PolicyStore

logger = logging.getLogger("reqmods.config")


@dataclass(frozen=True)
class ConfigReport:
    """
    Outcome of one configuration pass.

    Fields:
        errors:  Every finding of the validate phase, in file order.
        blocks:  The classified blocks that were considered.
        applied: True only when the apply phase ran.
        policy:  Switches in effect after the pass.
    """

    errors: Tuple[ConfigError, ...] = field(default_factory=tuple)
    blocks: Tuple[Tuple[BlockKind, ConfigEntry], ...] = field(
        default_factory=tuple
    )
    applied: bool = False
    policy: Optional[PolicyConfig] = None

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def ok(self) -> bool:
        return not self.errors


class ConfigLoader:
    """
    Owns the validate/apply sequencing for one PolicyStore.

    Usage:
        loader = ConfigLoader(catalog=catalog, store=store)
        report = loader.load(parse_config(text))
        if report.applied:
            policy = loader.policy
    """

    def __init__(
        self,
        catalog: ModuleCatalog,
        store: PolicyStore,
        handlers: Sequence[BlockHandler] = DEFAULT_HANDLERS,
    ):
        self._catalog = catalog
        self._store = store
        self._handlers: Dict[BlockKind, BlockHandler] = {}
        for handler in handlers:
            if handler.kind in self._handlers:
                raise ValueError(
                    f"Duplicate handler for block kind {handler.kind.value}."
                )
            self._handlers[handler.kind] = handler
        self._policy = DEFAULT_POLICY

    @property
    def policy(self) -> PolicyConfig:
        return self._policy

    def reset_policy(self) -> None:
        """Start-of-pass reset: every switch back to 'no'."""
        self._policy = DEFAULT_POLICY

    # ══════════════════════════════════════════════════════════
    # PHASE 1: VALIDATE
    # ══════════════════════════════════════════════════════════

    def validate(self, entries: Iterable[ConfigEntry]) -> ConfigReport:
        blocks = tuple(
            (kind, entry)
            for kind, entry in classify_blocks(entries)
            if kind in self._handlers
        )

        errors = []
        for kind, entry in blocks:
            block_errors = self._handlers[kind].validate(entry, self._catalog)
            for error in block_errors:
                logger.error(str(error))
            errors.extend(block_errors)

        return ConfigReport(
            errors=tuple(errors),
            blocks=blocks,
            policy=self._policy,
        )

    # ══════════════════════════════════════════════════════════
    # PHASE 2: APPLY
    # ══════════════════════════════════════════════════════════

    def apply(self, report: ConfigReport) -> ConfigReport:
        if not report.ok:
            raise ConfigurationNotValidatedError(report.error_count)

        context = ApplyContext(
            catalog=self._catalog,
            store=self._store,
            policy=DEFAULT_POLICY,
        )
        self._store.clear()

        for kind, entry in report.blocks:
            self._handlers[kind].apply(entry, context)

        self._policy = context.policy
        logger.info(
            f"require-modules configuration applied: "
            f"{len(self._store)} deny rule(s), policy={self._policy.to_dict()}"
        )
        return replace(report, applied=True, policy=self._policy)

    # ══════════════════════════════════════════════════════════
    # FULL PASS
    # ══════════════════════════════════════════════════════════

    def load(
        self, entries: Iterable[ConfigEntry], strict: bool = False
    ) -> ConfigReport:
        """
        Validate, then apply only if the whole pass is clean.

        A rejected pass leaves the store and switches untouched.
        With strict=True a rejected pass raises ConfigRejectedError.
        """
        report = self.validate(entries)
        if not report.ok:
            logger.error(
                f"require-modules configuration rejected: "
                f"{report.error_count} error(s)"
            )
            if strict:
                raise ConfigRejectedError(report.errors)
            return report

        return self.apply(report)
