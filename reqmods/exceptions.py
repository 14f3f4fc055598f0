"""
reqmods — Exceptions
=======================
Structured errors for configuration handling.

These are engine-internal errors, NOT policy outcomes.
Link aborts flow through EntryDecision → ReconcileReport.
"""

from __future__ import annotations

from typing import Sequence


class ReqModsError(Exception):
    """Base error for require-modules operations."""
    pass


class ConfigSyntaxError(ReqModsError):
    """Configuration text could not be parsed."""

    def __init__(self, filename: str, line: int, detail: str):
        self.filename = filename
        self.line = line
        self.detail = detail
        super().__init__(f"{filename}:{line}: {detail}")


class ConfigRejectedError(ReqModsError):
    """Validation reported errors; nothing was applied."""

    def __init__(self, errors: Sequence):
        self.errors = tuple(errors)
        super().__init__(
            f"Configuration rejected with {len(self.errors)} error(s)."
        )


class ConfigurationNotValidatedError(ReqModsError):
    """Apply was attempted without a clean validation pass."""

    def __init__(self, error_count: int):
        self.error_count = error_count
        super().__init__(
            "Configuration apply refused: validation reported "
            f"{error_count} error(s)."
        )
