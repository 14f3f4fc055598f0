"""
reqmods Config — Entry and Error Models
==========================================
A parsed configuration is a tree of ConfigEntry nodes, each
carrying the file and line it came from so that every
validation finding can point at its source.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple


@dataclass(frozen=True)
class ConfigEntry:
    """
    One directive or block.

    Fields:
        name:     Directive name (may be empty when the source was odd).
        value:    Directive value, None when absent.
        filename: Source file.
        line:     1-based line number of the directive name.
        children: Nested entries for block directives.
    """

    name: str
    value: Optional[str] = None
    filename: str = "<config>"
    line: int = 0
    children: Tuple["ConfigEntry", ...] = field(default_factory=tuple)

    @property
    def location(self) -> str:
        return f"{self.filename}:{self.line}"

    def find(self, name: str) -> Optional["ConfigEntry"]:
        for child in self.children:
            if child.name == name:
                return child
        return None

    def __iter__(self) -> Iterator["ConfigEntry"]:
        return iter(self.children)


@dataclass(frozen=True)
class ConfigError:
    filename: str
    line: int
    message: str

    @classmethod
    def at(cls, entry: ConfigEntry, message: str) -> "ConfigError":
        return cls(filename=entry.filename, line=entry.line, message=message)

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}: {self.message}"
