"""
reqmods Config — Block Configuration Parser
==============================================
Minimal reader for the host's block configuration syntax, so
deny/require/policy blocks can be supplied as text.

Syntax:
    deny module { name "chanfilter"; reason "banned"; };
    require module { name "bar"; };
    policy require-modules { squit-on-deny yes; };

    name [value] [{ children }] ;
    values:   bare words or "double quoted" (\\" and \\\\ escapes)
    comments: # ..., // ..., /* ... */

Deterministic recursive descent. No eval, no imports.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from reqmods.config.entries import ConfigEntry
from reqmods.exceptions import ConfigSyntaxError


# ══════════════════════════════════════════════════════════════
# TOKENIZER
# ══════════════════════════════════════════════════════════════

WORD = "WORD"
STRING = "STRING"
PUNCT = "PUNCT"

_PUNCTUATION = "{};"

Token = Tuple[str, str, int]  # (kind, text, line)


def _tokenize(text: str, filename: str) -> List[Token]:
    """Split configuration text into (kind, text, line) tokens."""
    tokens: List[Token] = []
    i = 0
    line = 1
    n = len(text)
    while i < n:
        c = text[i]
        if c == "\n":
            line += 1
            i += 1
        elif c.isspace():
            i += 1
        elif c == "#" or text.startswith("//", i):
            while i < n and text[i] != "\n":
                i += 1
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            if end == -1:
                raise ConfigSyntaxError(filename, line, "unterminated comment")
            line += text.count("\n", i, end)
            i = end + 2
        elif c == '"':
            start_line = line
            chars = []
            i += 1
            while True:
                if i >= n:
                    raise ConfigSyntaxError(
                        filename, start_line, "unterminated quoted string"
                    )
                c = text[i]
                if c == "\\" and i + 1 < n and text[i + 1] in '"\\':
                    chars.append(text[i + 1])
                    i += 2
                    continue
                if c == '"':
                    i += 1
                    break
                if c == "\n":
                    line += 1
                chars.append(c)
                i += 1
            tokens.append((STRING, "".join(chars), start_line))
        elif c in _PUNCTUATION:
            tokens.append((PUNCT, c, line))
            i += 1
        else:
            j = i
            while (
                j < n
                and not text[j].isspace()
                and text[j] not in _PUNCTUATION
                and text[j] != '"'
            ):
                j += 1
            tokens.append((WORD, text[i:j], line))
            i = j
    return tokens


# ══════════════════════════════════════════════════════════════
# PARSER (Recursive Descent)
# ══════════════════════════════════════════════════════════════

class _ConfigParser:
    def __init__(self, tokens: List[Token], filename: str):
        self._tokens = tokens
        self._pos = 0
        self._filename = filename

    def _peek(self) -> Optional[Token]:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _consume(self) -> Token:
        tok = self._tokens[self._pos]
        self._pos += 1
        return tok

    def _is_punct(self, tok: Optional[Token], char: str) -> bool:
        return tok is not None and tok[0] == PUNCT and tok[1] == char

    def _error(self, detail: str, line: Optional[int] = None) -> ConfigSyntaxError:
        if line is None:
            tok = self._peek()
            line = tok[2] if tok is not None else self._last_line()
        return ConfigSyntaxError(self._filename, line, detail)

    def _last_line(self) -> int:
        return self._tokens[-1][2] if self._tokens else 1

    def parse(self) -> Tuple[ConfigEntry, ...]:
        entries = self._parse_entries(closing=False)
        if self._peek() is not None:
            raise self._error(f"unexpected '{self._peek()[1]}'")
        return entries

    def _parse_entries(self, closing: bool) -> Tuple[ConfigEntry, ...]:
        """entries: entry* (until '}' when inside a block)"""
        entries = []
        while True:
            tok = self._peek()
            if tok is None:
                if closing:
                    raise self._error("missing '}' at end of block")
                break
            if self._is_punct(tok, "}"):
                if not closing:
                    raise self._error("unexpected '}'")
                break
            if self._is_punct(tok, ";"):
                # Stray separator
                self._consume()
                continue
            entries.append(self._parse_entry())
        return tuple(entries)

    def _parse_entry(self) -> ConfigEntry:
        """entry: name [value] ['{' entries '}'] ';'"""
        kind, name, line = self._consume()
        if kind == PUNCT:
            raise self._error(f"unexpected '{name}'", line)

        value = None
        tok = self._peek()
        if tok is not None and tok[0] in (WORD, STRING):
            value = self._consume()[1]
            tok = self._peek()

        children: Tuple[ConfigEntry, ...] = ()
        if self._is_punct(tok, "{"):
            self._consume()
            children = self._parse_entries(closing=True)
            self._consume()  # '}'
            if self._is_punct(self._peek(), ";"):
                self._consume()
        elif self._is_punct(tok, ";"):
            self._consume()
        else:
            raise self._error(f"missing ';' after '{name}'", line)

        return ConfigEntry(
            name=name,
            value=value,
            filename=self._filename,
            line=line,
            children=children,
        )


def parse_config(text: str, filename: str = "<config>") -> Tuple[ConfigEntry, ...]:
    """
    Parse configuration text into top-level entries.

    Raises:
        ConfigSyntaxError: with filename and line of the problem.
    """
    tokens = _tokenize(text, filename)
    return _ConfigParser(tokens, filename).parse()


def parse_config_file(path: str) -> Tuple[ConfigEntry, ...]:
    with open(path, "r", encoding="utf-8") as fh:
        return parse_config(fh.read(), filename=path)
