"""Split a template buffer into host-code and literal runs.

Host code is written between ``<?py`` (followed by whitespace) and ``?>``.
Code regions are passed through the compiler byte-for-byte; only literal
regions are candidates for directive and echo rewriting.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

CODE_OPEN = "<?py"
CODE_CLOSE = "?>"

_OPEN_RE = re.compile(r"<\?py(?=\s)")
_TRIPLE_QUOTES = ('"""', "'''")


class TokenKind(str, Enum):
    CODE = "code"
    LITERAL = "literal"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    offset: int = 0

    @property
    def is_code(self) -> bool:
        return self.kind is TokenKind.CODE


def find_code_end(buffer: str, start: int) -> int:
    """Return the index just past the ``?>`` that closes the region at ``start``.

    ``start`` points at the first character after the opener. String literals
    (including triple-quoted ones) are skipped; a ``?>`` inside a ``#`` comment
    still closes the region. An unterminated region ends at the buffer end.
    """
    i = start
    n = len(buffer)
    while i < n:
        ch = buffer[i]
        if ch == "?" and buffer.startswith(CODE_CLOSE, i):
            return i + len(CODE_CLOSE)
        if ch == "#":
            i += 1
            while i < n and buffer[i] != "\n":
                if buffer.startswith(CODE_CLOSE, i):
                    return i + len(CODE_CLOSE)
                i += 1
            continue
        if ch in ("'", '"'):
            i = _skip_string(buffer, i)
            continue
        i += 1
    return n


def _skip_string(buffer: str, i: int) -> int:
    n = len(buffer)
    for quote in _TRIPLE_QUOTES:
        if buffer.startswith(quote, i):
            end = i + 3
            while end < n:
                if buffer[end] == "\\":
                    end += 2
                    continue
                if buffer.startswith(quote, end):
                    return end + 3
                end += 1
            return n

    quote = buffer[i]
    end = i + 1
    while end < n:
        ch = buffer[end]
        if ch == "\\":
            end += 2
            continue
        if ch == quote:
            return end + 1
        if ch == "\n":
            # Unterminated single-line string; resume scanning on the next line.
            return end
        end += 1
    return n


class TokenStream:
    """Lazy, restartable sequence of tokens over one buffer."""

    def __init__(self, buffer: str) -> None:
        self.buffer = buffer

    def __iter__(self) -> Iterator[Token]:
        buffer = self.buffer
        pos = 0
        n = len(buffer)
        while pos < n:
            match = _OPEN_RE.search(buffer, pos)
            if match is None:
                yield Token(TokenKind.LITERAL, buffer[pos:], pos)
                return
            if match.start() > pos:
                yield Token(TokenKind.LITERAL, buffer[pos:match.start()], pos)
            end = find_code_end(buffer, match.end())
            yield Token(TokenKind.CODE, buffer[match.start():end], match.start())
            pos = end


def tokenize(buffer: str) -> TokenStream:
    """Tokenize ``buffer`` into alternating code and literal runs."""
    return TokenStream(buffer)


__all__ = [
    "CODE_OPEN",
    "CODE_CLOSE",
    "TokenKind",
    "Token",
    "TokenStream",
    "find_code_end",
    "tokenize",
]
