"""Directive scanning with explicit parenthesis depth tracking."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional

SIGIL = "@"

# ``\B@`` keeps addresses such as ``user@example.com`` out of the scan.
DIRECTIVE_HEAD = re.compile(r"(@)?\B@(\w+)([ \t]*)")

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {")", "]", "}"}


@dataclass(frozen=True)
class Directive:
    """One directive occurrence found in a literal run.

    ``args_text`` keeps the surrounding parentheses, e.g. ``(x > 1)``.
    """

    name: str
    start: int
    end: int
    source: str
    escaped: bool = False
    whitespace: str = ""
    args_text: Optional[str] = None
    trailing_colon: bool = False
    unbalanced: bool = False
    base: int = 0

    @property
    def offset(self) -> int:
        """Position of the directive within the whole buffer being compiled."""
        return self.base + self.start

    @property
    def has_args(self) -> bool:
        return self.args_text is not None

    @property
    def inner(self) -> str:
        """Argument text without the outer parentheses."""
        if self.args_text is None:
            return ""
        return self.args_text[1:-1]


def skip_string(text: str, i: int) -> int:
    """Return the index just past the quoted string starting at ``i``."""
    quote = text[i]
    n = len(text)
    j = i + 1
    while j < n:
        ch = text[j]
        if ch == "\\":
            j += 2
            continue
        if ch == quote:
            return j + 1
        j += 1
    return n


def match_balanced(text: str, start: int) -> Optional[int]:
    """Given ``text[start] == '('``, return the index just past its matching ``)``.

    Quoted strings are skipped so parentheses inside them do not count.
    Returns None when the group never closes.
    """
    depth = 0
    i = start
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in ("'", '"'):
            i = skip_string(text, i)
            continue
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return None


def split_args(args: str) -> List[str]:
    """Split comma-separated arguments, handling nested calls and literals."""
    if not args.strip():
        return []

    parts: List[str] = []
    current = ""
    depth = 0
    i = 0
    n = len(args)
    while i < n:
        ch = args[i]
        if ch in ("'", '"'):
            end = skip_string(args, i)
            current += args[i:end]
            i = end
            continue
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
        elif ch == "," and depth == 0:
            parts.append(current.strip())
            current = ""
            i += 1
            continue
        current += ch
        i += 1

    if current.strip():
        parts.append(current.strip())
    return parts


def iter_directives(text: str, base: int = 0, pos: int = 0) -> Iterator[Directive]:
    """Yield every directive in ``text`` in document order.

    Scanning resumes after each directive, so arguments of one directive are
    never rescanned as directives themselves.
    """
    while True:
        head = DIRECTIVE_HEAD.search(text, pos)
        if head is None:
            return

        escaped = head.group(1) is not None
        name = head.group(2)
        whitespace = head.group(3)
        end = head.end()
        args_text: Optional[str] = None
        unbalanced = False

        if end < len(text) and text[end] == "(":
            close = match_balanced(text, end)
            if close is None:
                unbalanced = True
            else:
                args_text = text[end:close]
                end = close

        trailing_colon = False
        if not unbalanced and end < len(text) and text[end] == ":":
            trailing_colon = True
            end += 1

        yield Directive(
            name=name,
            start=head.start(),
            end=end,
            source=text[head.start():end],
            escaped=escaped,
            whitespace=whitespace,
            args_text=args_text,
            trailing_colon=trailing_colon,
            unbalanced=unbalanced,
            base=base,
        )
        pos = end if end > head.start() else head.start() + 1


__all__ = [
    "SIGIL",
    "DIRECTIVE_HEAD",
    "Directive",
    "skip_string",
    "match_balanced",
    "split_args",
    "iter_directives",
]
