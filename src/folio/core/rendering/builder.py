"""Incremental Python source builder with block tracking."""
from __future__ import annotations

from typing import List


class CodeBuilder:
    """Build source code conveniently."""

    INDENT_STEP = 4

    def __init__(self, indent: int = 0) -> None:
        self.code: List[str] = []
        self.indent_level = indent
        # Number of lines emitted when each open block started.
        self._block_starts: List[int] = []

    def __str__(self) -> str:
        return "".join(self.code)

    @property
    def depth(self) -> int:
        return len(self._block_starts)

    def add_line(self, line: str) -> None:
        """Add a line of source; indentation and newline are added for you."""
        self.code.extend([" " * self.indent_level, line, "\n"])

    def indent(self) -> None:
        """Open a block: increase the indent for following lines."""
        self._block_starts.append(len(self.code))
        self.indent_level += self.INDENT_STEP

    def dedent(self) -> None:
        """Close the innermost block, inserting ``pass`` if it is empty."""
        if not self._block_starts:
            raise IndexError("dedent() without an open block")
        start = self._block_starts.pop()
        if len(self.code) == start:
            self.add_line("pass")
        self.indent_level -= self.INDENT_STEP


__all__ = ["CodeBuilder"]
