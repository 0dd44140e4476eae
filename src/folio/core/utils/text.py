"""Text position helpers."""
from __future__ import annotations

from typing import Tuple


def line_column(text: str, offset: int) -> Tuple[int, int]:
    """Return the 1-based (line, column) of ``offset`` within ``text``."""
    offset = max(0, min(offset, len(text)))
    line = text.count("\n", 0, offset) + 1
    last_newline = text.rfind("\n", 0, offset)
    return line, offset - last_newline


__all__ = ["line_column"]
