"""Shared helpers for the Folio core."""
from __future__ import annotations

from .merge import deep_merge, merge_arrays
from .text import line_column

__all__ = ["deep_merge", "merge_arrays", "line_column"]
