"""Execution of compiled template units."""
from __future__ import annotations

from .builder import CodeBuilder
from .helpers import escape, isset
from .renderer import Renderer

__all__ = ["CodeBuilder", "Renderer", "escape", "isset"]
