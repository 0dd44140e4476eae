"""Domain-specific configuration accessors."""
from __future__ import annotations

from .templates import TemplatesConfig

__all__ = ["TemplatesConfig"]
