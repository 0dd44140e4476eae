"""Folio configuration loading."""
from __future__ import annotations

from .base import BaseDomainConfig
from .manager import ConfigManager

__all__ = ["ConfigManager", "BaseDomainConfig"]
