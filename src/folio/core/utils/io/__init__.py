"""File I/O helpers."""
from __future__ import annotations

from .yaml import iter_yaml_files, parse_yaml_string, read_yaml

__all__ = ["read_yaml", "parse_yaml_string", "iter_yaml_files"]
