"""Shared CLI utility functions."""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Dict, Iterable

from folio.core.utils.io import parse_yaml_string


def get_repo_root(args: argparse.Namespace) -> Path:
    """Get the project root from ``--repo-root`` or the current directory."""
    if getattr(args, "repo_root", None):
        return Path(args.repo_root).resolve()
    return Path.cwd()


def parse_assignments(items: Iterable[str]) -> Dict[str, Any]:
    """Parse ``KEY=VALUE`` pairs; values are read as YAML scalars or collections.

    Raises:
        ValueError: if an item has no ``=`` or an empty key.
    """
    out: Dict[str, Any] = {}
    for item in items or ():
        key, sep, raw = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Expected KEY=VALUE, got {item!r}")
        out[key] = parse_yaml_string(raw, default=raw)
    return out


__all__ = ["get_repo_root", "parse_assignments"]
