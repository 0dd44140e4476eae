"""
Folio config show command.

SUMMARY: Show current configuration

Displays the merged configuration from bundled defaults, project overrides,
and environment variables. Supports filtering by key and multiple output formats.
"""

from __future__ import annotations

import argparse
import sys
from typing import Any

import yaml

from folio.cli import OutputFormatter, add_json_flag, add_repo_root_flag, get_repo_root
from folio.core.config import ConfigManager
from folio.core.exceptions import FolioError

SUMMARY = "Show current configuration"

_MISSING = object()


def _nest_key(key: str, value: Any) -> Any:
    """Nest a dot-notation key into a YAML/JSON-friendly mapping."""
    parts = [p for p in str(key).split(".") if p]
    out = value
    for part in reversed(parts):
        out = {part: out}
    return out


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "key",
        nargs="?",
        help="Specific configuration key to show (e.g., 'templates.echo_tags')",
    )
    parser.add_argument(
        "--format",
        choices=["json", "yaml"],
        default="yaml",
        help="Output format (default: yaml)",
    )
    add_json_flag(parser)
    add_repo_root_flag(parser)


def main(args: argparse.Namespace) -> int:
    """Show configuration - delegates to ConfigManager."""
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        config_data = ConfigManager(get_repo_root(args)).load_config()
    except FolioError as e:
        formatter.error(e, error_code="config_show_error")
        return 1

    output_format = "json" if args.json else args.format

    data: Any = config_data
    if args.key:
        current: Any = config_data
        for part in args.key.split("."):
            current = current.get(part, _MISSING) if isinstance(current, dict) else _MISSING
            if current is _MISSING:
                formatter.error(KeyError(args.key), f"Key not found: {args.key}", error_code="config_key_missing")
                return 1
        data = _nest_key(args.key, current)

    if output_format == "json":
        formatter.json_output(data)
    else:
        formatter.text(
            yaml.safe_dump(data, default_flow_style=False, sort_keys=True, allow_unicode=True).rstrip()
        )
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    sys.exit(main(parser.parse_args()))
