"""
Folio template render command.

SUMMARY: Render a named template with data from YAML files and KEY=VALUE pairs

Data files are merged in the order given; ``--var`` assignments win.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import yaml

from folio.cli import OutputFormatter, add_json_flag, add_repo_root_flag, get_repo_root
from folio.cli._utils import parse_assignments
from folio.core.exceptions import FolioError
from folio.core.utils.io import read_yaml
from folio.core.utils.merge import deep_merge
from folio.core.views import Views

SUMMARY = "Render a named template with data from YAML files and KEY=VALUE pairs"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument("name", help="Template name (e.g., 'pages/home')")
    parser.add_argument(
        "--data",
        action="append",
        default=[],
        metavar="FILE",
        help="YAML (or JSON) file with template variables; may be repeated",
    )
    parser.add_argument(
        "--var",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Single template variable; VALUE is parsed as YAML",
    )
    add_repo_root_flag(parser)
    add_json_flag(parser)


def load_variables(args: argparse.Namespace) -> dict:
    variables: dict = {}
    for data_file in args.data:
        data = read_yaml(Path(data_file), default={}, raise_on_error=True)
        if not isinstance(data, dict):
            raise ValueError(f"Data file {data_file} must contain a mapping")
        variables = deep_merge(variables, data)
    variables.update(parse_assignments(args.var))
    return variables


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        variables = load_variables(args)
    except (OSError, ValueError, yaml.YAMLError) as e:
        formatter.error(e, error_code="template_data_error")
        return 1

    try:
        output = Views(get_repo_root(args)).render(args.name, variables)
    except FolioError as e:
        formatter.error(e, error_code="template_render_error")
        return 1

    if formatter.json_mode:
        formatter.json_output({"name": args.name, "output": output})
    else:
        formatter.text(output, end="")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    sys.exit(main(parser.parse_args()))
