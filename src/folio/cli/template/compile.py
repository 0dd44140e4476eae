"""
Folio template compile command.

SUMMARY: Compile a named template and print the compiled unit

Resolves the name through the configured view paths, assembles its layout
chain and prints the compiled host code.
"""

from __future__ import annotations

import argparse
import sys

from folio.cli import OutputFormatter, add_json_flag, add_repo_root_flag, get_repo_root
from folio.core.exceptions import FolioError
from folio.core.views import Views

SUMMARY = "Compile a named template and print the compiled unit"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument("name", help="Template name (e.g., 'pages/home')")
    add_repo_root_flag(parser)
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        views = Views(get_repo_root(args))
        path = views.path(args.name)
        compiled = views.compile(args.name)
    except FolioError as e:
        formatter.error(e, error_code="template_compile_error")
        return 1

    if formatter.json_mode:
        formatter.json_output({"name": args.name, "path": str(path), "compiled": compiled})
    else:
        formatter.text(compiled, end="")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    sys.exit(main(parser.parse_args()))
