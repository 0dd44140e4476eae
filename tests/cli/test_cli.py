"""End-to-end tests for the folio command line."""
from __future__ import annotations

import json
import re
from argparse import Namespace
from pathlib import Path

import pytest

from folio import __version__
from folio.cli._dispatcher import build_parser, discover_domains, main
from folio.cli._utils import parse_assignments
from folio.cli.template.render import load_variables

CLI_DIR = Path(__file__).parent.parent.parent / "src" / "folio" / "cli"


@pytest.fixture
def project(tmp_path: Path) -> Path:
    views = tmp_path / "views"
    (views / "layouts").mkdir(parents=True)
    (views / "layouts" / "base.html").write_text(
        "<title>@yield('title', 'Site')</title>\n<main>@yield('body')</main>\n",
        encoding="utf-8",
    )
    (views / "home.html").write_text(
        "@extends('layouts/base')\n@section('body')\nHello {{ name }}!\n@endsection\n",
        encoding="utf-8",
    )
    return tmp_path


# =============================================================================
# Dispatcher
# =============================================================================


class TestDispatcher:
    def test_domains_are_discovered(self):
        assert {"template", "config"} <= set(discover_domains())

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_no_domain_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage: folio" in capsys.readouterr().out

    def test_commands_are_registered(self):
        parser = build_parser()
        args = parser.parse_args(["template", "render", "home", "--var", "a=1"])

        assert args.domain == "template"
        assert args.var == ["a=1"]
        assert callable(args._func)


# =============================================================================
# template compile / render
# =============================================================================


class TestTemplateCommands:
    def test_compile(self, project: Path, capsys):
        code = main(["template", "compile", "home", "--repo-root", str(project)])

        out = capsys.readouterr().out
        assert code == 0
        assert "<title>Site</title>" in out
        assert "<?py echo(escape(name)) ?>" in out

    def test_compile_json(self, project: Path, capsys):
        code = main(["template", "compile", "home", "--repo-root", str(project), "--json"])

        payload = json.loads(capsys.readouterr().out)
        assert code == 0
        assert payload["name"] == "home"
        assert payload["path"].endswith("home.html")

    def test_render_with_var(self, project: Path, capsys):
        code = main(["template", "render", "home", "--repo-root", str(project), "--var", "name=<Ann>"])

        out = capsys.readouterr().out
        assert code == 0
        assert "<main>Hello &lt;Ann&gt;!</main>" in out

    def test_render_with_data_file(self, project: Path, tmp_path: Path, capsys):
        data = tmp_path / "data.yaml"
        data.write_text("name: Bob\n", encoding="utf-8")

        code = main(["template", "render", "home", "--repo-root", str(project), "--data", str(data)])

        assert code == 0
        assert "Hello Bob!" in capsys.readouterr().out

    def test_malformed_data_file(self, project: Path, tmp_path: Path, capsys):
        data = tmp_path / "bad.yaml"
        data.write_text("name: [unclosed\n", encoding="utf-8")

        code = main(
            ["template", "render", "home", "--repo-root", str(project), "--data", str(data), "--json"]
        )

        assert code == 1
        assert json.loads(capsys.readouterr().err)["error"] == "template_data_error"

    def test_missing_template(self, project: Path, capsys):
        code = main(["template", "render", "nowhere", "--repo-root", str(project)])

        assert code == 1
        assert "cannot be found" in capsys.readouterr().err

    def test_missing_template_json_error(self, project: Path, capsys):
        code = main(["template", "compile", "nowhere", "--repo-root", str(project), "--json"])

        payload = json.loads(capsys.readouterr().err)
        assert code == 1
        assert payload["error"] == "template_compile_error"
        assert payload["details"]["code"] == "TemplateNotFoundError"

    def test_bad_assignment(self, project: Path, capsys):
        code = main(["template", "render", "home", "--repo-root", str(project), "--var", "novalue"])

        assert code == 1
        assert "KEY=VALUE" in capsys.readouterr().err


class TestVariableLoading:
    def test_assignments_are_parsed_as_yaml(self):
        assert parse_assignments(["n=3", "flag=true", "items=[1, 2]", "s=hello"]) == {
            "n": 3,
            "flag": True,
            "items": [1, 2],
            "s": "hello",
        }

    def test_vars_override_data_files(self, tmp_path: Path):
        first = tmp_path / "a.yaml"
        first.write_text("user: {name: A, role: admin}\n", encoding="utf-8")
        second = tmp_path / "b.yaml"
        second.write_text("user: {name: B}\n", encoding="utf-8")

        args = Namespace(data=[str(first), str(second)], var=["title=Hi"])

        assert load_variables(args) == {"user": {"name": "B", "role": "admin"}, "title": "Hi"}


# =============================================================================
# config show
# =============================================================================


class TestConfigShow:
    def test_show_key_as_json(self, tmp_path: Path, capsys):
        code = main(["config", "show", "templates.echo_tags", "--repo-root", str(tmp_path), "--json"])

        assert code == 0
        assert json.loads(capsys.readouterr().out) == {"templates": {"echo_tags": ["{{", "}}"]}}

    def test_show_yaml(self, tmp_path: Path, capsys):
        code = main(["config", "show", "--repo-root", str(tmp_path)])

        assert code == 0
        assert "default_dir: views" in capsys.readouterr().out

    def test_missing_key(self, tmp_path: Path, capsys):
        code = main(["config", "show", "templates.nope", "--repo-root", str(tmp_path)])

        assert code == 1
        assert "Key not found" in capsys.readouterr().err


# =============================================================================
# Command hygiene
# =============================================================================


class TestCommandModules:
    def test_commands_use_get_repo_root(self):
        pattern = re.compile(r"Path\(args\.repo_root\)")
        violations = [
            str(path.relative_to(CLI_DIR))
            for path in CLI_DIR.rglob("*.py")
            if not path.name.startswith("_") and pattern.search(path.read_text(encoding="utf-8"))
        ]

        assert not violations

    def test_every_command_has_a_summary(self):
        for path in CLI_DIR.glob("*/*.py"):
            if path.name.startswith("_"):
                continue
            assert "SUMMARY = " in path.read_text(encoding="utf-8"), path
