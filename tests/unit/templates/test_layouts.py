"""Tests for layout chain resolution and section injection."""
from __future__ import annotations

from pathlib import Path

import pytest

from folio.core.exceptions import ExtendsCycleError, TemplateNotFoundError
from folio.core.templates.layouts import LayoutAssembler


@pytest.fixture
def assembler(resolver) -> LayoutAssembler:
    return LayoutAssembler(resolver)


# =============================================================================
# Chain resolution
# =============================================================================


class TestChain:
    def test_template_without_extends_is_returned_unchanged(self, assembler, write_view):
        text = "<p>@yield('x') @section('y')\nd\n@endsection</p>\n"
        path = write_view("plain", text)

        assert assembler.assemble(path) == text

    def test_chain_is_child_first(self, assembler, write_view, views_dir):
        write_view("root", "root")
        write_view("mid", "@extends('root')")
        leaf = write_view("leaf", "@extends('mid')")

        names = [source.path.name for source in assembler.chain(leaf)]

        assert names == ["leaf.html", "mid.html", "root.html"]

    def test_two_template_cycle(self, assembler, write_view):
        a = write_view("a", "@extends('b')")
        write_view("b", "@extends('a')")

        with pytest.raises(ExtendsCycleError) as exc_info:
            assembler.assemble(a)

        assert len(exc_info.value.chain) == 3

    def test_self_extension(self, assembler, write_view):
        me = write_view("me", "@extends('me')")

        with pytest.raises(ExtendsCycleError):
            assembler.assemble(me)

    def test_missing_parent(self, assembler, write_view):
        child = write_view("child", "@extends('layouts/nowhere')")

        with pytest.raises(TemplateNotFoundError) as exc_info:
            assembler.assemble(child)

        assert exc_info.value.name == "layouts/nowhere"
        assert exc_info.value.context["referenced_from"] == str(child)

    def test_missing_root(self, assembler, views_dir: Path):
        with pytest.raises(TemplateNotFoundError):
            assembler.assemble(views_dir / "ghost.html")

    def test_escaped_extends_is_ignored(self, assembler, write_view):
        text = "@@extends('base')\n"
        path = write_view("doc", text)

        assert assembler.assemble(path) == text


# =============================================================================
# Section injection
# =============================================================================


class TestAssemble:
    def test_three_level_chain(self, assembler, write_view):
        write_view(
            "root",
            "<html>\n"
            "@section('scripts')\n<script src=\"root.js\"></script>\n@endsection\n"
            "<main>@yield('content')</main>\n"
            "</html>\n",
        )
        write_view(
            "mid",
            "@extends('root')\n"
            "@section('scripts')\n@parent\n<script src=\"mid.js\"></script>\n@endsection\n",
        )
        leaf = write_view(
            "leaf",
            "@extends('mid')\n@section('content')\n<p>Leaf</p>\n@endsection\n",
        )

        out = assembler.assemble(leaf)

        assert out.index("root.js") < out.index("mid.js")
        assert "<main><p>Leaf</p></main>" in out
        assert "@section" not in out
        assert "@yield" not in out

    def test_unfilled_section_uses_parent_default(self, assembler, write_view):
        write_view("base", "<nav>@section('nav')\nHome\n@endsection</nav>@yield('body')")
        page = write_view("page", "@extends('base')\n@section('body', 'B')")

        assert assembler.assemble(page) == "<nav>Home</nav>B"

    def test_content_outside_sections_is_dropped(self, assembler, write_view):
        write_view("base", "[@yield('a')]")
        page = write_view("page", "@extends('base')\nstray text\n@section('a', 'x')\nmore")

        assert assembler.assemble(page) == "[x]"

    def test_deeper_child_overrides_middle_layout(self, assembler, write_view):
        write_view("root", "<title>@yield('title')</title>")
        write_view("mid", "@extends('root')\n@section('title', 'Mid')")
        leaf = write_view("leaf", "@extends('mid')\n@section('title', 'Leaf')")

        assert assembler.assemble(leaf) == "<title>Leaf</title>"

    def test_parent_reference_reaches_middle_layout(self, assembler, write_view):
        write_view("root", "<title>@yield('title')</title>")
        write_view("mid", "@extends('root')\n@section('title', 'Mid')")
        leaf = write_view("leaf", "@extends('mid')\n@section('title')\n@parent - Leaf\n@endsection")

        assert assembler.assemble(leaf) == "<title>Mid - Leaf</title>"

    def test_layout_in_subdirectory(self, assembler, write_view):
        write_view("layouts/app", "<body>@yield('body')</body>")
        page = write_view("pages/home", "@extends('layouts/app')\n@section('body', 'hi')")

        assert assembler.assemble(page) == "<body>hi</body>"

    def test_code_regions_survive_assembly(self, assembler, write_view):
        write_view("base", "<?py x = 1 ?>@yield('a')")
        page = write_view("page", "@extends('base')\n@section('a')\n<?py y = 2 ?>\n@endsection")

        assert assembler.assemble(page) == "<?py x = 1 ?><?py y = 2 ?>"
