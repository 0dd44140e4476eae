from __future__ import annotations

from pathlib import Path

import pytest

from folio.core.config.domains.templates import TemplatesConfig
from folio.core.exceptions import TemplateNotFoundError
from folio.core.views import Views


@pytest.fixture
def views(tmp_path: Path) -> Views:
    return Views(tmp_path)


class TestViews:
    def test_render_named_view(self, views: Views, write_view):
        write_view("pages/home", "Hi {{ name }}")

        assert views.render("pages/home", {"name": "Ann"}) == "Hi Ann"

    def test_shared_data(self, views: Views, write_view):
        write_view("page", "{{ site }}/{{ title }}")
        views.share(site="Folio", title="default")

        assert views.render("page", {"title": "Home"}) == "Folio/Home"
        assert views.shared == {"site": "Folio", "title": "default"}

    def test_share_is_chainable(self, views: Views):
        assert views.share(a=1) is views

    def test_exists_and_path(self, views: Views, write_view, tmp_path: Path):
        written = write_view("page", "x")

        assert views.exists("page")
        assert not views.exists("ghost")
        assert views.path("page") == written
        assert views.path("ghost") == tmp_path / "views" / "ghost.html"

    def test_missing_view(self, views: Views):
        with pytest.raises(TemplateNotFoundError) as exc_info:
            views.render("ghost")

        assert exc_info.value.name == "ghost"

    def test_layout_and_include(self, views: Views, write_view):
        write_view("layouts/base", "<body>@yield('body')</body>")
        write_view("partials/greeting", "Hello {{ name }}")
        write_view("page", "@extends('layouts/base')\n@section('body')\n@include('partials/greeting')\n@endsection")

        assert views.render("page", {"name": "Ann"}) == "<body>Hello Ann</body>"

    def test_custom_configuration(self, tmp_path: Path):
        config = TemplatesConfig(
            tmp_path,
            config={"templates": {"echo_tags": ["[[", "]]"], "escape_function": "e", "extension": ".tpl"}},
        )
        (tmp_path / "views").mkdir()
        (tmp_path / "views" / "page.tpl").write_text("[[ x ]] {{ x }}", encoding="utf-8")

        views = Views(tmp_path, config=config)

        assert views.render("page", {"x": "<i>"}) == "&lt;i&gt; {{ x }}"

    def test_helpers_and_handlers(self, tmp_path: Path, write_view):
        views = Views(
            tmp_path,
            helpers={"shout": lambda s: s.upper() + "!"},
            handlers={"hr": lambda directive, context: "<hr>"},
        )
        write_view("page", "@hr\n{{ shout(word) }}")

        assert views.render("page", {"word": "hey"}) == "<hr>\nHEY!"
