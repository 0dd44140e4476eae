from __future__ import annotations

from pathlib import Path

from folio.core.exceptions import (
    ExtendsCycleError,
    FolioError,
    IncludeCycleError,
    TemplateConfigError,
    TemplateError,
    TemplateNotFoundError,
    TemplateRenderError,
    TemplateSyntaxError,
    UnbalancedDirectiveArgumentsError,
)


class TestHierarchy:
    def test_template_errors_share_a_base(self):
        for exc_type in (
            TemplateNotFoundError,
            TemplateSyntaxError,
            UnbalancedDirectiveArgumentsError,
            ExtendsCycleError,
            IncludeCycleError,
            TemplateRenderError,
        ):
            assert issubclass(exc_type, TemplateError)
            assert issubclass(exc_type, FolioError)

    def test_not_found_is_a_file_not_found_error(self):
        assert issubclass(TemplateNotFoundError, FileNotFoundError)

    def test_config_error_is_a_value_error(self):
        assert issubclass(TemplateConfigError, ValueError)


class TestTemplateError:
    def test_location_in_message(self):
        err = TemplateSyntaxError("Bad directive", path=Path("views/a.html"), line=3, column=7)

        assert str(err) == "Bad directive in views/a.html:3:7"
        assert (err.path, err.line, err.column) == ("views/a.html", 3, 7)

    def test_message_without_location(self):
        err = TemplateRenderError("boom")

        assert str(err) == "boom"
        assert err.path is None

    def test_json_payload(self):
        err = TemplateNotFoundError("pages/home", path="views/pages/home.html", referenced_from="views/x.html")

        payload = err.to_json_error()

        assert payload["code"] == "TemplateNotFoundError"
        assert payload["context"] == {
            "name": "pages/home",
            "referenced_from": "views/x.html",
            "path": "views/pages/home.html",
        }
        assert "The view file named 'pages/home' cannot be found" in payload["message"]

    def test_cycle_error_lists_chain(self):
        err = ExtendsCycleError("Circular @extends chain", chain=["a.html", "b.html", "a.html"])

        assert str(err) == "Circular @extends chain: a.html -> b.html -> a.html"
        assert err.chain == ["a.html", "b.html", "a.html"]
        assert err.context["chain"] == ["a.html", "b.html", "a.html"]
