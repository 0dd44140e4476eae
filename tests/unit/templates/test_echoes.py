"""Tests for echo tag compilation."""
from __future__ import annotations

import pytest

from folio.core.templates.context import CompilationContext
from folio.core.templates.echoes import EchoCompiler, compile_echo_defaults, compile_echoes
from folio.core.templates.tags import TagConfig


class TestEscapedEcho:
    def test_escaped_echo(self):
        assert compile_echoes("Hi {{ name }}!") == "Hi <?py echo(escape(name)) ?>!"

    def test_whitespace_inside_tags_is_optional(self):
        assert compile_echoes("{{name}}") == "<?py echo(escape(name)) ?>"

    def test_sigil_suppresses_compilation(self):
        assert compile_echoes("@{{ name }}") == "{{ name }}"

    def test_trailing_newline_is_doubled(self):
        assert compile_echoes("{{ x }}\nnext") == "<?py echo(escape(x)) ?>\n\nnext"
        assert compile_echoes("{{ x }}\r\n") == "<?py echo(escape(x)) ?>\r\n\r\n"

    def test_custom_escape_function(self):
        context = CompilationContext(tags=TagConfig(escape_function="e"))

        assert compile_echoes("{{ x }}", context) == "<?py echo(e(x)) ?>"


class TestRawEcho:
    def test_raw_echo_is_not_escaped(self):
        assert compile_echoes("{{{ html }}}") == "<?py echo(html) ?>"

    def test_mixed_tags(self):
        assert compile_echoes("{{{ a }}} and {{ b }}") == (
            "<?py echo(a) ?> and <?py echo(escape(b)) ?>"
        )


class TestDefaults:
    def test_default_value_rewrite_escaped(self):
        assert compile_echoes("{{ x or 'Guest' }}") == (
            "<?py echo(escape((x if isset(lambda: x) else 'Guest'))) ?>"
        )

    def test_default_value_rewrite_raw(self):
        assert compile_echoes("{{{ x or 'Guest' }}}") == (
            "<?py echo((x if isset(lambda: x) else 'Guest')) ?>"
        )

    @pytest.mark.parametrize(
        "expression",
        ["user.name or 'anon'", "rows[0] or 'none'", "config['title'].text or ''"],
    )
    def test_variable_references_are_rewritten(self, expression):
        value = expression.split(" or ")[0]

        assert compile_echo_defaults(expression).startswith(f"({value} if isset(lambda: {value})")

    @pytest.mark.parametrize("expression", ["f(x) or 'y'", "a + b or c", "'x' or y", "x"])
    def test_other_expressions_are_left_alone(self, expression):
        assert compile_echo_defaults(expression) == expression


class TestCustomTags:
    def test_raw_prefix_of_escaped(self):
        tags = TagConfig(escaped_open="<%=", escaped_close="%>", raw_open="<%", raw_close="%>")

        assert EchoCompiler(tags).compile("<%= a %> <% b %>") == (
            "<?py echo(escape(a)) ?> <?py echo(b) ?>"
        )

    def test_bracket_tags(self):
        tags = TagConfig(escaped_open="[[", escaped_close="]]", raw_open="[!", raw_close="!]")

        assert EchoCompiler(tags).compile("[[ a ]][! b !]{{ c }}") == (
            "<?py echo(escape(a)) ?><?py echo(b) ?>{{ c }}"
        )
