"""Tests for directive scanning helpers."""
from __future__ import annotations

import pytest

from folio.core.templates.scanner import iter_directives, match_balanced, split_args


class TestMatchBalanced:
    def test_nested_groups(self):
        assert match_balanced("(a(b)c) tail", 0) == 7

    def test_unclosed_group(self):
        assert match_balanced("(a(b)", 0) is None

    def test_parentheses_inside_strings_are_ignored(self):
        assert match_balanced('(")")', 0) == 5
        assert match_balanced("('(' + x)", 0) == 9


class TestSplitArgs:
    def test_depth_aware_split(self):
        assert split_args("a, f(b, c), 'x,y'") == ["a", "f(b, c)", "'x,y'"]

    def test_brackets_and_braces(self):
        assert split_args("d['a, b'], {1: 2, 3: 4}, [5, 6]") == [
            "d['a, b']",
            "{1: 2, 3: 4}",
            "[5, 6]",
        ]

    def test_empty(self):
        assert split_args("  ") == []


class TestIterDirectives:
    def test_finds_directives_in_order(self):
        found = list(iter_directives("@if(x) hi @endif"))

        assert [d.name for d in found] == ["if", "endif"]
        assert found[0].args_text == "(x)"
        assert found[0].inner == "x"
        assert found[1].has_args is False

    def test_email_addresses_are_not_directives(self):
        assert list(iter_directives("mail me@example.com")) == []

    def test_escaped_directive(self):
        directive = next(iter_directives("@@if(x)"))

        assert directive.escaped is True
        assert directive.source == "@@if(x)"

    def test_deeply_nested_arguments(self):
        directive = next(iter_directives("@if(f(g(x), h(y))) after"))

        assert directive.args_text == "(f(g(x), h(y)))"
        assert directive.source == "@if(f(g(x), h(y)))"

    def test_whitespace_before_arguments(self):
        directive = next(iter_directives("@while (n < 3)"))

        assert directive.args_text == "(n < 3)"

    def test_trailing_colon(self):
        directive = next(iter_directives("@section('sidebar'):"))

        assert directive.trailing_colon is True
        assert directive.source == "@section('sidebar'):"

    def test_unbalanced_arguments_are_flagged(self):
        directive = next(iter_directives("@if(x"))

        assert directive.unbalanced is True
        assert directive.args_text is None

    @pytest.mark.parametrize("base", [0, 40])
    def test_offset_includes_base(self, base):
        directive = next(iter_directives("abc @else", base=base))

        assert directive.start == 4
        assert directive.offset == base + 4
