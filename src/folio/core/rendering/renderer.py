"""Turn compiled template units into Python code and run them."""
from __future__ import annotations

import logging
import re
import textwrap
from typing import Any, Dict, Mapping, Optional

from folio.core.exceptions import TemplateRenderError
from folio.core.rendering.builder import CodeBuilder
from folio.core.rendering.helpers import escape, isset, make_echo
from folio.core.templates.tokenizer import CODE_CLOSE, CODE_OPEN, tokenize

logger = logging.getLogger(__name__)

_BLOCK_END = re.compile(r"^end\w*$")
_CONTINUATION = re.compile(r"^(elif\b|else\b|except\b|finally\b)")
WRITE = "_write"


def _code_body(text: str) -> str:
    body = text[len(CODE_OPEN):]
    if body.endswith(CODE_CLOSE):
        body = body[: -len(CODE_CLOSE)]
    return body


class Renderer:
    """Execute compiled units against a variable environment.

    Code regions become Python statements. Block headers (lines ending in
    ``:``) open an indented block that stays open until a bare ``end...``
    statement. Literal runs become ``_write(...)`` calls; one newline right
    after a code region is dropped.

    Args:
        helpers: Extra names made available to templates.
        escape_function: Name compiled escaped echoes call.
    """

    def __init__(
        self,
        helpers: Optional[Mapping[str, Any]] = None,
        *,
        escape_function: str = "escape",
    ) -> None:
        base: Dict[str, Any] = {"escape": escape, "isset": isset}
        base.setdefault(escape_function, escape)
        base.update(helpers or {})
        self.helpers = base

    def build_source(self, compiled: str, name: str = "<template>") -> str:
        builder = CodeBuilder()
        after_code = False
        for token in tokenize(compiled):
            if token.is_code:
                self._add_code(builder, _code_body(token.text), name)
                after_code = True
                continue

            text = token.text
            if after_code:
                if text.startswith("\r\n"):
                    text = text[2:]
                elif text.startswith("\n"):
                    text = text[1:]
            if text:
                builder.add_line(f"{WRITE}({text!r})")
            after_code = False

        if builder.depth:
            raise TemplateRenderError(
                f"{builder.depth} block(s) left open at end of template", path=name
            )
        return str(builder)

    def _add_code(self, builder: CodeBuilder, body: str, name: str) -> None:
        stripped = body.strip()
        if not stripped:
            return

        if "\n" not in stripped:
            if _BLOCK_END.match(stripped):
                self._dedent(builder, stripped, name)
            elif _CONTINUATION.match(stripped) and stripped.endswith(":"):
                self._dedent(builder, stripped, name)
                builder.add_line(stripped)
                builder.indent()
            elif stripped.endswith(":"):
                builder.add_line(stripped)
                builder.indent()
            else:
                builder.add_line(stripped)
            return

        for line in textwrap.dedent(body.strip("\n")).splitlines():
            if line.strip():
                builder.add_line(line.rstrip())

    def _dedent(self, builder: CodeBuilder, statement: str, name: str) -> None:
        try:
            builder.dedent()
        except IndexError as exc:
            raise TemplateRenderError(
                f"'{statement}' does not close an open block", path=name
            ) from exc

    def namespace(self, variables: Optional[Mapping[str, Any]], parts: list) -> Dict[str, Any]:
        namespace: Dict[str, Any] = dict(variables or {})
        namespace.update(self.helpers)
        namespace["echo"] = make_echo(parts)
        namespace[WRITE] = parts.append
        return namespace

    def render(
        self,
        compiled: str,
        variables: Optional[Mapping[str, Any]] = None,
        *,
        name: str = "<template>",
    ) -> str:
        """Render ``compiled`` with ``variables`` and return the output text."""
        source = self.build_source(compiled, name)
        try:
            code = compile(source, f"<template {name}>", "exec")
        except SyntaxError as exc:
            raise TemplateRenderError(
                f"Compiled template is not valid Python: {exc.msg}",
                path=name,
                line=exc.lineno,
            ) from exc

        parts: list = []
        logger.debug("Rendering %s", name)
        try:
            exec(code, self.namespace(variables, parts))
        except TemplateRenderError:
            raise
        except Exception as exc:
            raise TemplateRenderError(f"{type(exc).__name__}: {exc}", path=name) from exc
        return "".join(parts)


def render(compiled: str, variables: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> str:
    """Render with a default Renderer."""
    return Renderer().render(compiled, variables, **kwargs)


__all__ = ["Renderer", "render", "WRITE"]
