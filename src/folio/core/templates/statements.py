"""Directive compilation for literal runs."""
from __future__ import annotations

import re
from typing import List, Mapping, Optional, Tuple

from folio.core.exceptions import UnbalancedDirectiveArgumentsError
from folio.core.templates.context import CompilationContext, Segment
from folio.core.templates.directives import Handler, build_handlers
from folio.core.templates.scanner import Directive, iter_directives

# Layout directive that may survive assembly as a placeholder.
SECTION = "section"

# ``@py`` without arguments opens a host-code block closed by ``@endpy``.
_ENDPY = re.compile(r"(?<!@)\B@endpy\b[ \t]*")


def _append_text(segments: List[Segment], text: str, offset: int) -> None:
    if segments and not segments[-1].final:
        last = segments[-1]
        segments[-1] = Segment(last.text + text, offset=last.offset)
    else:
        segments.append(Segment(text, offset=offset))


class StatementCompiler:
    """Expand ``@name``, ``@name(args)`` and ``@name(args):`` directives.

    Rules, first match wins:

    1. ``@@name`` emits ``@name`` (plus any arguments) literally.
    2. ``@section(...):`` placeholders compile to nothing.
    3. Names with a handler are replaced by the handler's output.
    4. Anything else is left untouched.
    """

    def __init__(self, handlers: Mapping[str, Handler] | None = None) -> None:
        self.handlers = build_handlers(handlers)

    def is_known(self, name: str) -> bool:
        return name in self.handlers or name == SECTION

    def compile_segments(
        self,
        text: str,
        context: CompilationContext,
        offset: int = 0,
    ) -> List[Segment]:
        """Compile ``text`` into segments; generated output is marked final.

        Text left untouched (plain runs, pass-through and escaped directives)
        is merged into one non-final segment, so an echo tag spanning an
        inert ``@word`` still compiles as a whole.
        """
        segments: List[Segment] = []
        pos = 0
        while pos < len(text):
            directive = next(iter_directives(text, base=offset, pos=pos), None)
            if directive is None:
                break
            if directive.start > pos:
                _append_text(segments, text[pos:directive.start], offset + pos)

            if directive.escaped:
                _append_text(segments, directive.source[1:], directive.offset)
                pos = directive.end
                continue

            replacement, end = self._compile_one(directive, text, context)
            if replacement is None:
                _append_text(segments, directive.source, directive.offset)
            else:
                segments.append(Segment(replacement, final=True, offset=directive.offset))
            pos = end

        if pos < len(text):
            _append_text(segments, text[pos:], offset + pos)
        return segments

    def _compile_one(
        self, directive: Directive, text: str, context: CompilationContext
    ) -> Tuple[Optional[str], int]:
        """Return ``(replacement, end)``; a None replacement keeps the source text."""
        if directive.unbalanced:
            if self.is_known(directive.name):
                raise context.error(
                    UnbalancedDirectiveArgumentsError,
                    f"Unbalanced parentheses in @{directive.name} arguments",
                    directive.offset,
                )
            return None, directive.end

        if directive.name == SECTION and directive.trailing_colon:
            return "", directive.end

        handler = self.handlers.get(directive.name)
        if handler is None:
            return None, directive.end

        if directive.name == "py" and not directive.has_args:
            return self._compile_py_block(directive, text, context)

        return handler(directive, context), directive.end

    def _compile_py_block(
        self, directive: Directive, text: str, context: CompilationContext
    ) -> Tuple[str, int]:
        """Pass the body of a ``@py ... @endpy`` block through as host code."""
        opener = self.handlers["py"](directive, context)
        closing = _ENDPY.search(text, directive.end)
        if closing is None:
            return opener + text[directive.end:], len(text)

        closer = self.handlers.get("endpy")
        tail = closer(directive, context) if closer is not None else ""
        return opener + text[directive.end:closing.start()] + tail, closing.end()

    def compile(self, text: str, context: CompilationContext, offset: int = 0) -> str:
        return "".join(s.text for s in self.compile_segments(text, context, offset))


def compile_statements(
    text: str,
    context: Optional[CompilationContext] = None,
    offset: int = 0,
) -> str:
    """Compile the directives of one literal run with the built-in handlers."""
    return StatementCompiler().compile(text, context or CompilationContext(source=text), offset)


__all__ = ["StatementCompiler", "compile_statements", "SECTION"]
