"""Echo tag compilation for literal runs."""
from __future__ import annotations

import re
from functools import lru_cache
from typing import List, Optional, Pattern

from folio.core.templates.context import CompilationContext, Segment
from folio.core.templates.directives import code
from folio.core.templates.tags import EchoKind, TagConfig

# Left-hand side of ``value or default`` must look like a variable reference:
# a name followed by attribute or subscript accesses.
_VARIABLE_REF = r"[A-Za-z_]\w*(?:\.\w+|\[[^\]\n]*\])*"
_DEFAULT_RE = re.compile(rf"^({_VARIABLE_REF})\s+or\s+(.+)$", re.DOTALL)


def compile_echo_defaults(expression: str) -> str:
    """Rewrite ``name or default`` into a conditional on ``isset(name)``.

    Expressions whose left-hand side is not a plain variable reference are
    returned unchanged.
    """
    match = _DEFAULT_RE.match(expression.strip())
    if match is None:
        return expression
    value, default = match.group(1), match.group(2).strip()
    return f"({value} if isset(lambda: {value}) else {default})"


@lru_cache(maxsize=32)
def _echo_pattern(open_tag: str, close_tag: str, escapable: bool) -> Pattern[str]:
    prefix = "(@)?" if escapable else "()"
    return re.compile(
        rf"{prefix}{re.escape(open_tag)}\s*(.+?)\s*{re.escape(close_tag)}(\r?\n)?",
        re.DOTALL,
    )


class EchoCompiler:
    """Rewrite escaped and raw echo tags into ``echo(...)`` statements."""

    def __init__(self, tags: Optional[TagConfig] = None) -> None:
        self.tags = tags or TagConfig()

    def _compile_kind(self, kind: EchoKind, segments: List[Segment]) -> List[Segment]:
        open_tag, close_tag = self.tags.delimiters(kind)
        pattern = _echo_pattern(open_tag, close_tag, kind is EchoKind.ESCAPED)

        out: List[Segment] = []
        for segment in segments:
            if segment.final:
                out.append(segment)
                continue

            text = segment.text
            pos = 0
            for match in pattern.finditer(text):
                if match.start() > pos:
                    out.append(Segment(text[pos:match.start()], offset=segment.offset + pos))
                out.append(Segment(self._render(kind, match), final=True, offset=segment.offset + match.start()))
                pos = match.end()
            if pos < len(text):
                out.append(Segment(text[pos:], offset=segment.offset + pos))
        return out

    def _render(self, kind: EchoKind, match: re.Match) -> str:
        whitespace = match.group(3) or ""
        if match.group(1):
            # ``@{{ x }}`` keeps the tag for client-side templating.
            return match.group(0)[1:]

        expression = compile_echo_defaults(match.group(2))
        if kind is EchoKind.ESCAPED:
            expression = f"{self.tags.escape_function}({expression})"
        # The renderer swallows one newline after a code region; double it so it survives.
        return code(f"echo({expression})") + whitespace + whitespace

    def compile_segments(self, segments: List[Segment]) -> List[Segment]:
        for kind in self.tags.echo_order:
            segments = self._compile_kind(kind, segments)
        return segments

    def compile(self, text: str) -> str:
        return "".join(s.text for s in self.compile_segments([Segment(text)]))


def compile_echoes(text: str, context: Optional[CompilationContext] = None) -> str:
    """Compile the echo tags of one literal run."""
    tags = context.tags if context is not None else TagConfig()
    return EchoCompiler(tags).compile(text)


__all__ = ["EchoCompiler", "compile_echoes", "compile_echo_defaults"]
