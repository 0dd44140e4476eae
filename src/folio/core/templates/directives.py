"""Code-generation rules for the built-in directives.

Each handler receives the scanned ``Directive`` and the active
``CompilationContext`` and returns the text that replaces the directive.
Generated host code is wrapped in ``<?py ... ?>``.
"""
from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Callable, Dict, Mapping

from folio.core.exceptions import TemplateSyntaxError
from folio.core.templates.context import CompilationContext
from folio.core.templates.scanner import Directive, split_args
from folio.core.templates.tokenizer import CODE_CLOSE, CODE_OPEN

logger = logging.getLogger(__name__)

Handler = Callable[[Directive, CompilationContext], str]

LOOP_FLAG_PREFIX = "_loop_empty_"


def code(statement: str) -> str:
    return f"{CODE_OPEN} {statement} {CODE_CLOSE}"


def _require_args(directive: Directive, context: CompilationContext) -> str:
    if not directive.has_args or not directive.inner.strip():
        raise context.error(
            TemplateSyntaxError,
            f"@{directive.name} requires an argument list",
            directive.offset,
        )
    return directive.args_text or ""


def _isset_call(directive: Directive, context: CompilationContext) -> str:
    _require_args(directive, context)
    refs = split_args(directive.inner)
    getters = ", ".join(f"lambda: {ref}" for ref in refs)
    return f"isset({getters})"


# ========== Conditionals ==========


def compile_if(directive: Directive, context: CompilationContext) -> str:
    return code(f"if{_require_args(directive, context)}:")


def compile_elseif(directive: Directive, context: CompilationContext) -> str:
    return code(f"elif{_require_args(directive, context)}:")


def compile_else(directive: Directive, context: CompilationContext) -> str:
    return code("else:")


def compile_isset(directive: Directive, context: CompilationContext) -> str:
    return code(f"if {_isset_call(directive, context)}:")


def compile_missing(directive: Directive, context: CompilationContext) -> str:
    return code(f"if not {_isset_call(directive, context)}:")


def compile_end(directive: Directive, context: CompilationContext) -> str:
    """Shared closer for every block directive (``@endif``, ``@endfor``, ...)."""
    return code(directive.name)


# ========== Loops ==========


def compile_for(directive: Directive, context: CompilationContext) -> str:
    _require_args(directive, context)
    return code(f"for {directive.inner.strip()}:")


def compile_while(directive: Directive, context: CompilationContext) -> str:
    return code(f"while{_require_args(directive, context)}:")


def compile_loopelse(directive: Directive, context: CompilationContext) -> str:
    _require_args(directive, context)
    flag = f"{LOOP_FLAG_PREFIX}{context.next_loop_id()}"
    context.loop_stack.append(flag)
    return (
        code(f"{flag} = True")
        + code(f"for {directive.inner.strip()}:")
        + code(f"{flag} = False")
    )


def compile_empty(directive: Directive, context: CompilationContext) -> str:
    if not context.loop_stack or context.loop_stack[-1] is None:
        raise context.error(
            TemplateSyntaxError, "@empty without an open @loopelse", directive.offset
        )
    flag = context.loop_stack[-1]
    # Mark the fallback as opened so a second @empty is rejected.
    context.loop_stack[-1] = None
    return code("endfor") + code(f"if {flag}:")


def compile_endloop(directive: Directive, context: CompilationContext) -> str:
    if not context.loop_stack:
        raise context.error(
            TemplateSyntaxError, "@endloop without an open @loopelse", directive.offset
        )
    flag = context.loop_stack.pop()
    # Without @empty the @loopelse body is still an open for-loop.
    return code("endfor" if flag is not None else "endif")


def _guarded(keyword: str) -> Handler:
    def handler(directive: Directive, context: CompilationContext) -> str:
        if directive.has_args and directive.inner.strip():
            return code(f"if{directive.args_text}: {keyword}")
        return code(keyword)

    handler.__name__ = f"compile_{keyword}"
    return handler


compile_break = _guarded("break")
compile_continue = _guarded("continue")


# ========== Host code ==========


def compile_py(directive: Directive, context: CompilationContext) -> str:
    """``@py(stmt)`` emits one statement; bare ``@py`` opens a host-code block."""
    if directive.has_args:
        return code(directive.inner.strip())
    return f"{CODE_OPEN} "


def compile_endpy(directive: Directive, context: CompilationContext) -> str:
    return f" {CODE_CLOSE}"


# ========== Includes ==========


def _literal_name(arg: str) -> str | None:
    if len(arg) >= 2 and arg[0] == arg[-1] and arg[0] in ("'", '"'):
        return arg[1:-1]
    return None


def compile_include(directive: Directive, context: CompilationContext) -> str:
    """Compile the named template now and splice its compiled text inline."""
    args = split_args(_require_args(directive, context)[1:-1])
    name = _literal_name(args[0]) if args else None
    if not name:
        raise context.error(
            TemplateSyntaxError,
            "@include expects a quoted template name",
            directive.offset,
        )
    if context.include_compiler is None:
        raise context.error(
            TemplateSyntaxError,
            f"@include('{name}') is not available without a template compiler",
            directive.offset,
        )
    logger.debug("Including %s into %s", name, context.path)
    return context.include_compiler(name, context)


DEFAULT_HANDLERS: Mapping[str, Handler] = MappingProxyType(
    {
        "if": compile_if,
        "elseif": compile_elseif,
        "else": compile_else,
        "endif": compile_end,
        "isset": compile_isset,
        "endisset": compile_end,
        "missing": compile_missing,
        "endmissing": compile_end,
        "for": compile_for,
        "endfor": compile_end,
        "foreach": compile_for,
        "endforeach": compile_end,
        "while": compile_while,
        "endwhile": compile_end,
        "loopelse": compile_loopelse,
        "empty": compile_empty,
        "endloop": compile_endloop,
        "break": compile_break,
        "continue": compile_continue,
        "py": compile_py,
        "endpy": compile_endpy,
        "include": compile_include,
    }
)


def build_handlers(extra: Mapping[str, Handler] | None = None) -> Mapping[str, Handler]:
    """Return an immutable handler map with ``extra`` layered over the defaults."""
    handlers: Dict[str, Handler] = dict(DEFAULT_HANDLERS)
    if extra:
        handlers.update(extra)
    return MappingProxyType(handlers)


__all__ = [
    "Handler",
    "LOOP_FLAG_PREFIX",
    "DEFAULT_HANDLERS",
    "build_handlers",
    "code",
]
