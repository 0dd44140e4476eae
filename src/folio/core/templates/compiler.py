"""Template compilation entry point."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Optional

from folio.core.exceptions import (
    IncludeCycleError,
    TemplateNotFoundError,
    TemplateSyntaxError,
)
from folio.core.templates.context import CompilationContext
from folio.core.templates.directives import Handler
from folio.core.templates.echoes import EchoCompiler
from folio.core.templates.layouts import LayoutAssembler, PathResolver
from folio.core.templates.statements import StatementCompiler
from folio.core.templates.tags import TagConfig
from folio.core.templates.tokenizer import tokenize

logger = logging.getLogger(__name__)


class TemplateCompiler:
    """Compile template files into host code.

    Pipeline per call: layout assembly, then tokenization of the merged
    buffer, then directive and echo compilation of each literal run. Code
    runs are copied through unchanged.

    A compiler holds only immutable collaborators; every ``compile()`` call
    creates its own ``CompilationContext``, so one instance can be shared
    across threads.

    Args:
        resolver: Maps template names (``@extends``/``@include``) to paths.
        tags: Echo delimiters and escape helper name.
        handlers: Extra directive handlers layered over the built-in ones.
    """

    def __init__(
        self,
        resolver: PathResolver,
        *,
        tags: Optional[TagConfig] = None,
        handlers: Optional[Mapping[str, Handler]] = None,
    ) -> None:
        self.resolver = resolver
        self.tags = tags or TagConfig()
        self.assembler = LayoutAssembler(resolver)
        self.statements = StatementCompiler(handlers)
        self.echoes = EchoCompiler(self.tags)

    def new_context(self, path: Optional[Path] = None) -> CompilationContext:
        include_stack = (str(Path(path).resolve()),) if path is not None else ()
        return CompilationContext(
            tags=self.tags,
            path=path,
            include_compiler=self._compile_include,
            include_stack=include_stack,
        )

    def compile(self, root_path: Path | str, display_name: Optional[str] = None) -> str:
        """Compile the template at ``root_path`` and return the compiled unit."""
        path = Path(root_path)
        if not path.is_file():
            raise TemplateNotFoundError(display_name or str(path), path=path)
        logger.debug("Compiling %s (%s)", display_name or path.name, path)
        return self._compile_path(path, self.new_context(path))

    def compile_string(self, text: str, context: Optional[CompilationContext] = None) -> str:
        """Compile an in-memory buffer; no layout assembly is performed."""
        context = context or self.new_context()
        context.source = text
        compiled = "".join(
            token.text if token.is_code else self._compile_literal(token.text, token.offset, context)
            for token in tokenize(text)
        )
        if context.loop_stack:
            raise context.error(TemplateSyntaxError, "@loopelse without a closing @endloop")
        return compiled

    def _compile_literal(self, text: str, offset: int, context: CompilationContext) -> str:
        # Directives first so their generated code is never rescanned for echo tags.
        segments = self.statements.compile_segments(text, context, offset)
        segments = self.echoes.compile_segments(segments)
        return "".join(segment.text for segment in segments)

    def _compile_path(self, path: Path, context: CompilationContext) -> str:
        sources = self.assembler.chain(path)
        context.assembled = len(sources) > 1
        return self.compile_string(self.assembler.merge(sources), context)

    def _compile_include(self, name: str, context: CompilationContext) -> str:
        path = Path(self.resolver(name))
        if not path.is_file():
            raise TemplateNotFoundError(name, path=path, referenced_from=context.path)
        if str(path.resolve()) in context.include_stack:
            chain = list(context.include_stack) + [str(path.resolve())]
            raise IncludeCycleError("Circular @include", chain=chain, path=context.path)
        return self._compile_path(path, context.child(path))


__all__ = ["TemplateCompiler"]
