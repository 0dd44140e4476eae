"""Per-compilation state threaded through every compiler stage."""
from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Tuple, Type

from folio.core.exceptions import TemplateError
from folio.core.templates.tags import TagConfig
from folio.core.utils.text import line_column

IncludeCompiler = Callable[[str, "CompilationContext"], str]


@dataclass(frozen=True)
class Segment:
    """A piece of compiled output.

    ``final`` segments were produced by a compiler stage and are never
    rescanned by later stages.
    """

    text: str
    final: bool = False
    offset: int = 0


@dataclass
class CompilationContext:
    """Mutable state owned by exactly one ``compile()`` call.

    The loop counter is shared with child contexts created for compile-time
    includes so flag names stay unique across the whole compiled unit.
    """

    tags: TagConfig = field(default_factory=TagConfig)
    path: Optional[Path] = None
    source: str = ""
    include_compiler: Optional[IncludeCompiler] = None
    include_stack: Tuple[str, ...] = ()
    counter: Iterator[int] = field(default_factory=lambda: itertools.count(1))
    loop_stack: List[Optional[str]] = field(default_factory=list)
    # True when ``source`` is a merged layout chain rather than the file at ``path``.
    assembled: bool = False

    def next_loop_id(self) -> int:
        return next(self.counter)

    def child(self, path: Path) -> "CompilationContext":
        """Context for compiling an included template."""
        return CompilationContext(
            tags=self.tags,
            path=path,
            include_compiler=self.include_compiler,
            include_stack=self.include_stack + (str(Path(path).resolve()),),
            counter=self.counter,
        )

    def error(
        self,
        exc_type: Type[TemplateError],
        message: str,
        offset: Optional[int] = None,
    ) -> TemplateError:
        """Build a template error located at ``offset`` within ``source``."""
        line = column = None
        if offset is not None and self.source:
            line, column = line_column(self.source, offset)
            if self.assembled:
                message = f"{message} (line and column count through the assembled layout)"
        return exc_type(
            message,
            path=self.path,
            line=line,
            column=column,
            context={"assembled": True} if self.assembled else None,
        )


__all__ = ["CompilationContext", "IncludeCompiler", "Segment"]
