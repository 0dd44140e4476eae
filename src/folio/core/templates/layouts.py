"""Layout inheritance: follow ``@extends`` chains and merge sections."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from folio.core.exceptions import ExtendsCycleError, TemplateNotFoundError
from folio.core.templates.sections import extract_sections, finalize, inject_section

logger = logging.getLogger(__name__)

EXTENDS_RE = re.compile(r"""^\s*(?<!@)@extends\(\s*['"]([^'"]+)['"]\s*\)""", re.MULTILINE)

PathResolver = Callable[[str], Path]


@dataclass(frozen=True)
class TemplateSource:
    path: Path
    raw_text: str

    @property
    def parent_name(self) -> Optional[str]:
        match = EXTENDS_RE.search(self.raw_text)
        return match.group(1) if match else None


def read_source(path: Path, *, name: Optional[str] = None, referenced_from: Optional[Path] = None) -> TemplateSource:
    """Read a template file, raising TemplateNotFoundError when it is missing."""
    path = Path(path)
    if not path.is_file():
        raise TemplateNotFoundError(name or str(path), path=path, referenced_from=referenced_from)
    return TemplateSource(path=path, raw_text=path.read_text(encoding="utf-8"))


class LayoutAssembler:
    """Resolve an extends chain and inject each child's sections into its parent.

    Args:
        resolver: Maps a template name from ``@extends('name')`` to a file path.
    """

    def __init__(self, resolver: PathResolver) -> None:
        self.resolver = resolver

    def chain(self, root_path: Path) -> List[TemplateSource]:
        """Return the layout chain, child first.

        Raises:
            ExtendsCycleError: if a template is reached twice.
            TemplateNotFoundError: if any template in the chain is missing.
        """
        sources: List[TemplateSource] = []
        visited: List[Path] = []
        source = read_source(Path(root_path))
        while True:
            resolved = source.path.resolve()
            if resolved in visited:
                names = [str(p) for p in visited] + [str(resolved)]
                raise ExtendsCycleError("Circular @extends chain", chain=names, path=source.path)
            visited.append(resolved)
            sources.append(source)

            parent_name = source.parent_name
            if parent_name is None:
                return sources
            parent_path = self.resolver(parent_name)
            logger.debug("%s extends %s (%s)", source.path, parent_name, parent_path)
            source = read_source(parent_path, name=parent_name, referenced_from=source.path)

    def assemble(self, root_path: Path) -> str:
        """Return the merged buffer for ``root_path``.

        A template without ``@extends`` is returned unchanged. Otherwise the
        sections of every child are injected into the layout above it, from
        the root layout down to ``root_path``, and leftover placeholders are
        resolved to their defaults.
        """
        return self.merge(self.chain(root_path))

    def merge(self, sources: List[TemplateSource]) -> str:
        """Merge a child-first chain as returned by ``chain()``."""
        if len(sources) == 1:
            return sources[0].raw_text

        root = sources[-1]
        buffer = root.raw_text
        for child in reversed(sources[:-1]):
            sections = extract_sections(child.raw_text, child.path)
            logger.debug(
                "Injecting %d section(s) from %s: %s",
                len(sections),
                child.path,
                ", ".join(sections),
            )
            for section in sections.values():
                buffer = inject_section(buffer, section, root.path)
        return finalize(buffer, root.path)


__all__ = ["EXTENDS_RE", "LayoutAssembler", "PathResolver", "TemplateSource", "read_source"]
