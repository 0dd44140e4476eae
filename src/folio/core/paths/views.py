"""Resolve dotted/slashed view names to template files."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)


class ViewPathResolver:
    """Map a view name such as ``layouts/base`` onto a file under the project root.

    Configured ``view_paths`` are searched in order; the first existing file
    wins. When none matches, the path under ``default_dir`` is returned even if
    it does not exist so the caller can report the missing template.
    """

    def __init__(
        self,
        root: Path,
        *,
        view_paths: Iterable[str] = (),
        separator: str = "/",
        extension: str = ".html",
        default_dir: str = "views",
    ) -> None:
        self.root = Path(root)
        self.separator = separator or "/"
        self.extension = extension
        self.default_dir = default_dir
        self.view_paths = self._normalize_view_paths(view_paths)

    def _normalize_view_paths(self, view_paths: Iterable[str]) -> List[str]:
        seen: List[str] = []
        default = self.default_dir.strip("/\\")
        for raw in view_paths:
            cleaned = str(raw).strip().strip("/\\")
            if not cleaned or cleaned == default or cleaned in seen:
                continue
            seen.append(cleaned)
        return seen

    def relative_path(self, name: str) -> Path:
        """Return the template path for ``name`` relative to a search root."""
        parts = [p for p in name.strip().split(self.separator) if p]
        if not parts:
            raise ValueError(f"Invalid view name: {name!r}")
        rel = Path(*parts)
        return rel.with_name(rel.name + self.extension)

    def search_roots(self) -> List[Path]:
        roots = [self.root / p for p in self.view_paths]
        roots.append(self.root / self.default_dir)
        return roots

    def find(self, name: str) -> Optional[Path]:
        """Return the first existing file for ``name``, or None."""
        rel = self.relative_path(name)
        for base in self.search_roots():
            candidate = base / rel
            if candidate.is_file():
                return candidate
        return None

    def resolve(self, name: str) -> Path:
        """Resolve ``name`` to a template path, falling back to ``default_dir``."""
        found = self.find(name)
        if found is not None:
            return found
        fallback = self.root / self.default_dir / self.relative_path(name)
        logger.debug("View %s not found in search roots, falling back to %s", name, fallback)
        return fallback

    __call__ = resolve


__all__ = ["ViewPathResolver"]
