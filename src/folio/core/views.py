"""High-level view API: resolve, compile and render named templates."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from folio.core.config.domains.templates import TemplatesConfig
from folio.core.exceptions import TemplateNotFoundError
from folio.core.paths.views import ViewPathResolver
from folio.core.rendering.renderer import Renderer
from folio.core.templates.compiler import TemplateCompiler
from folio.core.templates.directives import Handler

logger = logging.getLogger(__name__)


class Views:
    """Wire configuration, path resolution, compilation and rendering together.

    Example:
        >>> views = Views(repo_root=Path("."))
        >>> views.share(site="Folio")
        >>> html = views.render("pages/home", {"user": user})
    """

    def __init__(
        self,
        repo_root: Optional[Path] = None,
        *,
        config: Optional[TemplatesConfig] = None,
        helpers: Optional[Mapping[str, Any]] = None,
        handlers: Optional[Mapping[str, Handler]] = None,
    ) -> None:
        self.config = config or TemplatesConfig(repo_root)
        self.resolver: ViewPathResolver = self.config.resolver()
        self.compiler = TemplateCompiler(self.resolver, tags=self.config.tags, handlers=handlers)
        self.renderer = Renderer(helpers, escape_function=self.config.tags.escape_function)
        self._shared: Dict[str, Any] = {}

    def share(self, **data: Any) -> "Views":
        """Make ``data`` available to every template rendered by this instance."""
        self._shared.update(data)
        return self

    @property
    def shared(self) -> Dict[str, Any]:
        return dict(self._shared)

    def path(self, name: str) -> Path:
        return self.resolver.resolve(name)

    def exists(self, name: str) -> bool:
        return self.resolver.find(name) is not None

    def compile(self, name: str) -> str:
        """Compile the named view and return the compiled unit."""
        path = self.path(name)
        if not path.is_file():
            raise TemplateNotFoundError(name, path=path)
        return self.compiler.compile(path, name)

    def render(self, name: str, data: Optional[Mapping[str, Any]] = None) -> str:
        """Compile and render the named view with shared data plus ``data``."""
        compiled = self.compile(name)
        variables = {**self._shared, **dict(data or {})}
        logger.debug("Rendering view %s with %d variable(s)", name, len(variables))
        return self.renderer.render(compiled, variables, name=name)


__all__ = ["Views"]
