"""Template engine configuration accessor."""
from __future__ import annotations

from functools import cached_property
from typing import List

from folio.core.config.base import BaseDomainConfig
from folio.core.paths.views import ViewPathResolver
from folio.core.templates.tags import TagConfig


class TemplatesConfig(BaseDomainConfig):
    """Accessor for the ``templates`` settings section."""

    def _config_section(self) -> str:
        return "templates"

    @cached_property
    def tags(self) -> TagConfig:
        return TagConfig.from_settings(self.section)

    @cached_property
    def view_paths(self) -> List[str]:
        return [str(p) for p in (self.section.get("view_paths") or [])]

    @cached_property
    def separator(self) -> str:
        return str(self.section.get("separator") or "/")

    @cached_property
    def extension(self) -> str:
        return str(self.section.get("extension", ".html"))

    @cached_property
    def default_dir(self) -> str:
        return str(self.section.get("default_dir") or "views")

    def resolver(self) -> ViewPathResolver:
        """Build a view path resolver rooted at the project root."""
        return ViewPathResolver(
            self.repo_root,
            view_paths=self.view_paths,
            separator=self.separator,
            extension=self.extension,
            default_dir=self.default_dir,
        )


__all__ = ["TemplatesConfig"]
