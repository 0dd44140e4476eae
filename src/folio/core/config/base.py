"""Base class for domain-specific configuration accessors.

Provides a standardized pattern for domain configs with:
- Consistent repo_root handling
- Type-safe section access
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from functools import cached_property
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .manager import ConfigManager


class BaseDomainConfig(ABC):
    """Abstract base class for domain-specific configuration accessors.

    Usage:
        class MyConfig(BaseDomainConfig):
            def _config_section(self) -> str:
                return "mySection"

            @cached_property
            def my_setting(self) -> str:
                return self.section.get("mySetting", "default")

        cfg = MyConfig(repo_root=Path("/path/to/project"))
        print(cfg.my_setting)
    """

    def __init__(
        self,
        repo_root: Optional[Path] = None,
        *,
        config: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Initialize domain config.

        Args:
            repo_root: Project root path. Defaults to the current directory.
            config: Already-merged configuration. Loaded via ConfigManager if None.
        """
        self._repo_root = Path(repo_root) if repo_root is not None else None
        if config is None:
            config = ConfigManager(self._repo_root).load_config()
        self._config: Dict[str, Any] = dict(config)

    @property
    def repo_root(self) -> Path:
        """Get the project root path."""
        return self._repo_root or Path.cwd()

    @abstractmethod
    def _config_section(self) -> str:
        """Return the top-level config key for this domain."""
        ...

    @cached_property
    def section(self) -> Dict[str, Any]:
        """Get this domain's configuration section (empty dict if missing)."""
        return self._config.get(self._config_section(), {}) or {}


__all__ = ["BaseDomainConfig"]
