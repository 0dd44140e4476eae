"""Path resolution for named templates."""
from __future__ import annotations

from .views import ViewPathResolver

__all__ = ["ViewPathResolver"]
