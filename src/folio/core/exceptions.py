from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping, Optional


class FolioError(Exception):
    """Base exception for the Folio template engine."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class TemplateConfigError(FolioError, ValueError):
    """Raised when template settings are missing, malformed or ambiguous."""


class TemplateError(FolioError):
    """Base class for errors tied to a template source.

    Carries the offending path and, when known, a 1-based line/column pair
    computed from the offset in the buffer being compiled.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Optional[Path | str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if path is not None:
            ctx.setdefault("path", str(path))
        if line is not None:
            ctx.setdefault("line", line)
        if column is not None:
            ctx.setdefault("column", column)

        location = ""
        if path is not None:
            location = f" in {path}"
            if line is not None:
                location += f":{line}"
                if column is not None:
                    location += f":{column}"

        FolioError.__init__(self, f"{message}{location}", context=ctx)
        self.path = str(path) if path is not None else None
        self.line = line
        self.column = column


class TemplateNotFoundError(TemplateError, FileNotFoundError):
    """Raised when a root, extended or included template file does not exist."""

    def __init__(
        self,
        name: str,
        *,
        path: Optional[Path | str] = None,
        referenced_from: Optional[Path | str] = None,
    ) -> None:
        ctx: Dict[str, Any] = {"name": name}
        if referenced_from is not None:
            ctx["referenced_from"] = str(referenced_from)
        TemplateError.__init__(
            self,
            f"The view file named '{name}' cannot be found",
            path=path,
            context=ctx,
        )
        self.name = name


class TemplateSyntaxError(TemplateError):
    """Raised when template markup cannot be compiled."""


class UnbalancedDirectiveArgumentsError(TemplateSyntaxError):
    """Raised when a directive's parenthesized arguments never close."""


class TemplateCycleError(TemplateError):
    """Raised when template references loop back onto themselves."""

    def __init__(self, message: str, *, chain: list[str], path: Optional[Path | str] = None) -> None:
        TemplateError.__init__(
            self,
            f"{message}: {' -> '.join(chain)}",
            path=path,
            context={"chain": list(chain)},
        )
        self.chain = list(chain)


class ExtendsCycleError(TemplateCycleError):
    """Raised when an @extends chain revisits a template."""


class IncludeCycleError(TemplateCycleError):
    """Raised when compile-time @include recursion revisits a template."""


class TemplateRenderError(TemplateError):
    """Raised when a compiled unit cannot be turned into output."""


__all__ = [
    "FolioError",
    "TemplateConfigError",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateSyntaxError",
    "UnbalancedDirectiveArgumentsError",
    "TemplateCycleError",
    "ExtendsCycleError",
    "IncludeCycleError",
    "TemplateRenderError",
]
