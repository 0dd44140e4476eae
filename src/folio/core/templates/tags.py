"""Delimiter configuration for echo tags."""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from typing import Any, Mapping, Sequence, Tuple

from folio.core.exceptions import TemplateConfigError

DEFAULT_ECHO_TAGS = ("{{", "}}")
DEFAULT_RAW_TAGS = ("{{{", "}}}")
DEFAULT_ESCAPE_FUNCTION = "escape"

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class EchoKind(str, Enum):
    ESCAPED = "escaped"
    RAW = "raw"


def _tag_pair(value: Any, setting: str, default: Tuple[str, str]) -> Tuple[str, str]:
    if value is None:
        return default
    if not isinstance(value, Sequence) or isinstance(value, str) or len(value) != 2:
        raise TemplateConfigError(
            f"templates.{setting} must be a pair of [open, close] strings",
            context={"setting": setting, "value": value},
        )
    open_tag, close_tag = (str(v) for v in value)
    if not open_tag or not close_tag:
        raise TemplateConfigError(
            f"templates.{setting} delimiters must not be empty",
            context={"setting": setting},
        )
    return open_tag, close_tag


@dataclass(frozen=True)
class TagConfig:
    """Echo delimiters plus the name of the escape helper used by compiled output.

    Instances are immutable and threaded through one compilation.
    """

    escaped_open: str = DEFAULT_ECHO_TAGS[0]
    escaped_close: str = DEFAULT_ECHO_TAGS[1]
    raw_open: str = DEFAULT_RAW_TAGS[0]
    raw_close: str = DEFAULT_RAW_TAGS[1]
    escape_function: str = DEFAULT_ESCAPE_FUNCTION

    def __post_init__(self) -> None:
        if self.escaped_open == self.raw_open:
            raise TemplateConfigError(
                "Escaped and raw echo tags must use different opening delimiters",
                context={"open": self.escaped_open},
            )
        if not _IDENTIFIER.match(self.escape_function):
            raise TemplateConfigError(
                f"Invalid escape function name: {self.escape_function!r}",
                context={"escape_function": self.escape_function},
            )

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any] | None) -> "TagConfig":
        """Build a TagConfig from the ``templates`` settings section."""
        settings = settings or {}
        escaped = _tag_pair(settings.get("echo_tags"), "echo_tags", DEFAULT_ECHO_TAGS)
        raw = _tag_pair(settings.get("raw_tags"), "raw_tags", DEFAULT_RAW_TAGS)
        escape_function = str(settings.get("escape_function") or DEFAULT_ESCAPE_FUNCTION)
        return cls(
            escaped_open=escaped[0],
            escaped_close=escaped[1],
            raw_open=raw[0],
            raw_close=raw[1],
            escape_function=escape_function,
        )

    def delimiters(self, kind: EchoKind) -> Tuple[str, str]:
        if kind is EchoKind.RAW:
            return self.raw_open, self.raw_close
        return self.escaped_open, self.escaped_close

    @cached_property
    def echo_order(self) -> Tuple[EchoKind, EchoKind]:
        """Order of the echo passes.

        A kind whose opening delimiter is a strict prefix of the other kind's
        opener is compiled last, so it never matches inside the longer tag.
        """
        if self.raw_open.startswith(self.escaped_open):
            return (EchoKind.RAW, EchoKind.ESCAPED)
        if self.escaped_open.startswith(self.raw_open):
            return (EchoKind.ESCAPED, EchoKind.RAW)
        return (EchoKind.RAW, EchoKind.ESCAPED)


def load_tag_config(settings: Mapping[str, Any] | None = None) -> TagConfig:
    """Pure settings -> TagConfig conversion with documented defaults."""
    return TagConfig.from_settings(settings)


__all__ = [
    "DEFAULT_ECHO_TAGS",
    "DEFAULT_RAW_TAGS",
    "DEFAULT_ESCAPE_FUNCTION",
    "EchoKind",
    "TagConfig",
    "load_tag_config",
]
