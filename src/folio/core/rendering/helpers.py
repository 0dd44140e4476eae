"""Runtime helpers available to every compiled template."""
from __future__ import annotations

from typing import Any, Callable, List

from markupsafe import escape as _markup_escape

_UNSET_ERRORS = (NameError, AttributeError, KeyError, IndexError, TypeError)


def escape(value: Any) -> str:
    """HTML-escape ``value``; None renders as an empty string."""
    if value is None:
        return ""
    return str(_markup_escape(value))


def isset(*getters: Callable[[], Any]) -> bool:
    """True when every getter evaluates without lookup errors to a non-None value."""
    for getter in getters:
        try:
            if getter() is None:
                return False
        except _UNSET_ERRORS:
            return False
    return True


def make_echo(parts: List[str]) -> Callable[[Any], None]:
    def echo(value: Any) -> None:
        if value is not None:
            parts.append(str(value))

    return echo


__all__ = ["escape", "isset", "make_echo"]
