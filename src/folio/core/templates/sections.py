"""Section markup: scanning, extraction, injection and clean-up.

Recognised forms (an ``@@`` prefix disables any of them):

- ``@section('name', 'value')``   inline section
- ``@section('name') ... @endsection``   block section (may contain ``@parent``)
- ``@section('name'):`` and ``@yield('name'[, 'default'])``   placeholders
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from folio.core.exceptions import TemplateSyntaxError
from folio.core.templates.scanner import match_balanced, split_args
from folio.core.utils.text import line_column

_TAG_RE = re.compile(r"(?<!@)\B@(section|yield|endsection)\b[ \t]*")
PARENT_RE = re.compile(r"(?<!@)\B@parent\b")


class SectionKind(str, Enum):
    INLINE = "inline"
    BLOCK = "block"
    BLOCK_WITH_PARENT = "block_with_parent"


@dataclass(frozen=True)
class Section:
    name: str
    kind: SectionKind
    content: str


class TagType(str, Enum):
    OPEN = "open"
    CLOSE = "close"
    INLINE = "inline"
    PLACEHOLDER = "placeholder"


@dataclass(frozen=True)
class SectionTag:
    type: TagType
    start: int
    end: int
    name: str = ""
    value: Optional[str] = None


@dataclass(frozen=True)
class SectionBlock:
    name: str
    start: int
    end: int
    content_start: int
    content_end: int
    depth: int

    def content(self, text: str) -> str:
        return text[self.content_start:self.content_end]


def _unquote(arg: str) -> Optional[str]:
    arg = arg.strip()
    if len(arg) >= 2 and arg[0] == arg[-1] and arg[0] in ("'", '"'):
        quote = arg[0]
        return arg[1:-1].replace("\\" + quote, quote)
    return None


def _syntax_error(text: str, offset: int, message: str, path: Optional[Path]) -> TemplateSyntaxError:
    line, column = line_column(text, offset)
    return TemplateSyntaxError(message, path=path, line=line, column=column)


def scan_tags(text: str, path: Optional[Path] = None) -> List[SectionTag]:
    """Return every section-related tag in ``text`` in document order."""
    tags: List[SectionTag] = []
    for match in _TAG_RE.finditer(text):
        keyword = match.group(1)
        if keyword == "endsection":
            tags.append(SectionTag(TagType.CLOSE, match.start(), match.end()))
            continue

        paren = match.end()
        if paren >= len(text) or text[paren] != "(":
            # ``@section`` without arguments is plain text.
            continue
        close = match_balanced(text, paren)
        if close is None:
            raise _syntax_error(
                text, match.start(), f"Unbalanced parentheses in @{keyword} arguments", path
            )

        args = split_args(text[paren + 1:close - 1])
        name = _unquote(args[0]) if args else None
        if not name:
            raise _syntax_error(
                text, match.start(), f"@{keyword} expects a quoted section name", path
            )
        value = None
        if len(args) > 1:
            raw = args[1]
            unquoted = _unquote(raw)
            value = unquoted if unquoted is not None else raw

        if keyword == "yield":
            tags.append(SectionTag(TagType.PLACEHOLDER, match.start(), close, name, value))
        elif close < len(text) and text[close] == ":":
            tags.append(SectionTag(TagType.PLACEHOLDER, match.start(), close + 1, name))
        elif value is not None:
            tags.append(SectionTag(TagType.INLINE, match.start(), close, name, value))
        else:
            tags.append(SectionTag(TagType.OPEN, match.start(), close, name))
    return tags


def find_blocks(text: str, path: Optional[Path] = None) -> List[SectionBlock]:
    """Pair ``@section('name')`` openers with their ``@endsection`` closers.

    Nested blocks are matched with a depth stack. The result is ordered by
    opener position.
    """
    stack: List[SectionTag] = []
    blocks: List[SectionBlock] = []
    for tag in scan_tags(text, path):
        if tag.type is TagType.OPEN:
            stack.append(tag)
        elif tag.type is TagType.CLOSE:
            if not stack:
                raise _syntax_error(text, tag.start, "@endsection without an open @section", path)
            opener = stack.pop()
            blocks.append(
                SectionBlock(
                    name=opener.name,
                    start=opener.start,
                    end=tag.end,
                    content_start=opener.end,
                    content_end=tag.start,
                    depth=len(stack),
                )
            )
    if stack:
        opener = stack[-1]
        raise _syntax_error(
            text, opener.start, f"@section('{opener.name}') is never closed", path
        )
    return sorted(blocks, key=lambda b: b.start)


def extract_sections(text: str, path: Optional[Path] = None) -> Dict[str, Section]:
    """Collect the sections a child template defines, keyed by name.

    Definitions are visited in document order, so the last one for a name wins.
    """
    found: List[Tuple[int, Section]] = []
    for tag in scan_tags(text, path):
        if tag.type is TagType.INLINE:
            found.append((tag.start, Section(tag.name, SectionKind.INLINE, tag.value or "")))
    for block in find_blocks(text, path):
        content = block.content(text)
        kind = SectionKind.BLOCK_WITH_PARENT if PARENT_RE.search(content) else SectionKind.BLOCK
        found.append((block.start, Section(block.name, kind, content)))

    sections: Dict[str, Section] = {}
    for _, section in sorted(found, key=lambda item: item[0]):
        sections.pop(section.name, None)
        sections[section.name] = section
    return sections


def default_content(text: str, name: str, path: Optional[Path] = None) -> str:
    """Return the parent's own content for section ``name`` (trimmed)."""
    for block in find_blocks(text, path):
        if block.name == name:
            return block.content(text).strip()
    for tag in scan_tags(text, path):
        if tag.name == name and tag.type in (TagType.INLINE, TagType.PLACEHOLDER) and tag.value:
            return tag.value.strip()
    return ""


def render_block(name: str, content: str) -> str:
    """Markup for an injected section; deeper children can still override it."""
    quoted = name.replace("'", "\\'")
    return f"@section('{quoted}')\n{content}\n@endsection"


def _replace_spans(text: str, spans: Iterable[Tuple[int, int]], replacement: str) -> str:
    """Replace non-overlapping spans, keeping the outermost when spans nest."""
    chosen: List[Tuple[int, int]] = []
    for start, end in sorted(spans, key=lambda s: (s[0], -s[1])):
        if chosen and start < chosen[-1][1]:
            continue
        chosen.append((start, end))

    out: List[str] = []
    pos = 0
    for start, end in chosen:
        out.append(text[pos:start])
        out.append(replacement)
        pos = end
    out.append(text[pos:])
    return "".join(out)


def inject_section(parent: str, section: Section, path: Optional[Path] = None) -> str:
    """Fill every placeholder and block for ``section.name`` in ``parent``."""
    content = section.content
    if section.kind is SectionKind.BLOCK_WITH_PARENT:
        inherited = default_content(parent, section.name, path)
        content = PARENT_RE.sub(lambda _m: inherited, content)

    spans: List[Tuple[int, int]] = [
        (tag.start, tag.end)
        for tag in scan_tags(parent, path)
        if tag.name == section.name and tag.type in (TagType.PLACEHOLDER, TagType.INLINE)
    ]
    spans.extend(
        (block.start, block.end) for block in find_blocks(parent, path) if block.name == section.name
    )
    if not spans:
        return parent
    return _replace_spans(parent, spans, render_block(section.name, content))


def finalize(text: str, path: Optional[Path] = None) -> str:
    """Collapse remaining blocks to their content and resolve leftover placeholders."""
    while True:
        blocks = [b for b in find_blocks(text, path) if b.depth == 0]
        if not blocks:
            break
        out: List[str] = []
        pos = 0
        for block in blocks:
            out.append(text[pos:block.start])
            out.append(block.content(text).strip())
            pos = block.end
        out.append(text[pos:])
        text = "".join(out)

    tags = [t for t in scan_tags(text, path) if t.type in (TagType.PLACEHOLDER, TagType.INLINE)]
    out = []
    pos = 0
    for tag in tags:
        out.append(text[pos:tag.start])
        out.append(tag.value or "")
        pos = tag.end
    out.append(text[pos:])
    return "".join(out)


__all__ = [
    "PARENT_RE",
    "Section",
    "SectionKind",
    "SectionTag",
    "SectionBlock",
    "TagType",
    "scan_tags",
    "find_blocks",
    "extract_sections",
    "default_content",
    "render_block",
    "inject_section",
    "finalize",
]
