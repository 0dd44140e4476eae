"""Template compiler: layouts, directives and echo tags to host code."""
from __future__ import annotations

from .compiler import TemplateCompiler
from .context import CompilationContext
from .echoes import EchoCompiler, compile_echoes
from .layouts import LayoutAssembler, TemplateSource
from .statements import StatementCompiler, compile_statements
from .tags import EchoKind, TagConfig, load_tag_config
from .tokenizer import Token, TokenKind, tokenize

__all__ = [
    "TemplateCompiler",
    "CompilationContext",
    "EchoCompiler",
    "compile_echoes",
    "LayoutAssembler",
    "TemplateSource",
    "StatementCompiler",
    "compile_statements",
    "EchoKind",
    "TagConfig",
    "load_tag_config",
    "Token",
    "TokenKind",
    "tokenize",
]
