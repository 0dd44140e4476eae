"""
Folio - layout-aware template compiler

Folio compiles directive/echo markup with multi-level layout inheritance into
Python-hosted template code and renders it against a variable environment.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
