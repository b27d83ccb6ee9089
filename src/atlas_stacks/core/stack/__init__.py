"""
Stacks: descoberta, globals, namespace de avaliação e resolução de `watch`.
"""

from .globals import load_globals
from .namespace import build_namespace
from .stack import Stack, list_stacks, load_stack
from .watch import resolve_watches

__all__ = [
    "Stack",
    "build_namespace",
    "list_stacks",
    "load_globals",
    "load_stack",
    "resolve_watches",
]
