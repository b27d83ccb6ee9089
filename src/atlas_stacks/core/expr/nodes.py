"""Nós da árvore de expressões (já parseada) do Atlas Stacks.

Cada nó é imutável e carrega o `SourceRange` de onde foi declarado, usado
apenas para diagnóstico. O evaluator percorre esta árvore recursivamente.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .values import Value


@dataclass(frozen=True)
class SourceRange:
    """Posição de um trecho de configuração (arquivo + linha/coluna, 1-based)."""

    origin: str
    line: Optional[int] = None
    column: Optional[int] = None

    def __str__(self) -> str:
        if self.line is None:
            return self.origin
        if self.column is None:
            return f"{self.origin}:{self.line}"
        return f"{self.origin}:{self.line},{self.column}"


@dataclass(frozen=True)
class Literal:
    value: Value
    range: Optional[SourceRange] = None


@dataclass(frozen=True)
class Template:
    """String com interpolações `${...}`; `parts` alterna texto e expressões."""

    parts: Tuple["Expr", ...]
    range: Optional[SourceRange] = None


@dataclass(frozen=True)
class Variable:
    name: str
    range: Optional[SourceRange] = None


@dataclass(frozen=True)
class GetAttr:
    target: "Expr"
    name: str
    range: Optional[SourceRange] = None


@dataclass(frozen=True)
class Index:
    target: "Expr"
    key: "Expr"
    range: Optional[SourceRange] = None


@dataclass(frozen=True)
class ListExpr:
    items: Tuple["Expr", ...]
    range: Optional[SourceRange] = None


@dataclass(frozen=True)
class MapExpr:
    entries: Tuple[Tuple[str, "Expr"], ...]
    range: Optional[SourceRange] = None


@dataclass(frozen=True)
class Call:
    name: str
    args: Tuple["Expr", ...]
    range: Optional[SourceRange] = None


Expr = Union[Literal, Template, Variable, GetAttr, Index, ListExpr, MapExpr, Call]


def traversal_name(expr: Expr) -> Optional[str]:
    """Nome pontuado de uma referência simples (`global.a.b`), ou None."""
    if isinstance(expr, Variable):
        return expr.name
    if isinstance(expr, GetAttr):
        base = traversal_name(expr.target)
        return f"{base}.{expr.name}" if base is not None else None
    return None
