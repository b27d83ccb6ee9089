"""
Linguagem de expressões do Atlas Stacks.

Componentes:
    - values    → `Value`, variante etiquetada dos valores avaliados
    - nodes     → árvore de expressões já parseada (com `SourceRange`)
    - parser    → texto -> árvore (descida recursiva)
    - functions → registro estático das funções `tm_*`
    - evaluator → árvore + namespace -> `Value`

O evaluator é compartilhado pelo resolvedor de watch, pelo loader de
globals e pelo loader de run env.
"""

from .evaluator import Namespace, evaluate
from .functions import FUNCTIONS
from .nodes import Expr, SourceRange
from .parser import ExpressionSyntaxError, parse_expression
from .values import NULL, Value, ValueKind, ValueTypeError

__all__ = [
    "Expr",
    "ExpressionSyntaxError",
    "FUNCTIONS",
    "NULL",
    "Namespace",
    "SourceRange",
    "Value",
    "ValueKind",
    "ValueTypeError",
    "evaluate",
    "parse_expression",
]
