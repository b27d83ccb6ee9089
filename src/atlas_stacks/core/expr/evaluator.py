"""
Evaluator de expressões do Atlas Stacks (Value Evaluator).

Este módulo avalia uma expressão já parseada contra um namespace de
variáveis, produzindo um `Value` tipado.

Contrato:
    evaluate(expr, namespace, basedir=...) -> Value    (ou EvalError)

Princípios fundamentais:
    - Avaliação por descida recursiva sobre a árvore de nós
    - Argumentos de funções são avaliados antes da chamada
    - Funções resolvidas no registro estático `FUNCTIONS`
    - Sem coerção implícita: o tipo produzido é devolvido como está;
      rejeitar tipos errados é responsabilidade do chamador

Invariantes:
    - O namespace nunca é mutado durante a avaliação
    - Avaliações independentes não compartilham estado e podem rodar
      em paralelo (threads diferentes, stacks diferentes)
    - O único efeito externo possível é a leitura de arquivo de `tm_file`

Limites explícitos:
    - Não parseia configuração (ver `core.config.loader`)
    - Não conhece stacks, globals ou git
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from atlas_stacks.core.exceptions import EvalError

from .functions import FUNCTIONS, FunctionCallError, format_number
from .nodes import (
    Call,
    Expr,
    GetAttr,
    Index,
    ListExpr,
    Literal,
    MapExpr,
    SourceRange,
    Template,
    Variable,
)
from .parser import parse_expression
from .values import Value, ValueKind


Namespace = Mapping[str, Value]


def _error(message: str, rng: Optional[SourceRange]) -> EvalError:
    details: Dict[str, Any] = {}
    if rng is not None:
        details["range"] = str(rng)
        message = f"{rng}: {message}"
    return EvalError(message=message, details=details)


def _is_whole(n: Union[int, float]) -> bool:
    # ints muito grandes não convertem para float
    return isinstance(n, int) or n.is_integer()


class _Evaluator:
    def __init__(self, namespace: Namespace, basedir: Path) -> None:
        self.namespace = namespace
        self.basedir = basedir

    def eval(self, node: Expr) -> Value:
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Variable):
            if node.name not in self.namespace:
                raise _error(f"unknown variable '{node.name}'", node.range)
            return self.namespace[node.name]
        if isinstance(node, GetAttr):
            return self._get_attr(node)
        if isinstance(node, Index):
            return self._index(node)
        if isinstance(node, ListExpr):
            return Value.list_(self.eval(item) for item in node.items)
        if isinstance(node, MapExpr):
            return Value.map_({key: self.eval(value) for key, value in node.entries})
        if isinstance(node, Template):
            return Value.string("".join(self._render(part) for part in node.parts))
        if isinstance(node, Call):
            return self._call(node)
        raise TypeError(f"unsupported expression node: {type(node).__name__}")

    def _get_attr(self, node: GetAttr) -> Value:
        target = self.eval(node.target)
        if target.kind is not ValueKind.MAP:
            raise _error(f"cannot access attribute '{node.name}' on {target.type_name()}", node.range)
        entries = target.as_map()
        if node.name not in entries:
            raise _error(f"{_describe(node.target)} has no attribute '{node.name}'", node.range)
        return entries[node.name]

    def _index(self, node: Index) -> Value:
        target = self.eval(node.target)
        key = self.eval(node.key)
        if target.kind is ValueKind.LIST:
            if key.kind is not ValueKind.NUMBER or not _is_whole(key.data):
                raise _error(f"list index must be a whole number, got {key.type_name()}", node.range)
            items = target.as_list()
            i = int(key.data)
            if i < 0 or i >= len(items):
                raise _error(f"index {i} out of range for list of length {len(items)}", node.range)
            return items[i]
        if target.kind is ValueKind.MAP:
            if key.kind is not ValueKind.STRING:
                raise _error(f"map key must be a string, got {key.type_name()}", node.range)
            entries = target.as_map()
            if key.data not in entries:
                raise _error(f"key '{key.data}' not found", node.range)
            return entries[key.data]
        raise _error(f"cannot index {target.type_name()}", node.range)

    def _render(self, part: Expr) -> str:
        value = self.eval(part)
        if value.kind is ValueKind.STRING:
            return value.data
        if value.kind is ValueKind.NUMBER:
            return format_number(value.data)
        if value.kind is ValueKind.BOOL:
            return "true" if value.data else "false"
        raise _error(f"cannot interpolate {value.type_name()} into a string", getattr(part, "range", None))

    def _call(self, node: Call) -> Value:
        fn = FUNCTIONS.get(node.name)
        if fn is None:
            raise _error(f"unknown function '{node.name}'", node.range)
        args: List[Value] = [self.eval(arg) for arg in node.args]
        try:
            return fn(args, self.basedir)
        except FunctionCallError as e:
            raise _error(str(e), node.range) from e


def _describe(node: Expr) -> str:
    if isinstance(node, Variable):
        return node.name
    if isinstance(node, GetAttr):
        return f"{_describe(node.target)}.{node.name}"
    return "value"


def evaluate(
    expr: Union[Expr, str],
    namespace: Namespace,
    *,
    basedir: Union[str, Path] = ".",
) -> Value:
    """
    Avalia uma expressão contra um namespace.

    Args:
        expr: árvore já parseada, ou texto (parseado aqui).
        namespace: variáveis de topo (ex.: `global`, `env`, `stack`).
        basedir: diretório base de `tm_file` (diretório do arquivo que
            declarou a expressão, não a raiz do projeto).

    Returns:
        Value: valor tipado produzido pela expressão.

    Raises:
        EvalError: referência não resolvida, erro de função ou leitura.
        ExpressionSyntaxError: se `expr` for texto inválido.
    """
    node = parse_expression(expr) if isinstance(expr, str) else expr
    return _Evaluator(namespace, Path(basedir)).eval(node)
