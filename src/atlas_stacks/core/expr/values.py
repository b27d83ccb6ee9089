"""
Valores avaliados (EvaluatedValue) do Atlas Stacks.

Toda avaliação de expressão produz um `Value`: uma variante fechada e
etiquetada (tagged union) sobre os tipos:

    string | number | bool | list | map | null

Princípios fundamentais:
    - O conjunto de tipos é fechado (`ValueKind`)
    - Acessores (`as_string`, `as_list`, ...) validam a etiqueta e falham
      explicitamente em caso de divergência
    - Não existe coerção implícita entre tipos
    - Valores são imutáveis após criados

Invariantes:
    - `data` de um LIST é sempre uma tupla de Value
    - `data` de um MAP é sempre um dict str -> Value, nunca mutado
    - `data` de um NUMBER nunca é bool

Limites explícitos:
    - Não avalia expressões
    - Não conhece stacks, globals ou git
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Tuple, Union


class ValueKind(str, Enum):
    """Etiquetas canônicas de `Value`; o valor textual é o nome amigável do tipo."""

    STRING = "string"
    NUMBER = "number"
    BOOL = "bool"
    LIST = "list"
    MAP = "map"
    NULL = "null"


Number = Union[int, float]


class ValueTypeError(TypeError):
    """Acesso a um Value com etiqueta diferente da esperada."""


@dataclass(frozen=True, eq=True)
class Value:
    """Valor avaliado: etiqueta (`kind`) + dado Python correspondente."""

    kind: ValueKind
    data: Any = None

    # -----------------------------
    # Construtores
    # -----------------------------
    @staticmethod
    def string(s: str) -> "Value":
        if not isinstance(s, str):
            raise ValueTypeError(f"string value requires str, got {type(s).__name__}")
        return Value(ValueKind.STRING, s)

    @staticmethod
    def number(n: Number) -> "Value":
        if isinstance(n, bool) or not isinstance(n, (int, float)):
            raise ValueTypeError(f"number value requires int/float, got {type(n).__name__}")
        return Value(ValueKind.NUMBER, n)

    @staticmethod
    def bool_(b: bool) -> "Value":
        if not isinstance(b, bool):
            raise ValueTypeError(f"bool value requires bool, got {type(b).__name__}")
        return Value(ValueKind.BOOL, b)

    @staticmethod
    def list_(items: Iterable["Value"]) -> "Value":
        elems = tuple(items)
        for e in elems:
            if not isinstance(e, Value):
                raise ValueTypeError(f"list elements must be Value, got {type(e).__name__}")
        return Value(ValueKind.LIST, elems)

    @staticmethod
    def map_(entries: Mapping[str, "Value"]) -> "Value":
        copied: Dict[str, Value] = {}
        for k, v in entries.items():
            if not isinstance(k, str):
                raise ValueTypeError(f"map keys must be str, got {type(k).__name__}")
            if not isinstance(v, Value):
                raise ValueTypeError(f"map values must be Value, got {type(v).__name__}")
            copied[k] = v
        return Value(ValueKind.MAP, MappingProxyType(copied))

    @staticmethod
    def null() -> "Value":
        return NULL

    # -----------------------------
    # Acessores (validam a etiqueta)
    # -----------------------------
    def _expect(self, kind: ValueKind) -> None:
        if self.kind is not kind:
            raise ValueTypeError(f"expected {kind.value}, got {self.type_name()}")

    def as_string(self) -> str:
        self._expect(ValueKind.STRING)
        return self.data

    def as_number(self) -> Number:
        self._expect(ValueKind.NUMBER)
        return self.data

    def as_bool(self) -> bool:
        self._expect(ValueKind.BOOL)
        return self.data

    def as_list(self) -> Tuple["Value", ...]:
        self._expect(ValueKind.LIST)
        return self.data

    def as_map(self) -> Mapping[str, "Value"]:
        self._expect(ValueKind.MAP)
        return self.data

    def is_null(self) -> bool:
        return self.kind is ValueKind.NULL

    def type_name(self) -> str:
        """Nome amigável do tipo, usado em mensagens de erro."""
        if self.kind is ValueKind.LIST:
            inner = {e.type_name() for e in self.data}
            if len(inner) == 1:
                return f"list of {inner.pop()}"
        return self.kind.value

    # -----------------------------
    # Conversões Python <-> Value
    # -----------------------------
    @staticmethod
    def from_python(obj: Any) -> "Value":
        """Converte literais (YAML/JSON já carregados) para Value."""
        if obj is None:
            return NULL
        if isinstance(obj, Value):
            return obj
        if isinstance(obj, bool):
            return Value.bool_(obj)
        if isinstance(obj, (int, float)):
            return Value.number(obj)
        if isinstance(obj, str):
            return Value.string(obj)
        if isinstance(obj, (list, tuple)):
            return Value.list_(Value.from_python(e) for e in obj)
        if isinstance(obj, Mapping):
            return Value.map_({str(k): Value.from_python(v) for k, v in obj.items()})
        raise ValueTypeError(f"unsupported literal type: {type(obj).__name__}")

    def to_python(self) -> Any:
        if self.kind is ValueKind.LIST:
            return [e.to_python() for e in self.data]
        if self.kind is ValueKind.MAP:
            return {k: v.to_python() for k, v in self.data.items()}
        return self.data

    def __repr__(self) -> str:
        return f"Value({self.kind.value}, {self.to_python()!r})"


NULL = Value(ValueKind.NULL, None)
