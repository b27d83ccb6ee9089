"""
Funções embutidas da linguagem de expressões.

As funções são registradas em um mapeamento estático nome -> implementação
(`FUNCTIONS`). Cada implementação recebe os argumentos já avaliados
(`Value`) e o diretório base da avaliação (diretório do arquivo que
declarou a expressão), e devolve um `Value`.

Funções disponíveis (v1):
    - tm_upper(s), tm_lower(s), tm_trimspace(s)
    - tm_replace(s, old, new)
    - tm_split(sep, s), tm_join(sep, list)
    - tm_concat(list, ...)
    - tm_length(list | map | string)
    - tm_tostring(string | number | bool)
    - tm_file(path)  (única função com acesso ao filesystem, somente leitura)

Falhas levantam `FunctionCallError`; o evaluator a converte em `EvalError`
anotado com a posição da chamada.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Sequence

from .values import Value, ValueKind, ValueTypeError


class FunctionCallError(Exception):
    """Argumentos inválidos ou falha durante a execução de uma função embutida."""


Function = Callable[[Sequence[Value], Path], Value]


def _arity(name: str, args: Sequence[Value], n: int) -> None:
    if len(args) != n:
        plural = "argument" if n == 1 else "arguments"
        raise FunctionCallError(f"{name}() takes exactly {n} {plural}, got {len(args)}")


def _string_arg(name: str, args: Sequence[Value], i: int) -> str:
    try:
        return args[i].as_string()
    except ValueTypeError as e:
        raise FunctionCallError(f"{name}() argument {i + 1}: {e}") from e


def _upper(args: Sequence[Value], basedir: Path) -> Value:
    _arity("tm_upper", args, 1)
    return Value.string(_string_arg("tm_upper", args, 0).upper())


def _lower(args: Sequence[Value], basedir: Path) -> Value:
    _arity("tm_lower", args, 1)
    return Value.string(_string_arg("tm_lower", args, 0).lower())


def _trimspace(args: Sequence[Value], basedir: Path) -> Value:
    _arity("tm_trimspace", args, 1)
    return Value.string(_string_arg("tm_trimspace", args, 0).strip())


def _replace(args: Sequence[Value], basedir: Path) -> Value:
    _arity("tm_replace", args, 3)
    s, old, new = (_string_arg("tm_replace", args, i) for i in range(3))
    return Value.string(s.replace(old, new))


def _split(args: Sequence[Value], basedir: Path) -> Value:
    _arity("tm_split", args, 2)
    sep = _string_arg("tm_split", args, 0)
    s = _string_arg("tm_split", args, 1)
    # separador vazio: divide em caracteres
    parts = list(s) if sep == "" else s.split(sep)
    return Value.list_(Value.string(p) for p in parts)


def _join(args: Sequence[Value], basedir: Path) -> Value:
    _arity("tm_join", args, 2)
    sep = _string_arg("tm_join", args, 0)
    if args[1].kind is not ValueKind.LIST:
        raise FunctionCallError(f"tm_join() argument 2: expected list, got {args[1].type_name()}")
    try:
        items = [e.as_string() for e in args[1].as_list()]
    except ValueTypeError as e:
        raise FunctionCallError(f"tm_join() argument 2: all elements must be strings: {e}") from e
    return Value.string(sep.join(items))


def _concat(args: Sequence[Value], basedir: Path) -> Value:
    if not args:
        raise FunctionCallError("tm_concat() requires at least one argument")
    out = []
    for i, arg in enumerate(args):
        if arg.kind is not ValueKind.LIST:
            raise FunctionCallError(f"tm_concat() argument {i + 1}: expected list, got {arg.type_name()}")
        out.extend(arg.as_list())
    return Value.list_(out)


def _length(args: Sequence[Value], basedir: Path) -> Value:
    _arity("tm_length", args, 1)
    arg = args[0]
    if arg.kind in (ValueKind.LIST, ValueKind.MAP, ValueKind.STRING):
        return Value.number(len(arg.data))
    raise FunctionCallError(f"tm_length() argument 1: expected list, map or string, got {arg.type_name()}")


def _tostring(args: Sequence[Value], basedir: Path) -> Value:
    _arity("tm_tostring", args, 1)
    arg = args[0]
    if arg.kind is ValueKind.STRING:
        return arg
    if arg.kind is ValueKind.BOOL:
        return Value.string("true" if arg.data else "false")
    if arg.kind is ValueKind.NUMBER:
        return Value.string(format_number(arg.data))
    raise FunctionCallError(f"tm_tostring() argument 1: cannot convert {arg.type_name()} to string")


def _file(args: Sequence[Value], basedir: Path) -> Value:
    _arity("tm_file", args, 1)
    raw = _string_arg("tm_file", args, 0)
    path = Path(raw)
    if not path.is_absolute():
        path = basedir / path
    try:
        return Value.string(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise FunctionCallError(f"tm_file(): reading {raw}: {e}") from e


def format_number(n: float) -> str:
    if isinstance(n, float) and n.is_integer():
        return str(int(n))
    return str(n)


FUNCTIONS: Dict[str, Function] = {
    "tm_upper": _upper,
    "tm_lower": _lower,
    "tm_trimspace": _trimspace,
    "tm_replace": _replace,
    "tm_split": _split,
    "tm_join": _join,
    "tm_concat": _concat,
    "tm_length": _length,
    "tm_tostring": _tostring,
    "tm_file": _file,
}
