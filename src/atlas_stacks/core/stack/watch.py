"""
Resolvedor da lista `watch` de um stack.

`watch` declara arquivos fora (ou dentro) do diretório do stack cuja
alteração também marca o stack como alterado.

Regras de resolução:
    - Sem declaração → lista vazia
    - O valor avaliado deve ser uma lista de strings
    - `/` inicial → relativo à raiz do projeto; caso contrário, relativo
      ao diretório do stack (`..` permitido)
    - Normalização léxica (`.`, `..` e barras repetidas)
    - Caminho que escapa da raiz do projeto → erro
    - Caminho que nomeia um diretório (existente, ou terminado em `/`) → erro
    - Arquivo inexistente é válido (pode ser criado depois)
    - Symlink cujo destino real fica fora da raiz → erro
    - Caminho com byte nulo → erro

Toda falha vira `StackInvalidWatchError`, com a causa encadeada.
"""

from __future__ import annotations

import os
import posixpath
from pathlib import Path
from typing import List, Mapping, Optional

from atlas_stacks.core.context import OperationContext, ensure_context
from atlas_stacks.core.exceptions import EvalError, StackInvalidWatchError
from atlas_stacks.core.expr.evaluator import evaluate
from atlas_stacks.core.expr.values import Value, ValueKind
from atlas_stacks.core.project import host_path

from .stack import Stack


def _invalid(stack: Stack, message: str, **details) -> StackInvalidWatchError:
    return StackInvalidWatchError(
        message=f"stack {stack.path}: {message}",
        details={"stack": stack.path, **details},
        hint="watch entries must be files inside the project",
    )


def _to_project_path(stack: Stack, entry: str) -> Optional[str]:
    """Resolve lexicamente `entry`; devolve None se o caminho escapar da raiz."""
    if entry.startswith("/"):
        rel = entry.lstrip("/")
    else:
        rel = posixpath.join(stack.path.lstrip("/"), entry)
    rel = posixpath.normpath(rel) if rel else "."
    if rel == ".." or rel.startswith("../"):
        return None
    return "/" if rel == "." else "/" + rel


def _escapes_root(root: Path, target: Path) -> bool:
    real_root = os.path.realpath(root)
    real = os.path.realpath(target)
    return not (real == real_root or real.startswith(real_root.rstrip(os.sep) + os.sep))


def resolve_watches(
    root: Path,
    stack: Stack,
    namespace: Mapping[str, Value],
    *,
    ctx: Optional[OperationContext] = None,
) -> List[str]:
    """
    Avalia e valida a declaração `watch` de `stack`.

    Args:
        root (Path): Raiz do projeto.
        stack (Stack): Stack cuja declaração será resolvida.
        namespace (Mapping[str, Value]): Namespace de avaliação do stack.
        ctx (Optional[OperationContext]): Contexto de diagnóstico.

    Returns:
        List[str]: project paths normalizados, na ordem declarada.

    Raises:
        StackInvalidWatchError: em erro de avaliação, tipo, contenção
            ou se algum caminho nomear um diretório.
    """
    ctx = ensure_context(ctx, action="resolve_watches", stack=stack.path)
    attr = stack.watch
    if attr is None:
        return []

    try:
        value = evaluate(attr.expr, namespace, basedir=attr.basedir(root))
    except EvalError as e:
        raise _invalid(stack, f"evaluating watch: {e.message}", origin=attr.origin) from e

    if value.kind is not ValueKind.LIST:
        raise _invalid(
            stack,
            f"watch must be a list of strings, got {value.type_name()}",
            origin=attr.origin,
        )

    paths: List[str] = []
    for i, item in enumerate(value.as_list()):
        if item.kind is not ValueKind.STRING:
            raise _invalid(
                stack,
                f"watch[{i}] must be a string, got {item.type_name()}",
                origin=attr.origin,
            )
        entry = item.as_string()
        if "\x00" in entry:
            raise _invalid(stack, f"watch path {entry!r} contains a null byte", entry=entry)
        ppath = _to_project_path(stack, entry)
        if ppath is None:
            raise _invalid(stack, f"watch path {entry!r} is outside project", entry=entry)

        target = host_path(root, ppath)
        if entry.endswith("/") or target.is_dir():
            raise _invalid(stack, f"watch path {ppath} is a directory", entry=entry)
        if _escapes_root(root, target):
            raise _invalid(stack, f"watch path {ppath} points outside project", entry=entry)

        ctx.trace("watch resolved", entry=entry, path=ppath)
        paths.append(ppath)

    return paths
