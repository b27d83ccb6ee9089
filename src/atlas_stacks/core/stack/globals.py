"""
Loader de globals de um stack.

Os globals visíveis a um stack são a composição dos blocos `globals` de
todos os diretórios entre a raiz do projeto e o diretório do stack.

Decisões arquiteturais:
    - Precedência explícita: o diretório mais próximo do stack vence
      (a definição de um filho substitui a do pai)
    - Dentro de um diretório, atributos podem referenciar irmãos em
      qualquer ordem; a avaliação acontece em rodadas (ordem de nome)
      até que nenhum atributo pendente progrida
    - Enquanto um nome do diretório está pendente, `global.<nome>` não
      enxerga o valor do pai (referência a si mesmo é um ciclo)

Invariantes:
    - O resultado é um dicionário novo por chamada
    - Qualquer falha vira `LoadingGlobalsError`, com a causa encadeada
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Mapping, Optional

from atlas_stacks.core.config.loader import Attribute, parse_dir
from atlas_stacks.core.context import OperationContext, ensure_context
from atlas_stacks.core.exceptions import EvalError, LoadingGlobalsError, ParsingConfigError
from atlas_stacks.core.expr.evaluator import evaluate
from atlas_stacks.core.expr.values import Value
from atlas_stacks.core.project import host_path, parent_dirs

from .namespace import env_value, stack_value
from .stack import Stack


def _evaluate_dir(
    root: Path,
    dir_ppath: str,
    attrs: List[Attribute],
    inherited: Dict[str, Value],
    env: Value,
    meta: Value,
    ctx: OperationContext,
) -> Dict[str, Value]:
    pending = sorted(attrs, key=lambda a: a.name)
    done: Dict[str, Value] = {}
    while pending:
        pending_names = {a.name for a in pending}
        visible = {k: v for k, v in inherited.items() if k not in pending_names}
        visible.update(done)
        namespace = {"global": Value.map_(visible), "env": env, "stack": meta}

        failed: List[Attribute] = []
        errors: List[EvalError] = []
        for attr in pending:
            try:
                done[attr.name] = evaluate(attr.expr, namespace, basedir=attr.basedir(root))
            except EvalError as e:
                failed.append(attr)
                errors.append(e)

        if len(failed) == len(pending):
            names = ", ".join(a.name for a in failed)
            raise LoadingGlobalsError(
                message=f"{dir_ppath}: cannot evaluate globals [{names}]: {errors[-1].message}",
                details={"dir": dir_ppath, "pending": [a.name for a in failed]},
            ) from errors[-1]
        ctx.trace("globals round", dir=dir_ppath, evaluated=len(pending) - len(failed))
        pending = failed

    return done


def load_globals(
    root: Path,
    stack: Stack,
    *,
    ctx: Optional[OperationContext] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Value]:
    """
    Carrega e avalia os globals de `stack`.

    Args:
        root (Path): Raiz do projeto.
        stack (Stack): Stack alvo.
        ctx (Optional[OperationContext]): Contexto de diagnóstico.
        environ (Optional[Mapping[str, str]]): Ambiente exposto como `env`
            (padrão: `os.environ`).

    Returns:
        Dict[str, Value]: globals finais, já com a precedência aplicada.

    Raises:
        LoadingGlobalsError: em erro de parse, avaliação ou ciclo.
    """
    ctx = ensure_context(ctx, action="load_globals", stack=stack.path)
    env = env_value(environ)
    meta = stack_value(stack)
    result: Dict[str, Value] = {}

    for dir_ppath in parent_dirs(stack.path):
        try:
            cfg = parse_dir(root, host_path(root, dir_ppath))
        except ParsingConfigError as e:
            raise LoadingGlobalsError(
                message=f"{dir_ppath}: {e}",
                details={"dir": dir_ppath},
            ) from e
        if not cfg.globals:
            continue
        ctx.trace("loading globals", dir=dir_ppath, count=len(cfg.globals))
        evaluated = _evaluate_dir(root, dir_ppath, list(cfg.globals), result, env, meta, ctx)
        result.update(evaluated)

    ctx.debug("globals loaded", count=len(result))
    return result
