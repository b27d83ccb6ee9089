"""
Loader do ambiente de execução (run env) de um stack.

Carrega `config.run.env` da raiz do projeto e avalia cada atributo no
namespace do stack (ambiente do processo + globals), produzindo as
variáveis de ambiente a exportar ao rodar comandos dentro do stack.

Decisões arquiteturais:
    - Ausência da seção `config.run.env` não é erro: resultado vazio
    - Atributos são ordenados uma única vez, de forma estável, por nome
      (empates preservam a ordem de merge dos arquivos)
    - Nenhuma coerção implícita: o valor avaliado precisa ser string

Invariantes:
    - A saída segue o formato de `os.environ`: `NOME=valor`
    - A mesma configuração e o mesmo ambiente produzem sempre a mesma saída

Limites explícitos:
    - Não executa comandos
    - Não altera `os.environ`
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Optional

from atlas_stacks.core.config.loader import parse_root
from atlas_stacks.core.context import OperationContext, ensure_context
from atlas_stacks.core.exceptions import (
    EvalError,
    InvalidEnvVarTypeError,
    LoadingGlobalsError,
    ParsingConfigError,
)
from atlas_stacks.core.expr.evaluator import evaluate
from atlas_stacks.core.expr.values import ValueKind
from atlas_stacks.core.stack.globals import load_globals
from atlas_stacks.core.stack.namespace import build_namespace
from atlas_stacks.core.stack.stack import Stack


EnvVars = List[str]


def load_env(
    root: Path,
    stack: Stack,
    *,
    ctx: Optional[OperationContext] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> EnvVars:
    """
    Carrega as variáveis de ambiente de execução de `stack`.

    Args:
        root (Path): Raiz do projeto.
        stack (Stack): Stack alvo.
        ctx (Optional[OperationContext]): Contexto de diagnóstico.
        environ (Optional[Mapping[str, str]]): Ambiente do processo
            (padrão: `os.environ`).

    Returns:
        EnvVars: lista `NOME=valor`, ordenada por nome.

    Raises:
        ParsingConfigError: configuração da raiz inválida.
        LoadingGlobalsError: globals do stack não puderam ser avaliados.
        EvalError: um atributo falhou ao avaliar (com posição e origem).
        InvalidEnvVarTypeError: um atributo avaliou para não-string.
    """
    ctx = ensure_context(ctx, action="load_env", root=str(root), stack=stack.path)

    ctx.trace("parsing configuration")
    try:
        cfg = parse_root(root)
    except ParsingConfigError as e:
        raise ParsingConfigError(
            message=f"parsing config.run.env configuration: {e.message}",
            details=dict(e.details),
        ) from e

    if not cfg.has_run_env:
        ctx.trace("no run env config found, nothing to do")
        return []

    ctx.trace("loading globals")
    try:
        globals_ = load_globals(root, stack, ctx=ctx, environ=environ)
    except LoadingGlobalsError as e:
        raise LoadingGlobalsError(
            message=f"loading globals to evaluate config.run.env: {e.message}",
            details=dict(e.details),
        ) from e

    namespace = build_namespace(stack, globals_, environ)
    env_vars: EnvVars = []

    for attr in sorted(cfg.run_env, key=lambda a: a.name):
        actx = ctx.bind(attribute=attr.name)
        actx.trace("evaluating")
        try:
            value = evaluate(attr.expr, namespace, basedir=attr.basedir(root))
        except EvalError as e:
            raise EvalError(
                message=(
                    f"{attr.name_range}: evaluating config.run.env attribute "
                    f"'{attr.name}': {e.message}, attribute origin {attr.origin}"
                ),
                details={"range": str(attr.name_range), "origin": attr.origin, "attribute": attr.name},
            ) from e

        if value.kind is not ValueKind.STRING:
            raise InvalidEnvVarTypeError(
                message=(
                    f"{attr.name_range}: attr has type {value.type_name()} "
                    f"but must be string, attribute origin {attr.origin}"
                ),
                details={"range": str(attr.name_range), "origin": attr.origin, "attribute": attr.name},
            )

        env_vars.append(f"{attr.name}={value.as_string()}")
        actx.trace("env var loaded")

    return env_vars
