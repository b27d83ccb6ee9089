"""Namespace de avaliação de um stack: `global`, `env` e `stack`."""

from __future__ import annotations

import os
from typing import Dict, Mapping, Optional

from atlas_stacks.core.expr.values import Value

from .stack import Stack


def env_value(environ: Optional[Mapping[str, str]] = None) -> Value:
    """Ambiente do processo como um Value MAP de strings."""
    source = os.environ if environ is None else environ
    return Value.map_({k: Value.string(v) for k, v in source.items()})


def stack_value(stack: Stack) -> Value:
    return Value.map_(
        {
            "path": Value.string(stack.path),
            "name": Value.string(stack.name),
            "description": Value.string(stack.description),
        }
    )


def build_namespace(
    stack: Stack,
    globals_: Mapping[str, Value],
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Value]:
    """
    Monta o namespace de avaliação do stack.

    O namespace é construído do zero a cada chamada e nunca é mutado
    depois de entregue ao evaluator.
    """
    return {
        "global": Value.map_(dict(globals_)),
        "env": env_value(environ),
        "stack": stack_value(stack),
    }
