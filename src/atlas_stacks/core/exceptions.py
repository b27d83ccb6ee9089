"""
Atlas Stacks — Canonical Exceptions (v1)

Este módulo define exceções tipadas internas do Atlas Stacks, uma classe
por tipo de erro do catálogo em `core.errors`.

Objetivo:
- Permitir que as camadas do core levantem exceções semânticas tipadas
- Facilitar o mapeamento determinístico para StacksErrorPayload
- Evitar ValueError/RuntimeError genéricos nas fronteiras do core

Regras:
- Falhas de camadas inferiores são encapsuladas pela camada que as
  contextualiza (`raise NovaExcecao(...) from causa`), nunca silenciadas.
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional

from .errors import (
    EVALUATION_FAILURE,
    GIT_COMMAND_FAILED,
    INVALID_ENV_VAR_TYPE,
    LOADING_GLOBALS,
    PARSING_CONFIG,
    STACK_INVALID_WATCH,
    STACKS_ERROR,
    StacksErrorPayload,
)


@dataclass(eq=False)
class StacksException(Exception):
    """Base class para exceções internas do Atlas Stacks.

    Importante:
    - `kind` é o código estável do erro (atributo de classe)
    - Mensagem deve ser curta e humana
    - `str(exc)` sempre começa pelo `kind`, contrato consumido pela CLI
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    kind: ClassVar[str] = STACKS_ERROR

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"

    def to_payload(self) -> StacksErrorPayload:
        return StacksErrorPayload(
            type=self.kind,
            message=self.message,
            details=dict(self.details),
            hint=self.hint,
        )


# ---------------------------------------------------------------------------
# Configuração
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class ParsingConfigError(StacksException):
    """Arquivo de configuração ou expressão não pôde ser interpretado."""

    kind: ClassVar[str] = PARSING_CONFIG


@dataclass(eq=False)
class LoadingGlobalsError(StacksException):
    """Globals de um stack não puderam ser carregados/avaliados."""

    kind: ClassVar[str] = LOADING_GLOBALS


# ---------------------------------------------------------------------------
# Avaliação
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class EvalError(StacksException):
    """Falha ao avaliar uma expressão (referência, função ou leitura de arquivo)."""

    kind: ClassVar[str] = EVALUATION_FAILURE


@dataclass(eq=False)
class InvalidEnvVarTypeError(StacksException):
    """Atributo de run env avaliou para um tipo diferente de string."""

    kind: ClassVar[str] = INVALID_ENV_VAR_TYPE


# ---------------------------------------------------------------------------
# Detecção de mudanças
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class StackInvalidWatchError(StacksException):
    """Declaração `watch` de um stack é inválida (tipo, contenção ou diretório)."""

    kind: ClassVar[str] = STACK_INVALID_WATCH


# ---------------------------------------------------------------------------
# VCS
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class GitError(StacksException):
    """Comando git terminou com erro."""

    kind: ClassVar[str] = GIT_COMMAND_FAILED
