"""
Atlas Stacks — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do Atlas Stacks.
Erros fazem parte do contrato operacional do sistema (a CLI os expõe
em stderr e o texto do tipo é estável), devendo ser:

- explícitos
- serializáveis
- rastreáveis até a origem (arquivo / atributo / caminho)

Os tipos de erro não são classes de exceção: são códigos textuais estáveis.
As classes correspondentes vivem em `core.exceptions`.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict, field
from typing import Any, Dict, Optional


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Configuração
PARSING_CONFIG = "parsing configuration"
LOADING_GLOBALS = "loading globals"

# Avaliação de expressões
EVALUATION_FAILURE = "evaluating expression"
INVALID_ENV_VAR_TYPE = "invalid environment variable type"

# Detecção de mudanças
STACK_INVALID_WATCH = "stack invalid watch"

# Colaborador VCS
GIT_COMMAND_FAILED = "git command failed"

# Fallback genérico
STACKS_ERROR = "atlas stacks error"


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StacksErrorPayload:
    """
    Payload canônico de erro do Atlas Stacks.

    Campos:
    - type: código estável do erro (um dos tipos do catálogo acima)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
      (ex.: origin, attribute, path, stack)
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)

    def render(self) -> str:
        """Formata o erro para saída humana (uma linha + hint opcional)."""
        text = f"{self.type}: {self.message}"
        if self.hint:
            text += f"\nhint: {self.hint}"
        return text
