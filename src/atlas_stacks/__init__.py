# src/atlas_stacks/__init__.py
"""
Atlas Stacks — detecção de mudanças e avaliação de configuração para
projetos de infraestrutura como código organizados em stacks.

Um projeto contém muitos *stacks* (diretórios implantáveis de forma
independente). Este pacote responde, de forma determinística:
    - quais stacks existem no projeto
    - quais stacks mudaram desde um baseline git (incluindo arquivos
      declarados em `watch`)
    - quais variáveis de ambiente exportar ao rodar comandos em um stack

Arquitetura em alto nível:
    - core.config  → arquivos de configuração (parse, merge, validação)
    - core.expr    → linguagem de expressões (valores, parser, funções, evaluator)
    - core.stack   → stacks, globals, namespace e resolução de `watch`
    - core.run     → loader de run env
    - core.changes → detector de stacks alterados
    - core.vcs     → colaborador git

Limites explícitos:
    - Não executa comandos nos stacks
    - Não gera código nem mantém estado entre invocações
"""

from .core.changes import default_baseline, list_changed_stacks
from .core.context import EventLog, OperationContext
from .core.exceptions import StacksException
from .core.project import Project
from .core.run import load_env
from .core.stack import Stack, list_stacks

__all__ = [
    "EventLog",
    "OperationContext",
    "Project",
    "Stack",
    "StacksException",
    "default_baseline",
    "list_changed_stacks",
    "list_stacks",
    "load_env",
]
