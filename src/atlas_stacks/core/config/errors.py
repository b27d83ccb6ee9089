"""
Exceções canônicas da camada de configuração do Atlas Stacks.

Este módulo define a hierarquia oficial de exceções utilizadas durante
o carregamento e a validação estrutural dos arquivos de configuração
(`*.tm.yaml`, `*.tm.yml`, `*.tm.json`).

Princípios fundamentais:
    - Exceções são tipadas e semânticas
    - Erros estruturais são tratados como falhas fatais
    - Mensagens de erro citam o arquivo de origem

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - `ConfigError` é um `ParsingConfigError`: o tipo exposto ao usuário
      é sempre "parsing configuration"

Limites explícitos:
    - Não realiza fallback ou recovery
    - Não depende de stacks, globals ou git
"""

from __future__ import annotations

from dataclasses import dataclass

from atlas_stacks.core.exceptions import ParsingConfigError


@dataclass(eq=False)
class ConfigError(ParsingConfigError):
    """
    Exceção base para erros relacionados à configuração do Atlas Stacks.

    Esta hierarquia permite:
        - captura genérica de erros de configuração
        - distinção clara entre falhas estruturais e falhas de avaliação
    """


@dataclass(eq=False)
class UnsupportedConfigFormatError(ConfigError):
    """
    Exceção levantada quando o formato do arquivo de configuração
    não é suportado pelo loader.

    Formatos suportados (v1):
        - YAML (.tm.yaml, .tm.yml)
        - JSON (.tm.json)
    """


@dataclass(eq=False)
class InvalidConfigRootTypeError(ConfigError):
    """
    Exceção levantada quando o conteúdo raiz de um arquivo de configuração
    não é um dicionário (`dict`).

    Limites explícitos:
        - Não tenta normalizar ou encapsular estruturas inválidas
    """


@dataclass(eq=False)
class UnknownConfigBlockError(ConfigError):
    """Bloco ou chave não reconhecida (ex.: `stacks:` em vez de `stack:`)."""


@dataclass(eq=False)
class DuplicateDefinitionError(ConfigError):
    """
    Exceção levantada quando um mesmo diretório define duas vezes
    algo que deve ser único (bloco `stack`, nome de global).
    """


@dataclass(eq=False)
class ConfigTypeConflictError(ConfigError):
    """
    Exceção levantada quando ocorre conflito de tipos durante o deep-merge
    dos blocos `config` de múltiplos arquivos da raiz.

    Exemplo de conflito:
        - a.tm.yaml: {"config": {"git": {"default_branch": "main"}}}
        - b.tm.yaml: {"config": {"git": "main"}}

    Invariantes:
        - Nenhum merge parcial é produzido em caso de conflito
    """
