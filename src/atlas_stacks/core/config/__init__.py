# src/atlas_stacks/core/config/__init__.py

"""
Camada de configuração do Atlas Stacks.

Este pacote contém as estruturas e utilitários responsáveis por carregar,
mesclar e validar estruturalmente os arquivos de configuração dos
diretórios do projeto (`*.tm.yaml`, `*.tm.yml`, `*.tm.json`).

A configuração no Atlas Stacks é:
    - declarativa
    - determinística
    - local ao diretório que a declara

Responsabilidades do pacote:
    - Carregamento dos arquivos de um diretório em ordem de merge
    - Validação estrutural dos blocos `stack`, `globals` e `config`
    - Parse dos atributos em expressões (com origem e posição)
    - Combinação dos blocos `config` da raiz via deep-merge determinístico

Invariantes:
    - Todo atributo carrega o arquivo que o definiu
    - Conflitos estruturais são tratados como erro (`ParsingConfigError`)

Limites explícitos:
    - Não avalia expressões
    - Não interage com git
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DuplicateDefinitionError,
    InvalidConfigRootTypeError,
    UnknownConfigBlockError,
    UnsupportedConfigFormatError,
)
from .loader import (
    CONFIG_SUFFIXES,
    Attribute,
    DirConfig,
    GitConfig,
    StackBlock,
    parse_dir,
    parse_root,
    parse_tree,
    walk_dirs,
)
from .merge import deep_merge

__all__ = [
    "Attribute",
    "CONFIG_SUFFIXES",
    "ConfigError",
    "ConfigTypeConflictError",
    "DirConfig",
    "DuplicateDefinitionError",
    "GitConfig",
    "InvalidConfigRootTypeError",
    "StackBlock",
    "UnknownConfigBlockError",
    "UnsupportedConfigFormatError",
    "deep_merge",
    "parse_dir",
    "parse_root",
    "parse_tree",
    "walk_dirs",
]
