"""
Loader canônico de configuração do Atlas Stacks.

Este módulo é responsável por carregar e validar estruturalmente os
arquivos de configuração de um diretório do projeto, produzindo um
`DirConfig` imutável.

Arquivos reconhecidos (lidos em ordem lexicográfica de nome, a
"ordem de merge"):
    - YAML: *.tm.yaml, *.tm.yml
    - JSON: *.tm.json

Blocos de topo reconhecidos:
    - stack:   declara que o diretório é um stack (name, description, watch)
    - globals: atributos de globals do diretório
    - config:  somente na raiz do projeto; `run.env` e `git`

Valores de atributos:
    - string YAML/JSON → texto de expressão, parseado aqui
    - qualquer outro nó → valor literal

Princípios fundamentais:
    - Configuração é declarativa e explícita
    - Erros estruturais são tratados como falhas fatais (`ConfigError`)
    - A mesma árvore de arquivos sempre produz o mesmo `DirConfig`

Invariantes:
    - Todo atributo carrega sua origem (arquivo) e a posição do nome
    - Atributos de `config.run.env` preservam a ordem de merge, inclusive
      nomes repetidos em arquivos diferentes

Limites explícitos:
    - Não avalia expressões
    - Não resolve globals nem watch
    - Não interage com git
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

import yaml  # PyYAML

from atlas_stacks.core.exceptions import ParsingConfigError
from atlas_stacks.core.expr.nodes import Expr, Literal, SourceRange
from atlas_stacks.core.expr.parser import parse_expression
from atlas_stacks.core.expr.values import Value, ValueTypeError
from atlas_stacks.core.project import host_path, project_path

from .errors import (
    ConfigError,
    DuplicateDefinitionError,
    InvalidConfigRootTypeError,
    UnknownConfigBlockError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge


YAML_SUFFIXES = (".tm.yaml", ".tm.yml")
JSON_SUFFIXES = (".tm.json",)
CONFIG_SUFFIXES = YAML_SUFFIXES + JSON_SUFFIXES

_TOP_LEVEL_BLOCKS = {"stack", "globals", "config"}
_STACK_KEYS = {"name", "description", "watch"}
_CONFIG_KEYS = {"run", "git"}
_RUN_KEYS = {"env"}
_GIT_KEYS = {"default_branch", "default_remote", "default_branch_base_ref"}


# ---------------------------------------------------------------------------
# Estruturas
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Attribute:
    """Atributo de configuração: nome, expressão e origem (arquivo que o definiu)."""

    name: str
    expr: Expr
    origin: str
    name_range: SourceRange

    def basedir(self, root: Path) -> Path:
        """Diretório do arquivo de origem (base de `tm_file`)."""
        return host_path(root, self.origin).parent


@dataclass(frozen=True)
class StackBlock:
    origin: str
    name: Optional[str] = None
    description: Optional[str] = None
    watch: Optional[Attribute] = None


@dataclass(frozen=True)
class GitConfig:
    default_branch: str = "main"
    default_remote: str = "origin"
    default_branch_base_ref: str = "HEAD^"


@dataclass(frozen=True)
class DirConfig:
    """Configuração já validada de um diretório do projeto."""

    path: str
    files: Tuple[str, ...] = ()
    stack: Optional[StackBlock] = None
    globals: Tuple[Attribute, ...] = ()
    run_env: Tuple[Attribute, ...] = ()
    has_run_env: bool = False
    config: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_stack(self) -> bool:
        return self.stack is not None

    def git(self) -> GitConfig:
        raw = self.config.get("git") or {}
        return GitConfig(**raw)


# ---------------------------------------------------------------------------
# Leitura de arquivos
# ---------------------------------------------------------------------------

def config_files(dirpath: Path) -> List[Path]:
    """Arquivos de configuração de um diretório, em ordem de merge."""
    try:
        entries = sorted(os.listdir(dirpath))
    except OSError as e:
        raise ConfigError(message=f"listing {dirpath}: {e}") from e
    out = []
    for name in entries:
        p = dirpath / name
        if name.endswith(CONFIG_SUFFIXES) and p.is_file():
            out.append(p)
    return out


def _load_file(path: Path, origin: str) -> Tuple[Dict[str, Any], Optional[yaml.Node]]:
    """
    Carrega um arquivo de configuração e valida sua estrutura básica.

    Decisões:
        - Arquivos vazios são interpretados como dicionários vazios
        - O conteúdo raiz deve ser um dicionário (`dict`)
        - Para YAML, a árvore de nós (`yaml.compose`) é devolvida junto
          para localizar linha/coluna dos atributos

    Raises:
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo raiz não for um dicionário.
        ConfigError: Se o arquivo não puder ser lido ou parseado.
    """
    name = path.name.lower()
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(message=f"reading {origin}: {e}", details={"origin": origin}) from e

    node: Optional[yaml.Node] = None
    try:
        if name.endswith(YAML_SUFFIXES):
            data = yaml.safe_load(raw)
            node = yaml.compose(raw, Loader=yaml.SafeLoader)
        elif name.endswith(JSON_SUFFIXES):
            data = json.loads(raw) if raw.strip() else None
        else:
            raise UnsupportedConfigFormatError(
                message=f"unsupported config format: {path.name}",
                details={"origin": origin},
            )
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(message=f"{origin}: {e}", details={"origin": origin}) from e

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            message=f"{origin}: config root must be a mapping, got {type(data).__name__}",
            details={"origin": origin},
        )

    return data, node


def _find(node: Optional[yaml.Node], *keys: str) -> Tuple[Optional[yaml.Node], Optional[yaml.Node]]:
    """Localiza (nó da chave, nó do valor) seguindo `keys` a partir de `node`."""
    key_node = None
    for key in keys:
        if not isinstance(node, yaml.MappingNode):
            return None, None
        for k, v in node.value:
            if isinstance(k, yaml.ScalarNode) and k.value == key:
                key_node, node = k, v
                break
        else:
            return None, None
    return key_node, node


def _mark(node: Optional[yaml.Node]) -> Tuple[Optional[int], Optional[int]]:
    if node is None:
        return None, None
    return node.start_mark.line + 1, node.start_mark.column + 1


def _expr_position(value_node: Optional[yaml.Node]) -> Tuple[Optional[int], Optional[int]]:
    """Posição do primeiro caractere do texto da expressão dentro do arquivo."""
    if not isinstance(value_node, yaml.ScalarNode):
        return None, None
    line, column = _mark(value_node)
    if value_node.style in ("'", '"'):
        return line, column + 1
    if value_node.style in ("|", ">"):
        return line + 1, None
    return line, column


# ---------------------------------------------------------------------------
# Atributos
# ---------------------------------------------------------------------------

class _FileParser:
    def __init__(self, origin: str, node: Optional[yaml.Node]) -> None:
        self.origin = origin
        self.node = node

    def fail(self, cls: type, message: str, *keys: str) -> ConfigError:
        line, column = _mark(_find(self.node, *keys)[0]) if keys else (None, None)
        where = SourceRange(self.origin, line, column)
        return cls(message=f"{where}: {message}", details={"origin": self.origin, "range": str(where)})

    def attribute(self, name: Any, raw: Any, *keys: str) -> Attribute:
        if not isinstance(name, str):
            raise self.fail(ConfigError, f"attribute names must be strings, got {name!r}", *keys[:-1])
        key_node, value_node = _find(self.node, *keys)
        name_range = SourceRange(self.origin, *_mark(key_node))
        expr: Expr
        if isinstance(raw, str):
            line, column = _expr_position(value_node)
            expr = parse_expression(raw, origin=self.origin, line=line, column=column)
        else:
            try:
                expr = Literal(Value.from_python(raw), name_range)
            except ValueTypeError as e:
                raise self.fail(ConfigError, f"attribute '{name}': {e}", *keys) from e
        return Attribute(name=name, expr=expr, origin=self.origin, name_range=name_range)

    def mapping(self, raw: Any, *keys: str) -> Dict[str, Any]:
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            label = ".".join(keys)
            raise self.fail(ConfigError, f"'{label}' must be a mapping, got {type(raw).__name__}", *keys)
        return raw

    def only(self, raw: Dict[str, Any], allowed: set, *keys: str) -> None:
        for key in raw:
            if key not in allowed:
                label = ".".join((*keys, str(key)))
                raise self.fail(UnknownConfigBlockError, f"unrecognized key '{label}'", *keys, str(key))

    def stack(self, raw: Any) -> StackBlock:
        block = self.mapping(raw, "stack")
        self.only(block, _STACK_KEYS, "stack")
        for key in ("name", "description"):
            if key in block and not isinstance(block[key], str):
                raise self.fail(ConfigError, f"'stack.{key}' must be a string", "stack", key)
        watch = None
        if "watch" in block:
            watch = self.attribute("watch", block["watch"], "stack", "watch")
        return StackBlock(
            origin=self.origin,
            name=block.get("name"),
            description=block.get("description"),
            watch=watch,
        )

    def attributes(self, raw: Any, *keys: str) -> List[Attribute]:
        block = self.mapping(raw, *keys)
        return [self.attribute(name, value, *keys, str(name)) for name, value in block.items()]

    def config(self, raw: Any) -> Tuple[Dict[str, Any], Optional[List[Attribute]]]:
        block = self.mapping(raw, "config")
        self.only(block, _CONFIG_KEYS, "config")
        rest: Dict[str, Any] = {}
        env: Optional[List[Attribute]] = None
        if "run" in block:
            run = self.mapping(block["run"], "config", "run")
            self.only(run, _RUN_KEYS, "config", "run")
            if "env" in run:
                env = self.attributes(run["env"], "config", "run", "env")
        if "git" in block:
            git = self.mapping(block["git"], "config", "git")
            self.only(git, _GIT_KEYS, "config", "git")
            for key, value in git.items():
                if not isinstance(value, str) or not value.strip():
                    raise self.fail(ConfigError, f"'config.git.{key}' must be a non-empty string", "config", "git", key)
            rest["git"] = dict(git)
        return rest, env


# ---------------------------------------------------------------------------
# API pública
# ---------------------------------------------------------------------------

def parse_dir(root: Path, dirpath: Path) -> DirConfig:
    """
    Carrega e valida todos os arquivos de configuração de um diretório.

    Args:
        root (Path): Raiz do projeto (absoluta).
        dirpath (Path): Diretório a carregar (dentro de `root`).

    Returns:
        DirConfig: Configuração do diretório (vazia se não houver arquivos).

    Raises:
        ParsingConfigError: Em qualquer erro estrutural ou de sintaxe de
            expressão (subclasses `ConfigError`, `ExpressionSyntaxError`).
    """
    dir_ppath = project_path(root, dirpath)
    files: List[str] = []
    stack: Optional[StackBlock] = None
    globals_: List[Attribute] = []
    global_origins: Dict[str, str] = {}
    run_env: List[Attribute] = []
    has_run_env = False
    config: Dict[str, Any] = {}

    for path in config_files(dirpath):
        origin = project_path(root, path)
        files.append(origin)
        data, node = _load_file(path, origin)
        fp = _FileParser(origin, node)
        fp.only(data, _TOP_LEVEL_BLOCKS)

        if "stack" in data:
            if stack is not None:
                raise fp.fail(
                    DuplicateDefinitionError,
                    f"stack already declared in {stack.origin}",
                    "stack",
                )
            stack = fp.stack(data["stack"])

        if "globals" in data:
            for attr in fp.attributes(data["globals"], "globals"):
                if attr.name in global_origins:
                    raise fp.fail(
                        DuplicateDefinitionError,
                        f"global '{attr.name}' already defined in {global_origins[attr.name]}",
                        "globals",
                        attr.name,
                    )
                global_origins[attr.name] = origin
                globals_.append(attr)

        if "config" in data:
            if dir_ppath != "/":
                raise fp.fail(UnknownConfigBlockError, "'config' is only allowed at the project root", "config")
            rest, env = fp.config(data["config"])
            config = deep_merge(config, rest, origin=origin)
            if env is not None:
                has_run_env = True
                run_env.extend(env)

    return DirConfig(
        path=dir_ppath,
        files=tuple(files),
        stack=stack,
        globals=tuple(globals_),
        run_env=tuple(run_env),
        has_run_env=has_run_env,
        config=config,
    )


def parse_root(root: Path) -> DirConfig:
    """Configuração da raiz do projeto (fonte de `config.run.env` e `config.git`)."""
    return parse_dir(root, root)


def walk_dirs(root: Path) -> Iterator[Path]:
    """Percorre os diretórios do projeto em ordem determinística, sem diretórios ocultos."""
    for current, dirnames, _files in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        yield Path(current)


def parse_tree(root: Path) -> List[DirConfig]:
    """Carrega a configuração de todos os diretórios do projeto."""
    return [parse_dir(root, d) for d in walk_dirs(root)]


__all__ = [
    "Attribute",
    "CONFIG_SUFFIXES",
    "DirConfig",
    "GitConfig",
    "ParsingConfigError",
    "StackBlock",
    "config_files",
    "parse_dir",
    "parse_root",
    "parse_tree",
    "walk_dirs",
]
