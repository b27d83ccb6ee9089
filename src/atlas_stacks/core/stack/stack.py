"""
Stacks do projeto.

Um *stack* é um diretório do projeto cuja configuração declara um bloco
`stack`. Esta é a unidade sobre a qual o detector de mudanças, o loader
de globals e o loader de run env operam.

Invariantes:
    - `Stack.path` é um project path normalizado (`/stacks/app`)
    - A lista devolvida por `list_stacks` é ordenada por `path`
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from atlas_stacks.core.config.loader import Attribute, DirConfig, parse_dir, parse_tree
from atlas_stacks.core.context import OperationContext, ensure_context
from atlas_stacks.core.project import host_path


@dataclass(frozen=True)
class Stack:
    """Stack já carregado: metadados + declaração `watch` (ainda não avaliada)."""

    path: str
    name: str
    description: str = ""
    watch: Optional[Attribute] = None

    @classmethod
    def from_config(cls, cfg: DirConfig) -> "Stack":
        if cfg.stack is None:
            raise ValueError(f"{cfg.path} is not a stack")
        name = cfg.stack.name
        if name is None:
            # nome padrão: basename do diretório ("/" para a raiz)
            name = cfg.path.rsplit("/", 1)[-1] or "/"
        return cls(
            path=cfg.path,
            name=name,
            description=cfg.stack.description or "",
            watch=cfg.stack.watch,
        )

    def __str__(self) -> str:
        return self.path


def load_stack(root: Path, ppath: str) -> Optional[Stack]:
    """Carrega o stack do diretório `ppath`, ou None se o diretório não for um stack."""
    dirpath = host_path(root, ppath)
    if not dirpath.is_dir():
        return None
    cfg = parse_dir(root, dirpath)
    if not cfg.is_stack:
        return None
    return Stack.from_config(cfg)


def list_stacks(root: Path, *, ctx: Optional[OperationContext] = None) -> List[Stack]:
    """
    Descobre todos os stacks do projeto.

    Percorre a árvore a partir de `root` (diretórios ocultos ignorados) e
    devolve os stacks ordenados por project path.

    Raises:
        ParsingConfigError: se qualquer arquivo de configuração for inválido.
    """
    ctx = ensure_context(ctx, action="list_stacks", root=str(root))
    ctx.trace("listing stacks")
    stacks = [Stack.from_config(cfg) for cfg in parse_tree(root) if cfg.is_stack]
    stacks.sort(key=lambda s: s.path)
    ctx.debug("stacks found", count=len(stacks))
    return stacks
