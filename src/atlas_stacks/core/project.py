"""
Projeto (raiz + VCS) e caminhos relativos ao projeto.

Um *project path* é um caminho POSIX absoluto a partir da raiz do projeto:
`/` é a raiz, `/stacks/app` é um diretório dentro dela. É a forma usada
em toda saída do core (paths de stacks, watch paths, arquivos alterados).

Invariantes:
    - Project paths são sempre normalizados e começam com `/`
    - A raiz de um `Project` é absoluta e nunca muda após a criação
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Optional, Union

from atlas_stacks.core.exceptions import GitError
from atlas_stacks.core.vcs.git import VCS, Git


def project_path(root: Path, path: Union[str, Path]) -> str:
    """Converte um caminho absoluto do filesystem em project path.

    Raises:
        ValueError: se `path` não estiver dentro de `root`.
    """
    rel = Path(path).relative_to(root)
    if rel == Path("."):
        return "/"
    return "/" + rel.as_posix()


def host_path(root: Path, ppath: str) -> Path:
    """Converte um project path em caminho absoluto do filesystem."""
    rel = ppath.lstrip("/")
    return root / PurePosixPath(rel) if rel else root


def is_inside(ppath: str, dir_ppath: str) -> bool:
    """Indica se `ppath` está na subárvore do diretório `dir_ppath`."""
    if dir_ppath == "/":
        return ppath.startswith("/")
    return ppath == dir_ppath or ppath.startswith(dir_ppath + "/")


def parent_dirs(ppath: str) -> list:
    """Diretórios da raiz até `ppath` (inclusive), em ordem: ['/', '/a', '/a/b']."""
    dirs = ["/"]
    current = ""
    for part in [p for p in ppath.split("/") if p]:
        current = f"{current}/{part}"
        dirs.append(current)
    return dirs


def normalize(ppath: str) -> str:
    """Normaliza lexicamente um project path já absoluto."""
    norm = posixpath.normpath(ppath)
    # normpath preserva '//' inicial (POSIX); project paths têm uma única barra
    return "/" + norm.lstrip("/")


@dataclass(frozen=True)
class Project:
    """Raiz do projeto + colaborador VCS."""

    root: Path
    vcs: Optional[VCS] = None

    @classmethod
    def discover(cls, start: Union[str, Path]) -> "Project":
        """Localiza a raiz do projeto a partir de `start`.

        Dentro de um repositório git a raiz é o top-level do repositório;
        fora de um, é o próprio `start`.
        """
        start_dir = Path(start).resolve()
        git = Git(start_dir)
        try:
            top = git.toplevel()
        except GitError:
            return cls(root=start_dir, vcs=None)
        return cls(root=top, vcs=Git(top))
