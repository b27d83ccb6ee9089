"""Common helpers for Atlas Stacks tests.

Centraliza boilerplate para cenários com filesystem e git:
- materialização de uma árvore de arquivos (`write_tree`)
- sandbox git real (repositório + remote bare), com identidade e
  configuração global isoladas do ambiente do desenvolvedor
- execução da CLI via `main(argv)` capturando stdout/stderr

Princípios:
- usar APENAS APIs públicas do core
- nenhum teste depende do `~/.gitconfig` de quem roda a suíte
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from atlas_stacks.core.project import Project
from atlas_stacks.core.vcs.git import Git


def write_tree(root: Path, files: Dict[str, str]) -> Path:
    """Cria `files` (path relativo → conteúdo) sob `root` e devolve `root`."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


def stack_config(*, watch: Optional[str] = None, name: Optional[str] = None) -> str:
    """YAML mínimo de um stack; `watch` é texto de expressão."""
    lines = ["stack:"]
    if name is not None:
        lines.append(f"  name: {name}")
    if watch is not None:
        lines.append("  watch: |")
        lines.extend(f"    {line}" for line in watch.splitlines())
    if len(lines) == 1:
        lines[0] = "stack: {}"
    return "\n".join(lines) + "\n"


def require_git() -> None:
    if shutil.which("git") is None:
        pytest.skip("git executable not available")


class GitSandbox:
    """Projeto de teste versionado em git, com remote `origin` (bare)."""

    def __init__(self, base: Path) -> None:
        base = base.resolve()
        self.root = base / "repo"
        self.remote = base / "remote.git"
        self.root.mkdir(parents=True)
        self.remote.mkdir()

        gitconfig = base / "gitconfig"
        gitconfig.write_text("", encoding="utf-8")
        env = {
            "GIT_AUTHOR_NAME": "atlas",
            "GIT_AUTHOR_EMAIL": "atlas@example.com",
            "GIT_COMMITTER_NAME": "atlas",
            "GIT_COMMITTER_EMAIL": "atlas@example.com",
            "GIT_CONFIG_GLOBAL": str(gitconfig),
            "GIT_CONFIG_NOSYSTEM": "1",
        }
        Git(self.remote, env=env).init(bare=True)
        self.git = Git(self.root, env=env)
        self.git.init("main")
        self.git.add_remote("origin", str(self.remote))

    @property
    def project(self) -> Project:
        return Project(root=self.root, vcs=self.git)

    def write(self, files: Dict[str, str]) -> None:
        write_tree(self.root, files)

    def commit_all(self, message: str) -> None:
        self.git.commit_all(message)

    def push(self, branch: str) -> None:
        self.git.push(branch)

    def checkout_new(self, branch: str) -> None:
        self.git.checkout_new(branch)

    def start_feature(self, branch: str = "change-the-external") -> None:
        """Commita tudo em main, publica main e abre um branch de trabalho."""
        self.commit_all("all")
        self.push("main")
        self.checkout_new(branch)


def run_cli(capsys, argv: List[str]):
    """Executa a CLI e devolve (exit_code, stdout, stderr)."""
    from atlas_stacks.cli import main

    code = main(argv)
    captured = capsys.readouterr()
    return code, captured.out, captured.err
