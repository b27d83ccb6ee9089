"""Colaborador VCS: wrapper mínimo sobre o binário `git`.

O core só consome `diff_files(baseline)` (o ChangedFileSet); as demais
operações (`commit_all`, `push`, `checkout_new`, ...) existem para a CLI
e para os sandboxes de teste.

Todos os comandos rodam via `subprocess.run` com `git -C <repo>`; qualquer
falha (binário ausente, timeout, exit code != 0) vira `GitError`.
"""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import List, Mapping, Optional, Protocol, Sequence, runtime_checkable

from atlas_stacks.core.exceptions import GitError


DEFAULT_TIMEOUT_SECONDS = 60.0


@runtime_checkable
class VCS(Protocol):
    """Contrato do colaborador VCS consumido pelo detector de mudanças."""

    def diff_files(self, baseline: str) -> List[str]:
        """Arquivos alterados entre `baseline` e a working tree, como project paths."""
        ...

    def current_branch(self) -> str:
        ...

    def commit_all(self, message: str) -> None:
        ...

    def push(self, branch: str, remote: str = "origin") -> None:
        ...

    def checkout_new(self, branch: str) -> None:
        ...


class Git:
    """Executa comandos git em um repositório local."""

    def __init__(
        self,
        repo_dir: Path,
        *,
        env: Optional[Mapping[str, str]] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.repo_dir = Path(repo_dir)
        self.env = dict(env or {})
        self.timeout_seconds = timeout_seconds

    def run(self, *args: str) -> str:
        """Executa `git <args>` e devolve stdout.

        Raises:
            GitError: se o comando não puder ser executado ou falhar.
        """
        cmd = ["git", "-C", str(self.repo_dir), *args]
        env = None
        if self.env:
            env = dict(os.environ)
            env.update(self.env)
        try:
            proc = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
                timeout=self.timeout_seconds,
                env=env,
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise GitError(
                message=f"running {' '.join(cmd[3:])}: {e}",
                details={"repo": str(self.repo_dir), "args": list(args)},
            ) from e
        if proc.returncode != 0:
            raise GitError(
                message=f"git {' '.join(args)}: exit status {proc.returncode}: {proc.stderr.strip()}",
                details={
                    "repo": str(self.repo_dir),
                    "args": list(args),
                    "returncode": proc.returncode,
                    "stderr": proc.stderr,
                },
            )
        return proc.stdout

    # -----------------------------
    # Consultas
    # -----------------------------
    def toplevel(self) -> Path:
        return Path(self.run("rev-parse", "--show-toplevel").strip()).resolve()

    def current_branch(self) -> str:
        return self.run("rev-parse", "--abbrev-ref", "HEAD").strip()

    def rev_parse(self, ref: str) -> str:
        return self.run("rev-parse", "--verify", ref).strip()

    def diff_files(self, baseline: str) -> List[str]:
        """Lista arquivos adicionados/modificados/removidos desde `baseline`.

        Compara `baseline` com a working tree; renomeações aparecem como
        remoção + adição (ambos os caminhos entram no resultado). Caminhos
        são relativos a `repo_dir` e devolvidos como project paths (`/a/b`).
        """
        out = self.run("diff", "--name-only", "--no-renames", "--relative", "-z", baseline, "--")
        return sorted({"/" + p for p in out.split("\0") if p})

    # -----------------------------
    # Escrita (CLI / sandboxes)
    # -----------------------------
    def init(self, default_branch: str = "main", *, bare: bool = False) -> None:
        args: Sequence[str] = ("init", "--quiet", f"--initial-branch={default_branch}")
        if bare:
            args = (*args, "--bare")
        self.run(*args)

    def add_remote(self, name: str, url: str) -> None:
        self.run("remote", "add", name, url)

    def commit_all(self, message: str) -> None:
        self.run("add", "--all")
        self.run("commit", "--quiet", "--allow-empty", "-m", message)

    def push(self, branch: str, remote: str = "origin") -> None:
        self.run("push", "--quiet", remote, branch)

    def checkout_new(self, branch: str) -> None:
        self.run("checkout", "--quiet", "-b", branch)
