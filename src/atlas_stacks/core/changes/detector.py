"""
Detector de stacks alterados.

Dado um baseline (ref git), determina quais stacks do projeto mudaram:

    - um stack muda quando algum arquivo alterado está na subárvore do
      seu diretório, ou
    - quando algum caminho da sua lista `watch` (já resolvida) está no
      conjunto de arquivos alterados.

Decisões arquiteturais:
    - Um único diff por invocação; o conjunto de arquivos alterados é
      compartilhado (somente leitura) por todos os workers
    - A avaliação por stack roda em um pool de threads dimensionado pelo
      paralelismo disponível; cada worker devolve seu próprio resultado
    - `watch` é resolvido para todos os stacks, inclusive os já alterados
      pelo próprio diretório: declaração inválida sempre falha a execução
    - O primeiro erro, na ordem dos stacks, é devolvido; o restante do
      trabalho é cancelado e nenhum resultado parcial é exposto

Invariantes:
    - A saída é ordenada por project path
    - Falhas de globals/watch viram `StackInvalidWatchError`
"""

from __future__ import annotations

import os
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import FrozenSet, List, Mapping, Optional

from atlas_stacks.core.config.loader import GitConfig, parse_root
from atlas_stacks.core.context import OperationContext, ensure_context
from atlas_stacks.core.exceptions import GitError, LoadingGlobalsError, StackInvalidWatchError
from atlas_stacks.core.project import Project, is_inside
from atlas_stacks.core.stack.globals import load_globals
from atlas_stacks.core.stack.namespace import build_namespace
from atlas_stacks.core.stack.stack import Stack, list_stacks
from atlas_stacks.core.stack.watch import resolve_watches


def default_baseline(project: Project, git: Optional[GitConfig] = None) -> str:
    """
    Baseline padrão para a detecção de mudanças.

    No branch padrão compara com `default_branch_base_ref` (`HEAD^`);
    em qualquer outro branch, com `<default_remote>/<default_branch>`.
    """
    if project.vcs is None:
        raise GitError(
            message=f"{project.root} is not inside a git repository",
            hint="run inside a git repository or pass an explicit baseline",
        )
    git = git or parse_root(project.root).git()
    if project.vcs.current_branch() == git.default_branch:
        return git.default_branch_base_ref
    return f"{git.default_remote}/{git.default_branch}"


def _stack_changed(
    root: Path,
    stack: Stack,
    changed: FrozenSet[str],
    environ: Optional[Mapping[str, str]],
    ctx: OperationContext,
) -> bool:
    ctx = ctx.bind(stack=stack.path)
    in_subtree = any(is_inside(f, stack.path) for f in changed)

    watches: List[str] = []
    if stack.watch is not None:
        try:
            globals_ = load_globals(root, stack, ctx=ctx, environ=environ)
        except LoadingGlobalsError as e:
            raise StackInvalidWatchError(
                message=f"stack {stack.path}: {e.message}",
                details={"stack": stack.path},
            ) from e
        namespace = build_namespace(stack, globals_, environ)
        watches = resolve_watches(root, stack, namespace, ctx=ctx)

    if in_subtree:
        ctx.trace("stack changed", reason="subtree")
        return True
    for path in watches:
        if path in changed:
            ctx.trace("stack changed", reason="watch", path=path)
            return True
    return False


def list_changed_stacks(
    project: Project,
    baseline: Optional[str] = None,
    *,
    ctx: Optional[OperationContext] = None,
    max_workers: Optional[int] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> List[Stack]:
    """
    Lista os stacks alterados desde `baseline`.

    Args:
        project (Project): Raiz do projeto + colaborador VCS.
        baseline (Optional[str]): Ref git de comparação (padrão: ver
            `default_baseline`).
        ctx (Optional[OperationContext]): Contexto de diagnóstico.
        max_workers (Optional[int]): Tamanho do pool (padrão: CPUs disponíveis).
        environ (Optional[Mapping[str, str]]): Ambiente exposto como `env`.

    Returns:
        List[Stack]: stacks alterados, ordenados por path.

    Raises:
        StackInvalidWatchError: se a `watch` de qualquer stack for inválida.
        ParsingConfigError: se a configuração do projeto for inválida.
        GitError: se o diff não puder ser calculado.
    """
    root = project.root
    ctx = ensure_context(ctx, action="list_changed_stacks", root=str(root))

    if project.vcs is None:
        raise GitError(message=f"{root} is not inside a git repository")
    if baseline is None:
        baseline = default_baseline(project)

    ctx.debug("computing changed files", baseline=baseline)
    changed = frozenset(project.vcs.diff_files(baseline))
    ctx.debug("changed files", count=len(changed))

    stacks = list_stacks(root, ctx=ctx)
    if not stacks:
        return []

    workers = max_workers or os.cpu_count() or 1
    result: List[Stack] = []
    with ThreadPoolExecutor(max_workers=min(workers, len(stacks))) as ex:
        futures: List[Future] = [
            ex.submit(_stack_changed, root, stack, changed, environ, ctx) for stack in stacks
        ]
        try:
            for stack, future in zip(stacks, futures):
                if future.result():
                    result.append(stack)
        except BaseException:
            for f in futures:
                f.cancel()
            raise

    result.sort(key=lambda s: s.path)
    ctx.debug("changed stacks", count=len(result))
    return result
