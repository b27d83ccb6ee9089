# tests/conftest.py
"""
Fixtures compartilhados para testes do Atlas Stacks.

Este módulo define fixtures reutilizáveis que fornecem:
- um projeto vazio em diretório temporário (sem git)
- um sandbox git real com remote `origin`
- um OperationContext determinístico para inspecionar eventos
- um ambiente de processo controlado (`environ`)

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Testes do core não dependem de `os.environ`: o ambiente é injetado
    - O sandbox git é pulado (skip) quando o binário não está disponível

Invariantes:
    - Cada fixture é isolada em `tmp_path`
    - Nenhuma fixture altera o diretório corrente

Limites explícitos:
    - Não contém lógica de domínio
    - Não substitui testes end-to-end
"""

import pytest

from tests.e2e._helpers import GitSandbox, require_git, write_tree


@pytest.fixture
def project_root(tmp_path):
    """
    Fixture que fornece a raiz (absoluta, resolvida) de um projeto vazio.

    Returns:
        Path: diretório do projeto.
    """
    root = tmp_path / "project"
    root.mkdir()
    return root.resolve()


@pytest.fixture
def make_tree(project_root):
    """
    Fixture factory: materializa arquivos sob `project_root`.

    Uso:
        root = make_tree({"stack/stack.tm.yaml": "stack: {}\\n"})
    """

    def _make(files):
        return write_tree(project_root, files)

    return _make


@pytest.fixture
def git_sandbox(tmp_path):
    """
    Fixture que fornece um `GitSandbox` (repositório `main` + remote bare).

    Decisões arquiteturais:
        - Identidade de commit e config global isoladas via env
        - Skip explícito quando `git` não está instalado
    """
    require_git()
    return GitSandbox(tmp_path / "sandbox")


@pytest.fixture
def ctx():
    """
    Fixture que fornece um OperationContext com run_id fixo.

    Returns:
        OperationContext: contexto isolado, com EventLog próprio.
    """
    from atlas_stacks.core.context import OperationContext

    return OperationContext(run_id="run-test-001", fields={"source": "pytest"})


@pytest.fixture
def environ():
    """Ambiente de processo controlado, exposto às expressões como `env`."""
    return {"HOME": "/home/atlas", "TESTENV": "testenv-value"}
