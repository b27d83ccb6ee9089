# tests/e2e/test_list_watch.py
"""
Cenários end-to-end de `atlas-stacks list --changed` com `watch`.

Cada cenário:
    1. cria um projeto versionado em git (sandbox com remote `origin`)
    2. commita tudo em `main`, publica `main` e abre um branch
    3. altera arquivos e commita no branch
    4. executa a CLI e verifica stdout/stderr/exit code

O baseline é o padrão (`origin/main`, pois o branch corrente não é o
branch padrão).

Limites explícitos:
    - Pulados quando o binário `git` não está disponível
"""

from tests.e2e._helpers import run_cli, stack_config


def _list_changed(capsys, sandbox):
    return run_cli(capsys, ["--chdir", str(sandbox.root), "list", "--changed"])


def test_watch_changed_file(git_sandbox, capsys):
    git_sandbox.write(
        {
            "external/file.txt": "anything",
            "external/not-changed.txt": "anything",
            "stack/stack.tm.yaml": stack_config(
                watch='["/external/file.txt", "/external/not-changed.txt"]'
            ),
        }
    )
    git_sandbox.start_feature()
    git_sandbox.write({"external/file.txt": "changed"})
    git_sandbox.commit_all("external file changed")

    assert _list_changed(capsys, git_sandbox) == (0, "/stack\n", "")


def test_watch_relative_changed_file(git_sandbox, capsys):
    git_sandbox.write(
        {
            "external/file.txt": "anything",
            "stack/stack.tm.yaml": stack_config(watch='["../external/file.txt"]'),
        }
    )
    git_sandbox.start_feature()
    git_sandbox.write({"external/file.txt": "changed"})
    git_sandbox.commit_all("external file changed")

    assert _list_changed(capsys, git_sandbox) == (0, "/stack\n", "")


def test_watch_file_outside_project(git_sandbox, capsys):
    git_sandbox.write(
        {
            "external/file.txt": "anything",
            "stack/stack.tm.yaml": stack_config(
                watch='["../../this-stack-must-never-be-visible/cfg.tm.yaml"]'
            ),
        }
    )
    git_sandbox.start_feature()
    git_sandbox.write({"external/file.txt": "changed"})
    git_sandbox.commit_all("external file changed")

    code, out, err = _list_changed(capsys, git_sandbox)
    assert code == 1
    assert out == ""
    assert "stack invalid watch" in err


def test_watch_non_existent_file(git_sandbox, capsys):
    git_sandbox.write({"stack/stack.tm.yaml": stack_config(watch='["/external/non-existent.txt"]')})
    git_sandbox.start_feature()
    git_sandbox.write({"test.txt": "anything"})
    git_sandbox.commit_all("any change")

    assert _list_changed(capsys, git_sandbox) == (0, "", "")


def test_watch_elements_with_funcalls(git_sandbox, capsys):
    git_sandbox.write(
        {
            "EXTERNAL/FILE.TXT": "anything",
            "EXTERNAL/not-changed.txt": "anything",
            "stack/stack.tm.yaml": stack_config(watch='[tm_upper("/external/file.txt")]'),
        }
    )
    git_sandbox.start_feature()
    git_sandbox.write({"EXTERNAL/FILE.TXT": "changed"})
    git_sandbox.commit_all("external file changed")

    assert _list_changed(capsys, git_sandbox) == (0, "/stack\n", "")


def test_watch_expr_with_funcalls(git_sandbox, capsys):
    """
    A lista `watch` vem de `deps.txt`, lido com `tm_file` relativo ao
    diretório do arquivo de configuração do stack.
    """
    git_sandbox.write(
        {
            "external/file1.txt": "anything",
            "external/file2.txt": "anything",
            "external/unrelated.txt": "anything",
            "external/deps.txt": "/external/file1.txt\n/external/file2.txt",
            "stack/stack.tm.yaml": stack_config(
                watch=(
                    'tm_concat(tm_split("\\n", tm_file("../external/deps.txt")), [\n'
                    '  "/external/unrelated.txt",\n'
                    "])"
                )
            ),
        }
    )
    git_sandbox.start_feature()
    git_sandbox.write({"external/file1.txt": "changed"})
    git_sandbox.commit_all("external file changed")

    assert _list_changed(capsys, git_sandbox) == (0, "/stack\n", "")


def test_watch_directory_fails(git_sandbox, capsys):
    git_sandbox.write(
        {
            "external/file.txt": "anything",
            "stack/stack.tm.yaml": stack_config(watch='["/external"]'),
        }
    )
    git_sandbox.start_feature()
    git_sandbox.write({"external/file.txt": "changed"})
    git_sandbox.commit_all("external file changed")

    code, out, err = _list_changed(capsys, git_sandbox)
    assert code == 1
    assert out == ""
    assert err.startswith("error: stack invalid watch: stack /stack: watch path /external is a directory")


def test_stack_subtree_and_sorting(git_sandbox, capsys):
    git_sandbox.write(
        {
            "stacks/z/stack.tm.yaml": stack_config(),
            "stacks/a/stack.tm.yaml": stack_config(),
            "stacks/a/child/stack.tm.yaml": stack_config(),
            "stacks/m/stack.tm.yaml": stack_config(),
        }
    )
    git_sandbox.start_feature()
    git_sandbox.write({"stacks/z/main.tf": "x", "stacks/a/child/main.tf": "x"})
    git_sandbox.commit_all("change")

    assert _list_changed(capsys, git_sandbox) == (0, "/stacks/a\n/stacks/a/child\n/stacks/z\n", "")


def test_explicit_baseline_on_default_branch(git_sandbox, capsys):
    git_sandbox.write({"s1/stack.tm.yaml": stack_config(), "s2/stack.tm.yaml": stack_config()})
    git_sandbox.commit_all("base")
    git_sandbox.write({"s2/main.tf": "x"})
    git_sandbox.commit_all("touch s2")

    # em main o baseline padrão é HEAD^
    assert _list_changed(capsys, git_sandbox) == (0, "/s2\n", "")
    code, out, _ = run_cli(capsys, ["-C", str(git_sandbox.root), "list", "--changed", "--baseline", "HEAD~1"])
    assert (code, out) == (0, "/s2\n")
