# tests/cli/test_cli.py
"""
Testes da CLI (`atlas_stacks.cli.main`), sem git.

Os testes asseguram que:
- `list` imprime um project path por linha, exit 0
- `run-env` imprime `NOME=valor` por linha
- erros saem em stderr como `error: <tipo>: <mensagem>`, exit 1
- `--log-events` exporta os eventos estruturados como JSON lines
"""

import json

import pytest

from tests.e2e._helpers import run_cli, stack_config


@pytest.fixture
def project(make_tree):
    return make_tree(
        {
            "cfg.tm.yaml": "config:\n  run:\n    env:\n      NAME: global.name\n      HOME_DIR: env.HOME\n",
            "stacks/a/stack.tm.yaml": stack_config() + "globals:\n  name: '\"a\"'\n",
            "stacks/b/stack.tm.yaml": stack_config() + "globals:\n  name: '\"b\"'\n",
        }
    )


def test_list(project, capsys):
    code, out, err = run_cli(capsys, ["--chdir", str(project), "list"])
    assert code == 0
    assert out == "/stacks/a\n/stacks/b\n"
    assert err == ""


def test_run_env(project, capsys, monkeypatch):
    monkeypatch.setenv("HOME", "/home/cli")
    code, out, _ = run_cli(capsys, ["-C", str(project), "run-env", "stacks/b"])
    assert code == 0
    assert out.splitlines() == ["HOME_DIR=/home/cli", "NAME=b"]


def test_run_env_not_a_stack(project, capsys):
    code, out, err = run_cli(capsys, ["-C", str(project), "run-env", "stacks"])
    assert code == 1
    assert out == ""
    assert err.startswith("error: atlas stacks error: /stacks is not a stack\n")
    assert "hint: run `atlas-stacks list`" in err


def test_parsing_error_exit_code(make_tree, capsys):
    root = make_tree({"stack/stack.tm.yaml": "stack:\n  watch: '[1,'\n"})
    code, out, err = run_cli(capsys, ["-C", str(root), "list"])
    assert code == 1
    assert out == ""
    assert err.startswith("error: parsing configuration: ")


def test_log_events(project, capsys):
    code, out, err = run_cli(capsys, ["-C", str(project), "--log-events", "list"])
    assert code == 0
    events = [json.loads(line) for line in err.splitlines()]
    assert events
    assert {e["run_id"] for e in events} == {events[0]["run_id"]}
    assert any(e["message"] == "stacks found" for e in events)


def test_missing_command_is_usage_error(capsys):
    with pytest.raises(SystemExit) as exc:
        run_cli(capsys, [])
    assert exc.value.code == 2
