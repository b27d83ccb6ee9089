# tests/core/test_exceptions.py
"""
Testes da hierarquia de exceções e do payload canônico de erro.

Os testes asseguram que:
- cada tipo de erro tem o `kind` estável esperado pela CLI
- `str(exc)` começa pelo `kind`
- `to_payload()` produz um StacksErrorPayload serializável
- exceções da camada de configuração são `ParsingConfigError`
"""

import json

import pytest

try:
    from atlas_stacks.core import errors
    from atlas_stacks.core.config.errors import UnknownConfigBlockError
    from atlas_stacks.core.exceptions import (
        EvalError,
        GitError,
        InvalidEnvVarTypeError,
        LoadingGlobalsError,
        ParsingConfigError,
        StackInvalidWatchError,
        StacksException,
    )
except Exception as e:  # noqa: BLE001
    StacksException = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing exceptions/errors modules. Implement:\n"
            "- src/atlas_stacks/core/errors.py (StacksErrorPayload)\n"
            "- src/atlas_stacks/core/exceptions.py (typed exceptions)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_kinds_are_stable():
    _require_imports()
    assert ParsingConfigError.kind == "parsing configuration"
    assert LoadingGlobalsError.kind == "loading globals"
    assert EvalError.kind == "evaluating expression"
    assert InvalidEnvVarTypeError.kind == "invalid environment variable type"
    assert StackInvalidWatchError.kind == "stack invalid watch"
    assert GitError.kind == "git command failed"


def test_str_and_payload():
    _require_imports()
    exc = StackInvalidWatchError(
        message="stack /s: watch path /external is a directory",
        details={"stack": "/s"},
        hint="watch entries must be files inside the project",
    )
    assert str(exc) == "stack invalid watch: stack /s: watch path /external is a directory"
    payload = exc.to_payload()
    assert payload.type == errors.STACK_INVALID_WATCH
    assert json.loads(json.dumps(payload.to_dict()))["details"] == {"stack": "/s"}
    assert payload.render().splitlines() == [
        "stack invalid watch: stack /s: watch path /external is a directory",
        "hint: watch entries must be files inside the project",
    ]


def test_config_errors_are_parsing_errors():
    _require_imports()
    exc = UnknownConfigBlockError(message="unrecognized key 'stacks'")
    assert isinstance(exc, ParsingConfigError)
    assert isinstance(exc, StacksException)
    assert str(exc).startswith("parsing configuration: ")


def test_exceptions_can_be_raised_and_chained():
    _require_imports()
    with pytest.raises(LoadingGlobalsError) as exc:
        try:
            raise EvalError(message="boom")
        except EvalError as cause:
            raise LoadingGlobalsError(message="wrapped") from cause
    assert isinstance(exc.value.__cause__, EvalError)
