# tests/core/expr/test_values.py
"""
Testes da variante etiquetada `Value`.

Os testes asseguram que:
- construtores validam o tipo Python recebido
- acessores falham explicitamente em caso de etiqueta divergente
- `type_name()` produz os nomes amigáveis usados nas mensagens de erro
- a conversão a partir de literais YAML/JSON é fiel e sem coerção
"""

import pytest

try:
    from atlas_stacks.core.expr.values import NULL, Value, ValueKind, ValueTypeError
except Exception as e:  # noqa: BLE001
    Value = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing values module. Implement:\n"
            "- src/atlas_stacks/core/expr/values.py (Value, ValueKind)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_number_rejects_bool():
    _require_imports()
    with pytest.raises(ValueTypeError):
        Value.number(True)


def test_accessor_checks_tag():
    """
    Acessar um Value com a etiqueta errada é erro explícito, nunca coerção.
    """
    _require_imports()
    v = Value.number(3)
    assert v.as_number() == 3
    with pytest.raises(ValueTypeError, match="expected string, got number"):
        v.as_string()


def test_type_name_homogeneous_list():
    _require_imports()
    assert Value.from_python(["a", "b"]).type_name() == "list of string"
    assert Value.from_python(["a", 1]).type_name() == "list"
    assert Value.from_python({"a": 1}).type_name() == "map"
    assert NULL.type_name() == "null"


def test_from_python_roundtrip_keeps_structure():
    _require_imports()
    raw = {"name": "x", "n": 1.5, "flags": [True, False], "none": None}
    v = Value.from_python(raw)
    assert v.kind is ValueKind.MAP
    assert v.as_map()["flags"].as_list()[0].as_bool() is True
    assert v.as_map()["none"].is_null()
    assert v.to_python() == raw


def test_map_value_is_read_only():
    _require_imports()
    v = Value.from_python({"a": 1})
    with pytest.raises(TypeError):
        v.as_map()["b"] = Value.number(2)  # type: ignore[index]
