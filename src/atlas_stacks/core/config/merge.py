"""
Utilitário canônico de deep-merge de configuração.

Este módulo implementa a política de deep-merge usada para combinar os
blocos `config` de múltiplos arquivos da raiz do projeto (lidos em ordem
lexicográfica de nome de arquivo).

Política de merge (v1):
    - dict → merge recursivo por chave
    - list → sobrescrita total (sem merge elemento a elemento)
    - escalar → sobrescrita direta
    - conflito de tipos → erro estrutural explícito

Princípios fundamentais:
    - O merge é determinístico e puramente funcional
    - Nenhum input é mutado durante o processo

Limites explícitos:
    - Não carrega arquivos de configuração
    - Não se aplica a `config.run.env` (atributos de run env preservam
      cada definição com sua origem, ver `core.config.loader`)
    - Não realiza coerção de tipos
"""

from copy import deepcopy
from typing import Any, Dict, Optional

from .errors import ConfigTypeConflictError


def deep_merge(
    base: Dict[str, Any],
    override: Dict[str, Any],
    *,
    origin: Optional[str] = None,
    _path: str = "",
) -> Dict[str, Any]:
    """
    Realiza um deep-merge determinístico entre dois dicionários de configuração.

    Args:
        base (Dict[str, Any]): Configuração acumulada até aqui.
        override (Dict[str, Any]): Configuração do próximo arquivo.
        origin (Optional[str]): Arquivo de onde `override` veio (diagnóstico).

    Returns:
        Dict[str, Any]: Nova configuração resultante do deep-merge.

    Raises:
        ConfigTypeConflictError: Se ocorrer conflito de tipo entre base e override.
    """

    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            message=(
                f"deep-merge requires dicts at the root, got "
                f"{type(base).__name__} vs {type(override).__name__}"
            ),
            details={"origin": origin},
        )

    result: Dict[str, Any] = deepcopy(base)

    for key, override_value in override.items():
        key_path = f"{_path}.{key}" if _path else str(key)

        if key not in result:
            result[key] = deepcopy(override_value)
            continue

        base_value = result[key]

        # dict -> merge recursivo
        if isinstance(base_value, dict) and isinstance(override_value, dict):
            result[key] = deep_merge(base_value, override_value, origin=origin, _path=key_path)
            continue

        # list -> sobrescrita total
        if isinstance(override_value, list):
            result[key] = deepcopy(override_value)
            continue

        # conflito de tipo
        if type(base_value) is not type(override_value):
            where = f" in {origin}" if origin else ""
            raise ConfigTypeConflictError(
                message=(
                    f"type conflict at key '{key_path}'{where}: "
                    f"{type(base_value).__name__} vs {type(override_value).__name__}"
                ),
                details={"origin": origin, "key": key_path},
            )

        # escalar -> sobrescrita
        result[key] = deepcopy(override_value)

    return result
