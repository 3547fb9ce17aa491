# src/atlas_converge/core/config/merge.py
"""
Utilitário canônico de deep-merge de configuração.

Este módulo implementa a política de deep-merge utilizada pelo Atlas
Converge para resolver a configuração final de uma transação a partir
de uma configuração base (defaults) e overrides locais explícitos.

Política de merge (v1):
    - dict + dict → merge recursivo por chave
    - list        → sobrescrita total (ex.: lista de tags)
    - escalar     → sobrescrita direta pelo override
    - conflito de tipos → erro estrutural explícito

Invariantes:
    - Os inputs nunca são mutados
    - O mesmo par (base, override) sempre produz o mesmo resultado
"""

from copy import deepcopy
from typing import Any, Dict

from .errors import ConfigTypeConflictError


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Combina recursivamente `override` sobre `base`, produzindo um novo dicionário.

    Args:
        base (Dict[str, Any]): Configuração base (ex.: defaults).
        override (Dict[str, Any]): Overrides explícitos da configuração.

    Returns:
        Dict[str, Any]: Nova configuração resultante do deep-merge.

    Raises:
        ConfigTypeConflictError: Se ocorrer conflito de tipo entre base e override.
    """
    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"Deep-merge requer dicts no nível raiz, recebido: "
            f"{type(base).__name__} vs {type(override).__name__}"
        )

    result: Dict[str, Any] = deepcopy(base)

    for key, override_value in override.items():
        if key not in result:
            result[key] = deepcopy(override_value)
            continue

        base_value = result[key]

        if isinstance(base_value, dict) and isinstance(override_value, dict):
            result[key] = deep_merge(base_value, override_value)
            continue

        # list -> sobrescrita total
        if isinstance(override_value, list):
            result[key] = deepcopy(override_value)
            continue

        # `tags: ""` sobrescreve `tags: [...]` e vice-versa (ambas as formas são aceitas)
        if key == "tags" and isinstance(base_value, list) and isinstance(override_value, str):
            result[key] = override_value
            continue

        if base_value is not None and override_value is not None:
            if type(base_value) is not type(override_value):
                raise ConfigTypeConflictError(
                    f"Conflito de tipo na chave '{key}': "
                    f"{type(base_value).__name__} vs {type(override_value).__name__}"
                )

        result[key] = deepcopy(override_value)

    return result
