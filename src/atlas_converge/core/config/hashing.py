# src/atlas_converge/core/config/hashing.py
"""
Hashing canônico de configuração do Atlas Converge.

O hash gerado representa a **identidade estrutural** da configuração
efetiva de uma transação e é registrado no relatório da execução
(`report.run["config_hash"]`), permitindo associar resultados à
configuração que os produziu.

Invariantes:
    - Configurações estruturalmente equivalentes produzem o mesmo hash
    - O valor gerado é sempre uma string hexadecimal de 64 caracteres
"""

import json
import hashlib
from typing import Dict, Any


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera um hash SHA-256 determinístico da configuração efetiva.

    Política de hashing (v1):
        - Serialização JSON canônica (chaves ordenadas, separadores compactos)
        - Codificação UTF-8

    Args:
        config (Dict[str, Any]): Configuração efetiva da transação.

    Returns:
        str: Hash SHA-256 hexadecimal da configuração.

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    canonical_json = json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()
