# src/atlas_converge/core/config/__init__.py

"""
Camada de configuração do Atlas Converge.

Este pacote contém as estruturas e utilitários responsáveis por carregar,
mesclar, identificar e interpretar a configuração de uma transação.

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (defaults + overrides locais)
    - Resolução de configuração final via deep-merge determinístico
    - Geração de hash canônico para rastreabilidade no relatório
    - Interpretação da seção `transaction` em `TransactionOptions`

Invariantes:
    - A configuração final é um dicionário puro (dict)
    - Conflitos estruturais são tratados como erro

Limites explícitos:
    - Não executa transação
    - Não interage com recursos ou providers diretamente
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidTransactionOptionError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .loader import load_config
from .merge import deep_merge
from .options import TransactionOptions, parse_tags

__all__ = [
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "InvalidTransactionOptionError",
    "UnsupportedConfigFormatError",
    "compute_config_hash",
    "load_config",
    "deep_merge",
    "TransactionOptions",
    "parse_tags",
]
