# src/atlas_converge/core/config/options.py
"""
Opções de execução de uma transação.

Este módulo interpreta a seção `transaction` da configuração resolvida e
produz um `TransactionOptions` imutável, consumido pela Transaction.

Chaves reconhecidas (todas opcionais):
    - tags:             filtro de tags (lista ou string delimitada por vírgula)
    - ignore_tags:      desabilita o filtro de tags por completo
    - ignore_schedules: aplica recursos mesmo fora da janela de manutenção
    - noop:             modo noop global (nenhuma mudança é aplicada)
    - evaltrace:        registra no log o tempo de avaliação de cada recurso

Decisões arquiteturais:
    - Filtro vazio significa "sem filtragem" (não "nenhum recurso")
    - Flags booleanas não sofrem coerção implícita
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from .errors import InvalidTransactionOptionError


TagsInput = Union[str, Sequence[str], None]


def parse_tags(value: TagsInput) -> List[str]:
    """
    Normaliza um filtro de tags para lista.

    Regras:
        - None ou ""          → []
        - "one,two"           → ["one", "two"]
        - "one, two"          → ["one", "two"]
        - "one::two"          → ["one::two"]
        - lista/tupla         → armazenada como está (convertida para list)

    Raises:
        InvalidTransactionOptionError: Se o valor não for string nem sequência.
    """
    if value is None:
        return []
    if isinstance(value, str):
        return [t.strip() for t in value.split(",") if t.strip()]
    if isinstance(value, (list, tuple)):
        return list(value)
    raise InvalidTransactionOptionError(
        f"tags deve ser string ou lista, recebido: {type(value).__name__}"
    )


def _flag(section: Dict[str, Any], key: str) -> bool:
    value = section.get(key, False)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise InvalidTransactionOptionError(
            f"transaction.{key} deve ser bool, recebido: {type(value).__name__}"
        )
    return value


@dataclass(frozen=True)
class TransactionOptions:
    """Opções imutáveis que governam uma única transação."""

    tags: List[str] = field(default_factory=list)
    ignore_tags: bool = False
    ignore_schedules: bool = False
    noop: bool = False
    evaltrace: bool = False

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> "TransactionOptions":
        """
        Constrói as opções a partir da configuração resolvida.

        Uma configuração ausente ou sem a seção `transaction` produz os
        defaults (sem filtro de tags, schedules respeitados, noop desligado).

        Raises:
            InvalidTransactionOptionError: Se a seção ou algum valor for inválido.
        """
        section = (config or {}).get("transaction", {}) or {}
        if not isinstance(section, dict):
            raise InvalidTransactionOptionError(
                f"transaction deve ser dict, recebido: {type(section).__name__}"
            )

        return cls(
            tags=parse_tags(section.get("tags")),
            ignore_tags=_flag(section, "ignore_tags"),
            ignore_schedules=_flag(section, "ignore_schedules"),
            noop=_flag(section, "noop"),
            evaltrace=_flag(section, "evaltrace"),
        )
