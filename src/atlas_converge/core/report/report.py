# src/atlas_converge/core/report/report.py
"""
TransactionReport v1 — registro do resultado de uma transação.

Este módulo define a estrutura canônica do relatório produzido por uma
Transaction e as funções de criação associadas.

O relatório consolida, de forma determinística e auditável:
    - metadados da execução (run_id, início, hash da configuração,
      versão do catálogo)
    - métricas por categoria (resources, time, changes)
    - Event Log ordenado com todos os Events da transação
    - cópia do log estruturado do RunContext
    - instante de fechamento (`time`)

Princípios fundamentais:
    - Nenhum evento é registrado implicitamente
    - A ordem de `events` reflete a ordem real de produção
    - O relatório é serializável e reconstruível (round-trip)

Decisões arquiteturais:
    - UTC é o timezone canônico para todos os timestamps
    - Métricas são dicionários planos por categoria, com `label` humano
    - O relatório é independente do engine: ele apenas recebe chamadas

Limites explícitos:
    - Não executa transação
    - Não persiste em disco
    - Não realiza migração de versões de schema
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from atlas_converge.core.catalog.types import Event, EventStatus


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Normaliza um timestamp para timezone-aware em UTC (naive é assumido UTC)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


@dataclass
class TransactionReport:
    """
    Relatório v1 — registro de uma transação.

    Campos principais:
        - run: metadados da execução (run_id, started_at, config_hash,
          catalog_version)
        - metrics: métricas por categoria (`resources`, `time`, `changes`)
        - events: Events na ordem em que foram registrados
        - logs: cópia do log estruturado da transação
        - time: instante em que as métricas foram publicadas

    Invariantes:
        - `events` é sempre uma lista ordenada
        - `metrics` é sempre um dicionário indexado pelo nome da categoria
        - A estrutura completa é serializável via `to_dict`
    """

    run: Dict[str, Any]
    metrics: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Event] = field(default_factory=list)
    logs: List[Dict[str, Any]] = field(default_factory=list)
    time: Optional[datetime] = None

    def register_event(self, event: Event) -> None:
        self.events.append(event)

    def newmetric(self, name: str, values: Dict[str, Any]) -> None:
        """
        Publica (ou substitui) a categoria de métricas `name`.

        Os valores são copiados; alterações posteriores no dicionário
        original não afetam o relatório.
        """
        self.metrics[name] = dict(values)

    def metric(self, name: str, key: str, default: Any = None) -> Any:
        return self.metrics.get(name, {}).get(key, default)

    def events_for(self, resource: str) -> List[Event]:
        return [e for e in self.events if e.resource == resource]

    @property
    def status(self) -> str:
        """
        Status agregado da transação.

        - "failed": algum recurso falhou ou algum Event é FAILURE
        - "changed": alguma mudança foi aplicada
        - "unchanged": nada foi alterado
        """
        if self.metric("resources", "failed", 0) or any(
            e.status == EventStatus.FAILURE for e in self.events
        ):
            return "failed"
        if self.metric("changes", "total", 0):
            return "changed"
        return "unchanged"

    def to_dict(self) -> Dict[str, Any]:
        """
        Converte o relatório para sua representação em dicionário.

        Decisões arquiteturais:
            - Retorna apenas tipos serializáveis
            - Evita vazamento de referências internas

        Returns:
            Dict[str, Any]: Representação serializável do relatório.
        """
        return {
            "run": dict(self.run),
            "metrics": {k: dict(v) for k, v in self.metrics.items()},
            "events": [e.to_dict() for e in self.events],
            "logs": [dict(entry) for entry in self.logs],
            "time": _iso(self.time) if self.time is not None else None,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TransactionReport":
        """
        Reconstrói um relatório a partir de sua representação em dicionário.

        Campos ausentes são inicializados com valores vazios; `status` é
        sempre recalculado e nunca lido do dicionário.
        """
        time = data.get("time")
        return cls(
            run=dict(data.get("run", {})),
            metrics={k: dict(v) for k, v in (data.get("metrics", {}) or {}).items()},
            events=[Event.from_dict(e) for e in (data.get("events", []) or [])],
            logs=[dict(entry) for entry in (data.get("logs", []) or [])],
            time=datetime.fromisoformat(time) if time else None,
        )


def create_report(
    *,
    run_id: str,
    started_at: datetime,
    config_hash: str,
    catalog_version: Optional[str] = None,
) -> TransactionReport:
    """
    Cria o relatório inicial de uma transação.

    ⚠️ Importante: esta função **não registra eventos nem métricas**.
    Eles só são preenchidos por chamadas explícitas a `register_event`
    e `newmetric`, feitas pela Transaction.

    Args:
        run_id (str): Identificador único da execução.
        started_at (datetime): Timestamp de início da execução.
        config_hash (str): Hash canônico da configuração resolvida.
        catalog_version (Optional[str]): Versão do catálogo aplicado.

    Returns:
        TransactionReport: Relatório vazio com metadados de execução.
    """
    return TransactionReport(
        run={
            "run_id": run_id,
            "started_at": _iso(started_at),
            "config_hash": config_hash,
            "catalog_version": catalog_version,
        },
    )
