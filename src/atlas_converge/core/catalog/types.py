# src/atlas_converge/core/catalog/types.py
"""
Tipos canônicos do catálogo do Atlas Converge.

Este módulo define as estruturas imutáveis que circulam entre recursos,
grafo de relacionamentos, EventManager e relatório.

Componentes principais:
    - EventStatus → enum de desfechos (SUCCESS, FAILURE, NOOP)
    - Event       → registro imutável de um desfecho, ligado ao recurso de origem
    - Edge        → relacionamento dirigido entre dois recursos, com gatilho
                    e callback opcionais (notify/subscribe)

Invariantes:
    - Todo Event possui exatamente um recurso de origem (`resource`)
    - Um Event nunca é alterado após criado
    - Edges referenciam recursos pela referência estável (`Type[title]`)

Limites explícitos:
    - Não avalia recursos
    - Não roteia eventos
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


# Valor observado/desejado de uma propriedade inexistente no sistema.
ABSENT = "absent"

# Gatilhos de edge
ALL_EVENTS = "ALL_EVENTS"
NONE = "NONE"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EventStatus(str, Enum):
    """
    Desfechos possíveis de um Event.

    Estados definidos:
        - SUCCESS: mudança aplicada (ou reação sintética bem-sucedida)
        - FAILURE: provider falhou ao aplicar a mudança
        - NOOP: mudança calculada mas não aplicada (modo noop)

    Os valores são strings para facilitar a serialização no relatório.
    """

    SUCCESS = "success"
    FAILURE = "failure"
    NOOP = "noop"


@dataclass(frozen=True)
class Event:
    """
    Registro imutável de um desfecho de propriedade (ou reação sintética).

    Campos:
        - resource: referência do recurso de origem (ex.: "File[/etc/motd]")
        - name: nome do evento (ex.: "content_changed", "service_created",
          "restarted", "noop_restart"); usado no casamento com edges
        - status: desfecho (`EventStatus`)
        - message: mensagem humana
        - property: propriedade alterada, quando aplicável
        - previous_value / desired_value: valores "is" e "should"
        - time: instante UTC de criação
    """

    resource: str
    name: str
    status: EventStatus = EventStatus.SUCCESS
    message: str = ""
    property: Optional[str] = None
    previous_value: Any = None
    desired_value: Any = None
    time: datetime = field(default_factory=_utcnow, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resource": self.resource,
            "name": self.name,
            "status": self.status.value,
            "message": self.message,
            "property": self.property,
            "previous_value": self.previous_value,
            "desired_value": self.desired_value,
            "time": self.time.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Event":
        time = data.get("time")
        return cls(
            resource=data["resource"],
            name=data["name"],
            status=EventStatus(data.get("status", EventStatus.SUCCESS.value)),
            message=data.get("message", ""),
            property=data.get("property"),
            previous_value=data.get("previous_value"),
            desired_value=data.get("desired_value"),
            time=datetime.fromisoformat(time) if time else _utcnow(),
        )


@dataclass(frozen=True)
class Edge:
    """
    Relacionamento dirigido `source → target` no grafo de relacionamentos.

    Toda edge é uma dependência de ordenação (source é avaliado antes de
    target). Quando carrega `callback` e um gatilho diferente de `NONE`,
    a edge também é uma assinatura: eventos de `source` cujo nome casa com
    o gatilho enfileiram `callback` para `target`.

    Gatilhos:
        - NONE: apenas ordenação (default)
        - ALL_EVENTS: qualquer evento do source
        - "<nome>": apenas eventos com esse nome
    """

    source: str
    target: str
    event: str = NONE
    callback: Optional[str] = None

    def match(self, event_name: str) -> bool:
        if not self.callback or self.event == NONE:
            return False
        return self.event == ALL_EVENTS or self.event == event_name
