# src/atlas_converge/core/engine/event_manager.py
"""
Roteamento de eventos entre recursos.

O EventManager recebe cada Event produzido durante a transação, decide
quais recursos devem reagir a ele (via edges do RelationshipGraph) e
dispara essas reações quando chega a vez do recurso alvo.

Responsabilidades do módulo:
    - Registrar todo Event no log global e no relatório
    - Enfileirar reações (target, callback, event) para assinaturas que casam
    - Disparar reações na vez do alvo, isolando falhas de callback
    - Propagar cascatas noop sem executar reações

Decisões arquiteturais:
    - Reações são drenadas apenas na vez do alvo; como a avaliação segue a
      ordem topológica do mesmo grafo, todos os eventos que poderiam
      disparar o alvo já foram enfileirados quando ele é visitado
    - Um grupo de eventos composto só por eventos noop nunca executa o
      callback; em vez disso é sintetizado um evento `noop_restart`
    - Exceções de callback são convertidas em log + métrica
      `failed_restarts` e nunca escapam de `process_events`
    - Cada passada de um recurso produz no máximo um evento `restarted`

Invariantes:
    - Toda reação enfileirada referencia um alvo distinto da origem, exceto
      quando o recurso declara `self_refresh`
    - A fila de um recurso é consumida exatamente uma vez

Limites explícitos:
    - Não calcula nem aplica mudanças
    - Não decide a ordem de avaliação
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterator, List, Tuple

from atlas_converge.core.catalog.resource import Resource
from atlas_converge.core.catalog.types import Event, EventStatus
from atlas_converge.core.errors import callback_failed

if TYPE_CHECKING:
    from .transaction import Transaction


RESTARTED = "restarted"
NOOP_RESTART = "noop_restart"
SELF_REFRESH_CALLBACK = "refresh"


class EventManager:
    """
    Fila de reações pendentes de uma Transaction.

    A estrutura interna é `{target_ref: {callback: [Event, ...]}}`, com
    callbacks na ordem em que foram enfileirados pela primeira vez.
    """

    def __init__(self, transaction: "Transaction"):
        self.transaction = transaction
        self.events: List[Event] = []
        self._event_queues: Dict[str, Dict[str, List[Event]]] = {}

    @property
    def relationship_graph(self):
        return self.transaction.relationship_graph

    @property
    def report(self):
        return self.transaction.report

    # -----------------------------
    # Enfileiramento
    # -----------------------------
    def queue_event(self, resource: Resource, event: Event) -> None:
        """
        Registra `event` e enfileira as reações que ele dispara.

        `resource` é quem responde pelo evento no grafo; para filhos
        gerados em avaliação ele sobrescreve a origem do próprio evento.
        """
        self.events.append(event)
        self.report.register_event(event)

        catalog = self.transaction.catalog
        for edge in self.relationship_graph.matching_edges(event, resource):
            target = catalog.find_resource(edge.target)
            if target is None or not target.supports(edge.callback):
                continue
            self.queue_event_for_resource(resource, target, edge.callback, event)

        # eventos sintetizados por uma reação nunca reagendam o próprio recurso
        if (
            event.name not in (RESTARTED, NOOP_RESTART)
            and resource.self_refresh
            and not resource.deleting
            and resource.supports(SELF_REFRESH_CALLBACK)
        ):
            self.queue_event_for_resource(resource, resource, SELF_REFRESH_CALLBACK, event)

    def queue_event_for_resource(
        self,
        source: Resource,
        target: Resource,
        callback: str,
        event: Event,
    ) -> None:
        self.transaction.ctx.log(
            resource=source.ref,
            level="info",
            message=f"Scheduling {callback} of {target.ref}",
        )
        callbacks = self._event_queues.setdefault(target.ref, {})
        callbacks.setdefault(callback, []).append(event)

    def queued_events(self, resource: Resource) -> Iterator[Tuple[str, List[Event]]]:
        """Consome a fila de `resource`, devolvendo pares (callback, eventos)."""
        callbacks = self._event_queues.pop(resource.ref, None)
        if not callbacks:
            return
        for callback, events in callbacks.items():
            yield callback, events

    def pending(self, resource: Resource) -> Dict[str, List[Event]]:
        """Visão (cópia) das reações ainda não consumidas para `resource`."""
        return {cb: list(evs) for cb, evs in self._event_queues.get(resource.ref, {}).items()}

    # -----------------------------
    # Processamento
    # -----------------------------
    def process_events(self, resource: Resource) -> None:
        restarted = False
        for callback, events in self.queued_events(resource):
            if self.process_callback(resource, callback, events):
                restarted = True

        if restarted:
            self.queue_event(resource, resource.event(name=RESTARTED, status=EventStatus.SUCCESS))
            self.transaction.resource_metrics["restarted"] += 1

    def process_callback(self, resource: Resource, callback: str, events: List[Event]) -> bool:
        """Dispara `callback`; retorna True apenas se a reação foi executada com sucesso."""
        if all(e.status == EventStatus.NOOP for e in events):
            self._process_noop_events(resource, callback, events)
            return False

        ctx = self.transaction.ctx
        try:
            resource.trigger(callback)
        except Exception as exc:
            error = callback_failed(
                resource=resource.ref,
                callback=callback,
                event_count=len(events),
                exc=exc,
            )
            ctx.log(resource=resource.ref, level="err", message=error.message, error=error.to_dict())
            self.transaction.resource_metrics["failed_restarts"] += 1
            return False

        ctx.log(
            resource=resource.ref,
            level="notice",
            message=f"Triggered '{callback}' from {len(events)} events",
        )
        return True

    def _process_noop_events(self, resource: Resource, callback: str, events: List[Event]) -> None:
        self.transaction.ctx.log(
            resource=resource.ref,
            level="notice",
            message=f"Would have triggered '{callback}' from {len(events)} events",
        )
        self.queue_event(resource, resource.event(name=NOOP_RESTART, status=EventStatus.NOOP))
