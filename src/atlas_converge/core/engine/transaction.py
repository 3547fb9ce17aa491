# src/atlas_converge/core/engine/transaction.py
"""
Transaction — uma passada completa de aplicação sobre um catálogo.

Este módulo define a `Transaction`, responsável por conduzir a convergência
de todos os recursos de um `Catalog` para o estado desejado, respeitando a
ordem do `RelationshipGraph`.

Fluxo de uma transação:
    1. prepare()
        - generate(): recursos geradores produzem filhos até estabilizar
        - prefetch(): uma consulta em lote por tipo de recurso e classe de provider
        - topological_order(): ciclo → erro fatal antes de qualquer aplicação
    2. para cada recurso, em ordem:
        - cancelamento solicitado → parada limpa (STOPPED)
        - skip() → métrica `skipped`
        - eval_resource() → filhos gerados, mudanças, eventos, reações
    3. generate_report(): métricas, Events e log publicados no relatório

Máquina de estados:
    PENDING → PREFETCHING → EVALUATING → (STOPPED | COMPLETED)

Decisões arquiteturais:
    - Avaliação estritamente sequencial; o cancelamento só é observado
      entre recursos, nunca no meio de um recurso
    - Falhas de mudança, callback, prefetch e geração são convertidas em
      ConvergeErrorPayload + log + métricas e nunca escapam da transação
    - A única exceção que escapa é a estrutural do grafo (ciclo ou
      dependência inexistente), levantada antes de qualquer aplicação
    - Recursos gerados em avaliação são avaliados imediatamente, sem
      recomputar a ordem topológica

Invariantes:
    - Um recurso nunca é aplicado antes de suas dependências
    - `failed` conta recursos distintos com ao menos uma falha
    - Recursos não visitados após um cancelamento não aparecem em nenhuma
      métrica de avaliação (skipped, scheduled, applied)

Limites explícitos:
    - Não interpreta manifestos
    - Não refaz mudanças que falharam (sem retry)
    - Não desfaz mudanças aplicadas (sem rollback)
    - Não persiste o relatório
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from atlas_converge.core.catalog.catalog import Catalog, DuplicateResourceError
from atlas_converge.core.catalog.change import Change
from atlas_converge.core.catalog.graph import RelationshipGraph
from atlas_converge.core.catalog.provider import supports_prefetch
from atlas_converge.core.catalog.resource import Resource
from atlas_converge.core.catalog.types import Event, EventStatus
from atlas_converge.core.config.hashing import compute_config_hash
from atlas_converge.core.config.options import TransactionOptions, parse_tags
from atlas_converge.core.context import TRANSACTION_SOURCE, RunContext
from atlas_converge.core.errors import (
    FLUSH_FAILED,
    GENERATION_FAILED,
    PREFETCH_FAILED,
    STATE_RETRIEVAL_FAILED,
    ConvergeErrorPayload,
    duplicate_resource,
    error_from_exception,
)
from atlas_converge.core.report.report import TransactionReport, create_report

from .cancellation import CancellationToken
from .event_manager import EventManager


RESOURCE_METRICS = (
    "total",
    "out_of_sync",
    "applied",
    "skipped",
    "scheduled",
    "restarted",
    "failed",
    "failed_restarts",
)


class TransactionState(str, Enum):
    """Estados de uma transação (valores string para o relatório)."""

    PENDING = "pending"
    PREFETCHING = "prefetching"
    EVALUATING = "evaluating"
    STOPPED = "stopped"
    COMPLETED = "completed"


class Transaction:
    """
    Conduz uma passada de aplicação sobre `catalog`.

    Args:
        catalog (Catalog): Recursos desejados.
        graph (RelationshipGraph | None): Relacionamentos; default é um grafo
            vazio sobre o catálogo.
        ctx (RunContext | None): Contexto da execução (log estruturado).
        report (TransactionReport | None): Relatório a preencher.
        options (TransactionOptions | None): Default lido de `ctx.config`.
        cancellation (CancellationToken | None): Sinal de parada.
        clock (Callable[[], datetime] | None): Relógio usado nas janelas de
            manutenção (default: hora local).
    """

    def __init__(
        self,
        catalog: Catalog,
        *,
        graph: Optional[RelationshipGraph] = None,
        ctx: Optional[RunContext] = None,
        report: Optional[TransactionReport] = None,
        options: Optional[TransactionOptions] = None,
        cancellation: Optional[CancellationToken] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.catalog = catalog
        self.relationship_graph = graph if graph is not None else RelationshipGraph(catalog)
        self.ctx = ctx if ctx is not None else RunContext.create()
        self.options = options if options is not None else TransactionOptions.from_config(self.ctx.config)
        self.report = report if report is not None else create_report(
            run_id=self.ctx.run_id,
            started_at=self.ctx.created_at,
            config_hash=compute_config_hash(self.ctx.config),
            catalog_version=catalog.version,
        )
        self.cancellation = cancellation if cancellation is not None else CancellationToken()
        self.clock = clock or datetime.now

        self.state = TransactionState.PENDING
        self.resource_metrics: Dict[str, int] = {name: 0 for name in RESOURCE_METRICS}
        self.time_metrics: Dict[str, float] = {}
        self.changes: List[Change] = []

        self._tags: List[str] = list(self.options.tags)
        self._failures: Dict[str, int] = {}
        self.event_manager = EventManager(self)

    # -----------------------------
    # Opções
    # -----------------------------
    @property
    def tags(self) -> List[str]:
        return self._tags

    @tags.setter
    def tags(self, value: Union[str, Sequence[str], None]) -> None:
        self._tags = parse_tags(value)

    @property
    def ignore_tags(self) -> bool:
        return self.options.ignore_tags

    @property
    def ignore_schedules(self) -> bool:
        return self.options.ignore_schedules

    @property
    def noop(self) -> bool:
        return self.options.noop

    # -----------------------------
    # Logging
    # -----------------------------
    def _log(self, level: str, message: str, *, resource: Optional[Resource] = None, **extra: Any) -> None:
        source = resource.ref if resource is not None else TRANSACTION_SOURCE
        self.ctx.log(resource=source, level=level, message=message, **extra)

    def _log_error(self, resource: Optional[Resource], error: ConvergeErrorPayload, message: str) -> None:
        self._log("err", message, resource=resource, error=error.to_dict())

    # -----------------------------
    # Execução
    # -----------------------------
    def run(self) -> TransactionReport:
        """Avalia o catálogo inteiro e devolve o relatório preenchido."""
        self.evaluate()
        return self.generate_report()

    def prepare(self) -> List[Resource]:
        """
        Prepara a avaliação e devolve a ordem de aplicação.

        Raises:
            CycleDetectedError: Se o grafo contiver ciclo.
            UnknownDependencyError: Se alguma edge referenciar recurso inexistente.
        """
        self.state = TransactionState.PREFETCHING
        self.generate()
        self.prefetch()
        return self.relationship_graph.topological_order()

    def evaluate(self) -> None:
        ordered = self.prepare()
        self.state = TransactionState.EVALUATING

        for resource in ordered:
            if self.stop_processing():
                self.state = TransactionState.STOPPED
                self._log(
                    "notice",
                    f"Stopping transaction before {resource.ref}: cancellation requested",
                    reason=self.cancellation.reason,
                )
                break

            started = time.perf_counter()
            self.eval_resource(resource)
            if self.options.evaltrace:
                self._log(
                    "info",
                    f"Evaluated in {time.perf_counter() - started:.2f} seconds",
                    resource=resource,
                )
        else:
            self.state = TransactionState.COMPLETED

        self._log("info", f"Finishing transaction {self.ctx.run_id} with {len(self.changes)} changes")

    def eval_resource(
        self,
        resource: Resource,
        check_skip: bool = True,
        ancestor: Optional[Resource] = None,
    ) -> None:
        """
        Avalia um recurso (e seus filhos gerados em avaliação).

        `ancestor` é o gerador de mais alto nível quando `resource` foi
        produzido por `eval_generate`; os eventos do filho são roteados
        pelas edges do ancestral, já que filhos não têm assinaturas próprias.
        """
        if check_skip and self.skip(resource):
            self.resource_metrics["skipped"] += 1
            return

        self.eval_children_and_apply_resource(resource, ancestor)
        self.process_events(resource)

    def eval_children_and_apply_resource(self, resource: Resource, ancestor: Optional[Resource] = None) -> None:
        self.resource_metrics["scheduled"] += 1

        # filhos são gerados antes da aplicação; eles podem alterar como o pai é aplicado
        children = self.eval_generate(resource)
        root = ancestor or resource

        if children and resource.depthfirst:
            for child in children:
                self.eval_resource(child, check_skip=False, ancestor=root)

        started = time.perf_counter()
        self.apply(resource, ancestor)
        seconds = time.perf_counter() - started

        if children and not resource.depthfirst:
            for child in children:
                self.eval_resource(child, ancestor=root)

        self.time_metrics[resource.type_name] = self.time_metrics.get(resource.type_name, 0.0) + seconds

    def apply(self, resource: Resource, ancestor: Optional[Resource] = None) -> None:
        try:
            changes = resource.compute_changes()
        except Exception as exc:
            error = error_from_exception(exc, code=STATE_RETRIEVAL_FAILED, resource=resource.ref)
            self._log_error(resource, error, f"Failed to retrieve current state of resource: {exc}")
            self._mark_failed(resource)
            return

        if not changes:
            return

        self.resource_metrics["out_of_sync"] += 1
        self.apply_changes(resource, changes, ancestor)

        if self.noop or resource.noop:
            return

        try:
            resource.flush()
        except Exception as exc:
            error = error_from_exception(exc, code=FLUSH_FAILED, resource=resource.ref)
            self._log_error(resource, error, f"Could not flush changes: {exc}")
            self._mark_failed(resource)

    def apply_changes(
        self,
        resource: Resource,
        changes: Iterable[Change],
        ancestor: Optional[Resource] = None,
    ) -> List[Event]:
        noop = self.noop or resource.noop
        events: List[Event] = []

        for change in changes:
            self.changes.append(change)
            event = change.apply(noop=noop)
            events.append(event)

            if event.status == EventStatus.FAILURE:
                self._mark_failed(resource)
                if change.error is not None:
                    self._log_error(resource, change.error, event.message)
            else:
                level = "notice" if event.status == EventStatus.SUCCESS else "info"
                self._log(level, event.message, resource=resource, property=change.property)

            self.queue_event(ancestor or resource, event)

        if events:
            self.resource_metrics["applied"] += 1
        return events

    # -----------------------------
    # Skip
    # -----------------------------
    def skip(self, resource: Resource) -> bool:
        """True se o recurso não deve ser aplicado nesta transação."""
        if self.missing_tags(resource):
            self._log("debug", f"Not tagged with {', '.join(self.tags)}", resource=resource)
        elif not self.scheduled(resource):
            self._log("debug", "Not scheduled", resource=resource)
        elif self.failed_dependencies(resource):
            self._log("warning", "Skipping because of failed dependencies", resource=resource)
        elif resource.virtual:
            self._log("debug", "Skipping because virtual", resource=resource)
        else:
            return False
        return True

    def missing_tags(self, resource: Resource) -> bool:
        # filtro vazio significa "sem filtragem"
        if self.ignore_tags or not self.tags:
            return False
        return not resource.tagged(*self.tags)

    def scheduled(self, resource: Resource) -> bool:
        return self.ignore_schedules or resource.scheduled(self.clock())

    def failed_dependencies(self, resource: Resource) -> bool:
        skip = False
        for dep in self.relationship_graph.dependencies(resource):
            if self.failed(dep):
                self._log("notice", f"Dependency {dep} has {self._failures[dep]} failures", resource=resource)
                skip = True
        return skip

    # -----------------------------
    # Falhas
    # -----------------------------
    def _mark_failed(self, resource: Resource) -> None:
        if not self._failures.get(resource.ref):
            self.resource_metrics["failed"] += 1
        self._failures[resource.ref] = self._failures.get(resource.ref, 0) + 1

    def failed(self, resource: Union[str, Resource]) -> bool:
        ref = resource.ref if isinstance(resource, Resource) else resource
        return self._failures.get(ref, 0) > 0

    def any_failed(self) -> bool:
        return any(count > 0 for count in self._failures.values())

    # -----------------------------
    # Geração dinâmica
    # -----------------------------
    def generate(self) -> None:
        """Gera recursos em tempo de preparação até não surgirem novos."""
        pending = self.catalog.resources()
        while pending:
            made: List[Resource] = []
            for resource in pending:
                made.extend(self.generate_additional_resources(resource, "generate"))
            pending = made

    def eval_generate(self, resource: Resource) -> List[Resource]:
        return self.generate_additional_resources(resource, "eval_generate")

    def generate_additional_resources(self, resource: Resource, method: str) -> List[Resource]:
        """
        Invoca o gerador `method` de `resource` e insere os filhos no catálogo.

        Cada filho:
            - é inserido no catálogo (duplicata → descartado intacto, nunca finalizado)
            - recebe as tags do gerador
            - é finalizado (`finish`); falha de validação → removido
            - é ligado ao pai por uma edge (filho → pai se `depthfirst`)

        Returns:
            List[Resource]: Filhos efetivamente adicionados, em ordem.
        """
        generator = getattr(resource, method, None)
        if not callable(generator):
            return []

        try:
            made = generator()
        except Exception as exc:
            error = error_from_exception(exc, code=GENERATION_FAILED, resource=resource.ref)
            self._log_error(
                resource,
                error,
                f"Failed to generate additional resources using '{method}': {exc}",
            )
            return []

        if not made:
            return []
        if isinstance(made, Resource):
            made = [made]

        added: List[Resource] = []
        seen = set()
        for child in made:
            if id(child) in seen:
                continue
            seen.add(id(child))

            try:
                self.catalog.add_resource(child)
            except DuplicateResourceError:
                error = duplicate_resource(resource=child.ref, generator=resource.ref)
                self._log("info", "Duplicate generated resource; skipping", resource=child, error=error.to_dict())
                continue

            # só após a inserção: um duplicado nunca altera o recurso já catalogado
            child.tag(*resource.tags)

            try:
                child.finish()
            except Exception as exc:
                self.catalog.remove_resource(child)
                error = error_from_exception(exc, code=GENERATION_FAILED, resource=child.ref)
                self._log_error(child, error, f"Generated resource is invalid; skipping: {exc}")
                continue

            self._make_parent_child_relationship(resource, child)
            added.append(child)

        return added

    def _make_parent_child_relationship(self, parent: Resource, child: Resource) -> None:
        if parent.depthfirst:
            self.relationship_graph.add_edge(child, parent)
        else:
            self.relationship_graph.add_edge(parent, child)

    # -----------------------------
    # Prefetch
    # -----------------------------
    def prefetch(self) -> None:
        """
        Uma chamada `prefetch` por par (tipo de recurso, classe de provider).

        Os recursos de cada grupo são chaveados pelo nome de sistema; tipos
        diferentes com o mesmo nome nunca se sobrescrevem.
        """
        prefetchers: Dict[Tuple[str, type], Dict[str, Resource]] = {}
        for resource in self.catalog.resources():
            provider = resource.provider
            if provider is None or not supports_prefetch(provider):
                continue
            prefetchers.setdefault((resource.type_name, type(provider)), {})[resource.name] = resource

        for (type_name, provider_class), resources in prefetchers.items():
            self._log("debug", f"Prefetching {provider_class.__name__} resources for {type_name}")
            try:
                provider_class.prefetch(resources)
            except Exception as exc:
                error = error_from_exception(exc, code=PREFETCH_FAILED)
                error.details["provider"] = provider_class.__name__
                error.details["type"] = type_name
                self._log_error(None, error, f"Could not prefetch {provider_class.__name__} provider: {exc}")

    # -----------------------------
    # Cancelamento e eventos
    # -----------------------------
    def stop_processing(self) -> bool:
        return self.cancellation.stop_requested

    def queue_event(self, resource: Resource, event: Event) -> None:
        self.event_manager.queue_event(resource, event)

    def process_events(self, resource: Resource) -> None:
        self.event_manager.process_events(resource)

    def queued_events(self, resource: Resource):
        return self.event_manager.queued_events(resource)

    @property
    def events(self) -> List[Event]:
        return self.event_manager.events

    # -----------------------------
    # Relatório
    # -----------------------------
    def add_metrics_to_report(self, report: TransactionReport) -> TransactionReport:
        self.resource_metrics["total"] = len(self.catalog)
        self.resource_metrics["failed"] = sum(1 for count in self._failures.values() if count > 0)

        time_metrics: Dict[str, Any] = dict(self.time_metrics)
        time_metrics["total"] = sum(self.time_metrics.values())

        report.newmetric("resources", {**self.resource_metrics, "label": "Resources"})
        report.newmetric("time", {**time_metrics, "label": "Time"})
        report.newmetric("changes", {"total": len(self.changes), "label": "Changes"})
        report.time = datetime.now(timezone.utc)
        return report

    def generate_report(self) -> TransactionReport:
        self.add_metrics_to_report(self.report)
        self.report.run["state"] = self.state.value
        self.report.logs = list(self.ctx.events)
        return self.report
