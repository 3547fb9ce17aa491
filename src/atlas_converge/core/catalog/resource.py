# src/atlas_converge/core/catalog/resource.py
"""
Recurso declarativo do Atlas Converge.

Um `Resource` é um objeto de sistema declarado (arquivo, serviço, pacote...)
com atributos desejados e um Provider associado. O engine apenas observa
e conduz a aplicação: ele nunca altera a identidade de um recurso.

Identidade:
    - `ref`  → referência única `Tipo[título]` (chave estável no catálogo)
    - `name` → nome de sistema (pode diferir do título; usado no prefetch)

Capacidades (consultadas, nunca presumidas):
    - `callbacks`: conjunto fixo de reações suportadas (ex.: {"refresh"})
    - `self_refresh`: reage aos próprios eventos de mudança
    - `generate()` / `eval_generate()`: produzem recursos filhos dinamicamente
    - `depthfirst`: filhos gerados são avaliados antes do próprio recurso

Decisões arquiteturais:
    - Invocar uma reação não suportada é uma consulta (`supports`) que
      retorna False, e não uma exceção durante o roteamento de eventos
    - `ensure` é sempre avaliado primeiro; quando fora de sincronia, é a
      única mudança calculada (criar/remover cobre as demais propriedades)

Limites explícitos:
    - Não conhece a Transaction nem o EventManager
    - Não lê nem altera o sistema diretamente (delegado ao Provider)
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, ClassVar, Dict, FrozenSet, Iterable, List, Optional

from atlas_converge.core.exceptions import ProviderError, ResourceValidationError

from .change import Change
from .provider import Provider
from .schedule import Schedule
from .types import ABSENT, Event, EventStatus


_TAG_RE = re.compile(r"^\w[-\w:.]*$")


class Resource:
    """
    Recurso com estado desejado e Provider associado.

    Subclasses definem `type_name`, as reações suportadas em `callbacks`
    (com um método de mesmo nome) e, opcionalmente, `self_refresh`,
    `depthfirst`, `generate` e `eval_generate`.
    """

    type_name: ClassVar[str] = "resource"
    callbacks: ClassVar[FrozenSet[str]] = frozenset()
    self_refresh: ClassVar[bool] = False
    depthfirst: ClassVar[bool] = False

    def __init__(
        self,
        title: str,
        *,
        properties: Optional[Dict[str, Any]] = None,
        name: Optional[str] = None,
        provider: Optional[Provider] = None,
        tags: Iterable[str] = (),
        virtual: bool = False,
        exported: bool = False,
        noop: bool = False,
        schedule: Optional[Schedule] = None,
    ):
        if not isinstance(title, str) or not title.strip():
            raise ValueError("resource title must be a non-empty string")

        self.title = title
        self._name = name
        self.properties: Dict[str, Any] = dict(properties or {})
        self.provider = provider
        self.exported = exported
        # recursos exportados são sempre virtuais
        self.virtual = virtual or exported
        self.noop = noop
        self.schedule = schedule
        self.finished = False

        self._tags: set = set()
        self.tag(self.type_name)
        if _TAG_RE.match(title):
            self.tag(title)
        self.tag(*tags)

    def __repr__(self) -> str:
        return f"<{self.ref}>"

    # -----------------------------
    # Identidade
    # -----------------------------
    @property
    def ref(self) -> str:
        return f"{self.type_name.capitalize()}[{self.title}]"

    @property
    def name(self) -> str:
        return self._name or self.title

    @property
    def deleting(self) -> bool:
        return self.properties.get("ensure") == ABSENT

    # -----------------------------
    # Tags
    # -----------------------------
    @property
    def tags(self) -> List[str]:
        return sorted(self._tags)

    def tag(self, *tags: str) -> None:
        for t in tags:
            t = str(t).strip().lower()
            if t:
                self._tags.add(t)

    def tagged(self, *tags: str) -> bool:
        return any(str(t).strip().lower() in self._tags for t in tags)

    # -----------------------------
    # Reações
    # -----------------------------
    def supports(self, callback: Optional[str]) -> bool:
        if not callback or callback not in self.callbacks:
            return False
        return callable(getattr(self, callback, None))

    def trigger(self, callback: str) -> None:
        if not self.supports(callback):
            raise AttributeError(f"{self.ref} does not support '{callback}'")
        getattr(self, callback)()

    # -----------------------------
    # Estado e mudanças
    # -----------------------------
    def retrieve_current_state(self) -> Dict[str, Any]:
        if self.provider is None:
            raise ProviderError(
                message=f"{self.ref} has no provider",
                details={"resource": self.ref},
            )
        current = self.provider.retrieve() or {}
        return {prop: current.get(prop, ABSENT) for prop in self.properties}

    def insync(self, property: str, is_value: Any, should: Any) -> bool:
        return is_value == should

    def compute_changes(self) -> List[Change]:
        """Mudanças fora de sincronia, em ordem de declaração."""
        if not self.properties:
            return []
        current = self.retrieve_current_state()

        if "ensure" in self.properties:
            should = self.properties["ensure"]
            is_value = current["ensure"]
            if not self.insync("ensure", is_value, should):
                return [Change(self, "ensure", is_value, should)]
            if should == ABSENT:
                return []

        return [
            Change(self, prop, current[prop], should)
            for prop, should in self.properties.items()
            if prop != "ensure" and not self.insync(prop, current[prop], should)
        ]

    def event_name_for(self, change: Change) -> str:
        if change.property == "ensure":
            if change.should == ABSENT:
                return f"{self.type_name}_removed"
            if change.is_value == ABSENT:
                return f"{self.type_name}_created"
        return f"{change.property}_changed"

    def apply(self, change: Change) -> Event:
        self.provider.set(change.property, change.should)

        if change.property == "ensure" and change.should == ABSENT:
            message = "removed"
        elif change.property == "ensure" and change.is_value == ABSENT:
            message = "created"
        else:
            message = f"{change.property} changed {change.is_value!r} to {change.should!r}"

        return self.event(
            name=self.event_name_for(change),
            status=EventStatus.SUCCESS,
            property=change.property,
            previous_value=change.is_value,
            desired_value=change.should,
            message=message,
        )

    def event(self, **fields: Any) -> Event:
        return Event(resource=self.ref, **fields)

    def flush(self) -> None:
        flush = getattr(self.provider, "flush", None)
        if callable(flush):
            flush()

    # -----------------------------
    # Agendamento e validação
    # -----------------------------
    def scheduled(self, now: datetime) -> bool:
        return self.schedule is None or self.schedule.matches(now)

    def finish(self) -> None:
        """Validação pós-construção, executada ao entrar no catálogo via geração."""
        for prop in self.properties:
            if not isinstance(prop, str) or not prop:
                raise ResourceValidationError(
                    message=f"{self.ref} has an invalid property name: {prop!r}",
                    details={"resource": self.ref},
                )
        if self.provider is not None and not isinstance(self.provider, Provider):
            raise ResourceValidationError(
                message=f"{self.ref} provider does not implement retrieve/set",
                details={"resource": self.ref, "provider": type(self.provider).__name__},
            )
        self.finished = True
