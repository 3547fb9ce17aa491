# src/atlas_converge/core/catalog/change.py
"""
Mudança pendente de uma propriedade de recurso.

Uma `Change` liga um par (recurso, propriedade) ao valor observado ("is")
e ao valor desejado ("should"). Ela é produzida imediatamente antes da
aplicação, consumida pela Transaction e descartada em seguida.

Invariantes:
    - Aplicar uma Change produz exatamente um Event
    - `apply` nunca levanta exceção: falhas do provider viram Event FAILURE
    - Em modo noop o provider nunca é chamado
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from atlas_converge.core.errors import (
    CHANGE_APPLY_FAILED,
    ConvergeErrorPayload,
    error_from_exception,
)

from .types import Event, EventStatus

if TYPE_CHECKING:
    from .resource import Resource


@dataclass
class Change:
    """Mutação pendente `is_value → should` de uma propriedade de `resource`."""

    resource: "Resource"
    property: str
    is_value: Any
    should: Any
    changed: bool = False
    error: Optional[ConvergeErrorPayload] = field(default=None, repr=False)

    @property
    def event_name(self) -> str:
        return self.resource.event_name_for(self)

    def apply(self, *, noop: bool = False) -> Event:
        if noop:
            return self.resource.event(
                name=self.event_name,
                status=EventStatus.NOOP,
                property=self.property,
                previous_value=self.is_value,
                desired_value=self.should,
                message=f"current value {self.is_value!r}, should be {self.should!r} (noop)",
            )

        try:
            event = self.resource.apply(self)
        except Exception as exc:
            self.error = error_from_exception(
                exc, code=CHANGE_APPLY_FAILED, resource=self.resource.ref
            )
            return self.resource.event(
                name=self.event_name,
                status=EventStatus.FAILURE,
                property=self.property,
                previous_value=self.is_value,
                desired_value=self.should,
                message=f"change from {self.is_value!r} to {self.should!r} failed: {exc}",
            )

        self.changed = True
        return event
