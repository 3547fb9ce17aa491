"""
Dummy Providers — Atlas Converge

Providers em memória para testes do engine. O "sistema real" é um dict
`{nome_de_sistema: {propriedade: valor}}` compartilhado entre providers,
o que permite observar exatamente o que cada transação alterou.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

from atlas_converge.core.catalog.types import ABSENT
from atlas_converge.core.exceptions import ProviderError


class MemoryProvider:
    def __init__(self, system: Dict[str, Dict[str, Any]], name: str, *, fail_on: Iterable[str] = ()):
        self.system = system
        self.name = name
        self.fail_on = set(fail_on)
        self.set_calls: List[tuple] = []
        self.flush_count = 0

    def retrieve(self) -> Dict[str, Any]:
        return dict(self.system.get(self.name, {}))

    def set(self, property: str, value: Any) -> None:
        if property in self.fail_on:
            raise ProviderError(
                message=f"cannot set {property} on {self.name}",
                details={"property": property},
            )
        self.set_calls.append((property, value))
        if property == "ensure" and value == ABSENT:
            self.system.pop(self.name, None)
            return
        self.system.setdefault(self.name, {})[property] = value

    def flush(self) -> None:
        self.flush_count += 1


class PrefetchingMemoryProvider(MemoryProvider):
    """Registra cada chamada de prefetch em lote (chaves = nomes de sistema)."""

    prefetch_calls: List[List[str]] = []

    @classmethod
    def prefetch(cls, resources: Dict[str, Any]) -> None:
        cls.prefetch_calls.append(sorted(resources))


class BrokenPrefetchProvider(MemoryProvider):
    @classmethod
    def prefetch(cls, resources: Dict[str, Any]) -> None:
        raise RuntimeError("prefetch backend unavailable")


class UnreadableProvider(MemoryProvider):
    def retrieve(self) -> Dict[str, Any]:
        raise ProviderError(message=f"cannot read {self.name}", details={"name": self.name})


class FailingFlushProvider(MemoryProvider):
    def flush(self) -> None:
        raise RuntimeError("flush failed")
