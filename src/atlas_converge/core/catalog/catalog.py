# src/atlas_converge/core/catalog/catalog.py
"""
Catálogo de recursos de uma execução.

Este módulo define o `Catalog`, o armazenamento (arena) dos recursos
desejados de uma transação, indexados por referência estável.

Responsabilidades do módulo:
    - Validar unicidade de identidade (`ref` e par tipo + nome de sistema)
    - Preservar a ordem de inserção (usada no desempate da ordenação)
    - Expor busca por referência

Decisões arquiteturais:
    - Recursos gerados durante a execução são apenas acrescentados
    - A ordem de inserção é mantida separadamente do índice

Invariantes:
    - Cada recurso registrado possui `ref` único
    - Dois recursos do mesmo tipo nunca compartilham o mesmo nome de sistema

Limites explícitos:
    - Não calcula relacionamentos (ver `graph.py`)
    - Não avalia recursos
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .resource import Resource


class DuplicateResourceError(ValueError):
    """
    Exceção levantada ao inserir um recurso cuja identidade colide com
    um recurso já presente no catálogo.

    Durante a geração dinâmica de recursos esta exceção é recuperada
    localmente pela Transaction: o filho é descartado e a execução segue.
    """


@dataclass
class Catalog:
    """Arena de recursos indexada por `ref`, em ordem de inserção."""

    version: Optional[str] = None

    _resources: Dict[str, Resource] = field(default_factory=dict, init=False, repr=False)
    _aliases: Dict[Tuple[str, str], str] = field(default_factory=dict, init=False, repr=False)
    _order: List[str] = field(default_factory=list, init=False, repr=False)

    @classmethod
    def from_resources(cls, resources: Iterable[Resource], *, version: Optional[str] = None) -> "Catalog":
        catalog = cls(version=version)
        for r in resources:
            catalog.add_resource(r)
        return catalog

    def add_resource(self, resource: Resource) -> None:
        ref = resource.ref
        if ref in self._resources:
            raise DuplicateResourceError(f"Duplicate resource: {ref}")

        alias = (resource.type_name, resource.name)
        if alias in self._aliases:
            raise DuplicateResourceError(
                f"Cannot alias {ref} to {resource.name!r}; already declared as {self._aliases[alias]}"
            )

        self._resources[ref] = resource
        self._aliases[alias] = ref
        self._order.append(ref)

    def remove_resource(self, resource: Resource) -> None:
        ref = resource.ref
        if self._resources.get(ref) is not resource:
            return
        del self._resources[ref]
        self._aliases.pop((resource.type_name, resource.name), None)
        self._order.remove(ref)

    def find_resource(self, ref: Union[str, Resource]) -> Optional[Resource]:
        if isinstance(ref, Resource):
            ref = ref.ref
        return self._resources.get(ref)

    def resources(self) -> List[Resource]:
        return [self._resources[ref] for ref in self._order]

    def position(self, ref: str) -> int:
        return self._order.index(ref)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Resource):
            return self._resources.get(item.ref) is item
        return item in self._resources

    def __len__(self) -> int:
        return len(self._order)
