# src/atlas_converge/core/catalog/graph.py
"""
Grafo de relacionamentos entre recursos.

O `RelationshipGraph` guarda as edges dirigidas entre recursos de um
catálogo e responde às consultas feitas pelo engine:

    - topological_order() → ordem de aplicação (erro fatal em ciclos)
    - matching_edges()    → assinaturas disparadas por um Event
    - dependencies()      → recursos a montante (transitivo)
    - dependents()        → recursos a jusante (transitivo)

Decisões arquiteturais:
    - Vértices são os recursos do catálogo; o grafo guarda apenas refs
    - Recursos gerados durante a execução entram no catálogo e ganham
      edges novas sem recomputar a ordem já calculada

Limites explícitos:
    - Não deriva edges de declarações de manifesto
    - Não avalia recursos
"""

from __future__ import annotations

from typing import Dict, List, Optional, Set, Union

from atlas_converge.core.engine.planner import plan_order

from .catalog import Catalog
from .resource import Resource
from .types import ALL_EVENTS, NONE, Edge, Event


ResourceLike = Union[str, Resource]


def _ref(resource: ResourceLike) -> str:
    return resource.ref if isinstance(resource, Resource) else resource


class RelationshipGraph:
    """Edges dirigidas `source → target` sobre os recursos de um `Catalog`."""

    def __init__(self, catalog: Catalog):
        self.catalog = catalog
        self._edges: List[Edge] = []
        self._out: Dict[str, List[Edge]] = {}
        self._in: Dict[str, List[Edge]] = {}

    def add_edge(
        self,
        source: ResourceLike,
        target: ResourceLike,
        *,
        event: str = NONE,
        callback: Optional[str] = None,
    ) -> Edge:
        edge = Edge(source=_ref(source), target=_ref(target), event=event, callback=callback)
        self._edges.append(edge)
        self._out.setdefault(edge.source, []).append(edge)
        self._in.setdefault(edge.target, []).append(edge)
        return edge

    def require(self, dependency: ResourceLike, dependent: ResourceLike) -> Edge:
        """`dependent` só é aplicado depois de `dependency`."""
        return self.add_edge(dependency, dependent)

    def subscribe(
        self,
        source: ResourceLike,
        target: ResourceLike,
        *,
        callback: str = "refresh",
        event: str = ALL_EVENTS,
    ) -> Edge:
        """`target` reage com `callback` aos eventos de `source`."""
        return self.add_edge(source, target, event=event, callback=callback)

    def edges(self) -> List[Edge]:
        return list(self._edges)

    def topological_order(self) -> List[Resource]:
        refs = [r.ref for r in self.catalog.resources()]
        ordered = plan_order(refs, ((e.source, e.target) for e in self._edges))
        return [self.catalog.find_resource(ref) for ref in ordered]

    def matching_edges(self, event: Event, source: Optional[ResourceLike] = None) -> List[Edge]:
        """
        Edges de saída de `source` cujo gatilho casa com `event`.

        `source` default é o recurso de origem do próprio evento.
        """
        ref = _ref(source) if source is not None else event.resource
        return [e for e in self._out.get(ref, []) if e.match(event.name)]

    def dependencies(self, resource: ResourceLike) -> List[str]:
        return self._walk(_ref(resource), self._in, "source")

    def dependents(self, resource: ResourceLike) -> List[str]:
        return self._walk(_ref(resource), self._out, "target")

    def _walk(self, start: str, index: Dict[str, List[Edge]], attr: str) -> List[str]:
        seen: Set[str] = set()
        found: List[str] = []
        stack = [start]
        while stack:
            ref = stack.pop()
            for edge in index.get(ref, []):
                nxt = getattr(edge, attr)
                if nxt in seen or nxt == start:
                    continue
                seen.add(nxt)
                found.append(nxt)
                stack.append(nxt)
        return found
