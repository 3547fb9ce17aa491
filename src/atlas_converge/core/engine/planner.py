# src/atlas_converge/core/engine/planner.py
"""
Planejador de ordem de aplicação (DAG).

Este módulo valida a estrutura do grafo de relacionamentos e produz uma
ordem topológica determinística das referências de recursos.

Decisões arquiteturais:
    - Utiliza ordenação topológica determinística (Kahn modificado)
    - Empates são resolvidos pela ordem de declaração dos recursos
    - Ciclos e dependências inexistentes são falhas fatais, detectadas
      antes de qualquer aplicação

Invariantes:
    - Nenhum recurso aparece antes de suas dependências
    - Todos os recursos aparecem exatamente uma vez
    - A mesma entrada sempre produz a mesma ordem

Limites explícitos:
    - Não avalia recursos
    - Não roteia eventos
    - Nunca devolve uma ordenação parcial
"""

from __future__ import annotations

import heapq
from typing import Dict, Iterable, List, Sequence, Set, Tuple


class UnknownDependencyError(ValueError):
    """
    Exceção levantada quando uma edge referencia um recurso inexistente.

    Dependências inexistentes são tratadas como erro estrutural: o
    planner não tenta inferir nem criar recursos ausentes.
    """


class CycleDetectedError(ValueError):
    """
    Exceção levantada quando o grafo de relacionamentos contém um ciclo.

    Decisões arquiteturais:
        - Ciclos são tratados como erro estrutural fatal
        - Nenhuma aplicação parcial é permitida em presença de ciclos
        - Os recursos envolvidos são listados em `cycle`
    """

    def __init__(self, message: str, cycle: Sequence[str] = ()):
        super().__init__(message)
        self.cycle = list(cycle)


def plan_order(nodes: Sequence[str], edges: Iterable[Tuple[str, str]]) -> List[str]:
    """
    Produz uma ordem topológica determinística de `nodes`.

    Sempre que múltiplos recursos estiverem prontos, é escolhido o que
    aparece primeiro em `nodes` (ordem de declaração no catálogo).

    Args:
        nodes (Sequence[str]): Referências de recursos, em ordem de declaração.
        edges (Iterable[Tuple[str, str]]): Pares (source, target); source precede target.

    Returns:
        List[str]: Referências em ordem topológica.

    Raises:
        ValueError: Se houver referências duplicadas em `nodes`.
        UnknownDependencyError: Se uma edge referenciar recurso inexistente.
        CycleDetectedError: Se houver ciclo no grafo.
    """
    position: Dict[str, int] = {}
    for i, ref in enumerate(nodes):
        if ref in position:
            raise ValueError(f"Duplicate resource ref: {ref}")
        position[ref] = i

    incoming_count: Dict[str, int] = {ref: 0 for ref in position}
    outgoing: Dict[str, Set[str]] = {ref: set() for ref in position}

    for source, target in edges:
        for ref in (source, target):
            if ref not in position:
                raise UnknownDependencyError(
                    f"Relationship {source} -> {target} references unknown resource '{ref}'"
                )
        if target in outgoing[source]:
            continue
        outgoing[source].add(target)
        incoming_count[target] += 1

    ready: List[Tuple[int, str]] = [(position[r], r) for r, c in incoming_count.items() if c == 0]
    heapq.heapify(ready)
    order: List[str] = []

    while ready:
        _, ref = heapq.heappop(ready)
        order.append(ref)
        for child in outgoing[ref]:
            incoming_count[child] -= 1
            if incoming_count[child] == 0:
                heapq.heappush(ready, (position[child], child))

    if len(order) != len(position):
        remaining = [r for r in nodes if incoming_count[r] > 0]
        raise CycleDetectedError(
            f"Found dependency cycle in the following relationships: {', '.join(remaining)}",
            cycle=remaining,
        )

    return order
