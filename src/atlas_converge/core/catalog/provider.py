# src/atlas_converge/core/catalog/provider.py
"""
Contrato canônico de Provider do Atlas Converge.

Um Provider é o código específico de sistema operacional que lê e altera
o estado real de um recurso (ex.: iniciar um serviço, escrever um arquivo).
O engine nunca conhece detalhes do sistema: ele apenas chama este contrato.

Capacidades opcionais (consultadas por duck typing, nunca exigidas):
    - flush(): persiste alterações acumuladas após todas as mudanças do recurso
    - prefetch(resources) (classmethod): consulta em lote do estado de todos os
      recursos do tipo, indexados pelo nome de sistema (`resource.name`)

Invariantes:
    - `retrieve` não altera o sistema
    - `set` altera exatamente uma propriedade

Limites explícitos:
    - Não decide se uma propriedade está sincronizada
    - Não produz Events (responsabilidade do Resource)
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable


@runtime_checkable
class Provider(Protocol):
    """
    Contrato mínimo que todo Provider deve satisfazer.

    A conformidade é estrutural (`@runtime_checkable`): não há herança
    obrigatória.
    """

    def retrieve(self) -> Mapping[str, Any]:
        """Retorna o estado atual observado, indexado por propriedade."""
        ...

    def set(self, property: str, value: Any) -> None:
        """Leva uma propriedade ao valor desejado no sistema real."""
        ...


def supports_prefetch(provider: Any) -> bool:
    """Indica se a classe do provider expõe `prefetch` em lote."""
    return callable(getattr(type(provider), "prefetch", None))
