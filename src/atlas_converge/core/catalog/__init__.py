# src/atlas_converge/core/catalog/__init__.py
"""
# Catálogo — Atlas Converge

Este pacote define os **contratos** e as **estruturas de dados** consumidos
pelo engine de transação:

- **types**
  - `Event`, `EventStatus`: desfechos imutáveis de mudanças e reações
  - `Edge`: relacionamento dirigido com gatilho e callback
- **change**
  - `Change`: mutação pendente de uma propriedade
- **provider**
  - `Provider` (Protocol): leitura/escrita do estado real do sistema
- **resource**
  - `Resource`: objeto declarado com estado desejado e Provider
- **schedule**
  - `Schedule`: janela de manutenção
- **catalog**
  - `Catalog`: arena de recursos indexada por referência
- **graph**
  - `RelationshipGraph`: ordenação topológica e casamento de edges

## Limites Explícitos
- Não avalia nem aplica recursos (responsabilidade do engine)
- Não interpreta manifestos declarativos
"""

from .types import ABSENT, ALL_EVENTS, NONE, Edge, Event, EventStatus
from .change import Change
from .provider import Provider, supports_prefetch
from .schedule import Schedule
from .resource import Resource
from .catalog import Catalog, DuplicateResourceError
from .graph import RelationshipGraph

__all__ = [
    "ABSENT",
    "ALL_EVENTS",
    "NONE",
    "Edge",
    "Event",
    "EventStatus",
    "Change",
    "Provider",
    "supports_prefetch",
    "Schedule",
    "Resource",
    "Catalog",
    "DuplicateResourceError",
    "RelationshipGraph",
]
