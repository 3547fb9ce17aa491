# src/atlas_converge/__init__.py
"""
Atlas Converge — engine de transação para gestão de configuração declarativa.

Este pacote raiz define o namespace público do Atlas Converge, um engine
que conduz um catálogo de recursos declarados ao estado desejado, numa
única passada determinística e rastreável.

Princípios centrais:
    - O catálogo é um grafo explícito de recursos e relacionamentos
    - A aplicação segue a ordem topológica do grafo
    - Falhas são contidas no recurso que as produziu e viram métricas + log
    - Toda transação produz um relatório serializável

Arquitetura em alto nível:
    - core.config  → carregamento, merge, hashing e opções de transação
    - core.catalog → recursos, providers, catálogo e grafo de relacionamentos
    - core.engine  → planner, Transaction, EventManager e cancelamento
    - core.report  → TransactionReport (métricas, Events e log)

Limites explícitos:
    - Não interpreta manifestos declarativos
    - Não persiste relatórios
    - Não expõe CLI
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
