# src/atlas_converge/core/__init__.py
"""
Core do Atlas Converge.

Subpacotes:
    - config:  configuração resolvida e `TransactionOptions`
    - catalog: modelo de recursos e grafo de relacionamentos
    - engine:  execução da transação
    - report:  relatório da transação

Módulos:
    - context:    RunContext (log estruturado por execução)
    - errors:     ConvergeErrorPayload e códigos canônicos
    - exceptions: exceções tipadas levantadas por providers e recursos
"""
