# src/atlas_converge/core/engine/__init__.py
"""
Engine de transação do Atlas Converge.

Módulos:
    - planner:       ordenação topológica determinística (erro em ciclos)
    - transaction:   Transaction (avaliação, aplicação, métricas)
    - event_manager: roteamento de Events e disparo de reações
    - cancellation:  token de parada cooperativa

Este pacote não reexporta símbolos: o catálogo depende do planner e a
Transaction depende do catálogo. Importe diretamente dos submódulos.
"""
