# src/atlas_converge/core/report/__init__.py
"""
Relatório de transação do Atlas Converge.

Expõe o `TransactionReport` (métricas, Events e log de uma transação) e
a função `create_report`, usada pela Transaction no início da execução.
"""

from .report import TransactionReport, create_report

__all__ = ["TransactionReport", "create_report"]
