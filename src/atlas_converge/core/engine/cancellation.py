# src/atlas_converge/core/engine/cancellation.py
"""
Token de cancelamento cooperativo.

A Transaction consulta o token apenas entre recursos; nunca no meio da
avaliação de um recurso. Uma vez solicitado, o pedido de parada não pode
ser desfeito: recursos ainda não visitados ficam simplesmente fora do
resultado e serão reavaliados numa próxima transação.
"""

from __future__ import annotations

import threading
from typing import Optional


class CancellationToken:
    """Sinal de parada passado explicitamente à Transaction."""

    def __init__(self) -> None:
        self._stop = threading.Event()
        self.reason: Optional[str] = None

    def request_stop(self, reason: Optional[str] = None) -> None:
        if not self._stop.is_set():
            self.reason = reason
        self._stop.set()

    @property
    def stop_requested(self) -> bool:
        return self._stop.is_set()
