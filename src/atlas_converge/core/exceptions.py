
"""
Atlas Converge — Canonical Exceptions (v1)

Este módulo define exceções tipadas internas do Atlas Converge.

Objetivo:
- Permitir que providers e recursos levantem falhas semânticas tipadas
- Facilitar o mapeamento determinístico para ConvergeErrorPayload
- Evitar RuntimeError genéricos em falhas de convergência

Regras:
- Exceções devem carregar apenas dados estruturados (serializáveis).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(eq=False)
class ConvergeException(Exception):
    """Base class para exceções internas do Atlas Converge.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None
    decision_required: bool = False

    def __str__(self) -> str:  # pragma: no cover
        return self.message


@dataclass(eq=False)
class ProviderError(ConvergeException):
    """Provider não conseguiu ler ou alterar o estado real do sistema."""


@dataclass(eq=False)
class ResourceValidationError(ConvergeException):
    """Recurso inválido detectado na validação pós-construção (`finish`)."""
