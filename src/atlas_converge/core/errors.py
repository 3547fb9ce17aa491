"""
Atlas Converge — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do Atlas Converge.

Falhas de convergência (aplicação de mudança, leitura de estado, callbacks,
prefetch, geração dinâmica de recursos) nunca escapam da transação como
exceção: elas são convertidas em `ConvergeErrorPayload`, registradas no
log estruturado e contabilizadas nas métricas. Por isso os erros devem ser:
- explícitos
- serializáveis
- rastreáveis
- acionáveis
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from .exceptions import ConvergeException


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConvergeErrorPayload:
    """
    Payload canônico de erro do Atlas Converge.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    - decision_required: indica se a correção exige decisão humana
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None
    decision_required: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Recursos / Providers
CHANGE_APPLY_FAILED = "CHANGE_APPLY_FAILED"
STATE_RETRIEVAL_FAILED = "STATE_RETRIEVAL_FAILED"
FLUSH_FAILED = "FLUSH_FAILED"
PREFETCH_FAILED = "PREFETCH_FAILED"

# Eventos / Callbacks
CALLBACK_FAILED = "CALLBACK_FAILED"

# Geração dinâmica
GENERATION_FAILED = "GENERATION_FAILED"
DUPLICATE_RESOURCE = "DUPLICATE_RESOURCE"


_DEFAULT_HINTS: Dict[str, str] = {
    CHANGE_APPLY_FAILED: "Verifique o provider do recurso; a mudança será reavaliada na próxima transação.",
    STATE_RETRIEVAL_FAILED: "Verifique se o provider consegue ler o estado atual do sistema.",
    FLUSH_FAILED: "As mudanças foram aplicadas mas não persistidas pelo provider; verifique o flush.",
    PREFETCH_FAILED: "O estado será lido recurso a recurso; verifique o prefetch do provider.",
    CALLBACK_FAILED: "A reação não foi executada; dependentes não observarão um evento 'restarted'.",
    GENERATION_FAILED: "Nenhum recurso filho foi gerado; verifique o gerador do recurso.",
}


def error_from_exception(
    exc: BaseException,
    *,
    code: str,
    resource: Optional[str] = None,
) -> ConvergeErrorPayload:
    """Converte exceções em ConvergeErrorPayload (serializável, acionável).

    Regras:
    - ConvergeException: já vem com message/details/hint/decision_required.
    - Outras exceções: encapsuladas sob `code`, sem expor stack trace.
    """
    if isinstance(exc, ConvergeException):
        details = dict(exc.details or {})
        details.setdefault("resource", resource)
        return ConvergeErrorPayload(
            type=code,
            message=str(exc) or "Erro de convergência",
            details=details,
            hint=exc.hint or _DEFAULT_HINTS.get(code),
            decision_required=bool(exc.decision_required),
        )

    return ConvergeErrorPayload(
        type=code,
        message=str(exc) or "Erro inesperado durante a transação",
        details={
            "resource": resource,
            "exception_class": exc.__class__.__name__,
        },
        hint=_DEFAULT_HINTS.get(code, "Verifique o log estruturado da transação"),
        decision_required=False,
    )


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def duplicate_resource(
    *,
    resource: str,
    generator: str,
    hint: str = "Remova a declaração conflitante ou ajuste o gerador para produzir títulos únicos.",
) -> ConvergeErrorPayload:
    return ConvergeErrorPayload(
        type=DUPLICATE_RESOURCE,
        message="Recurso gerado duplica um recurso existente no catálogo",
        details={
            "resource": resource,
            "generator": generator,
        },
        hint=hint,
        decision_required=False,
    )


def callback_failed(
    *,
    resource: str,
    callback: str,
    event_count: int,
    exc: BaseException,
) -> ConvergeErrorPayload:
    return ConvergeErrorPayload(
        type=CALLBACK_FAILED,
        message=f"Failed to call {callback}: {exc}",
        details={
            "resource": resource,
            "callback": callback,
            "event_count": event_count,
            "exception_class": exc.__class__.__name__,
        },
        hint=_DEFAULT_HINTS[CALLBACK_FAILED],
        decision_required=False,
    )
