# src/atlas_converge/core/context.py
"""
Contexto de execução compartilhado de uma transação.

Este módulo define o `RunContext`, a estrutura canônica que acompanha uma
transação do início ao fim, carregando sua identidade, a configuração
resolvida e o log estruturado produzido pelo engine e pelos recursos.

Princípios fundamentais:
    - Isolamento por execução (cada transação possui seu próprio contexto)
    - Ausência de estado global compartilhado
    - Estrutura simples e testável

Invariantes:
    - Logs sempre incluem `run_id` e `resource`
    - Warnings são agrupados pela referência do recurso
    - Níveis de log seguem a escala dos recursos: debug, info, notice, warning, err

Limites explícitos:
    - Não avalia recursos
    - Não decide políticas de execução
    - Não persiste dados automaticamente
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from atlas_converge.core.config.loader import load_config


LOG_LEVELS = ("debug", "info", "notice", "warning", "err")

# Origem usada em mensagens que não pertencem a um recurso específico.
TRANSACTION_SOURCE = "transaction"


@dataclass
class RunContext:
    """
    Contexto de execução de uma transação.

    O RunContext consolida:
        - identidade da execução (run_id, created_at)
        - configuração resolvida
        - metadados livres (ex.: host, versão do catálogo)
        - log estruturado de execução (`events`)
        - warnings associados a recursos específicos

    Decisões arquiteturais:
        - Engine, EventManager e recursos registram mensagens apenas via `log`
        - Mensagens de nível `warning` também são coletadas em `warnings`
    """

    run_id: str
    created_at: datetime
    config: Dict[str, Any]
    meta: Dict[str, Any] = field(default_factory=dict)

    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)

    @classmethod
    def create(
        cls,
        config: Optional[Dict[str, Any]] = None,
        meta: Optional[Dict[str, Any]] = None,
    ) -> "RunContext":
        """Cria um contexto novo com `run_id` aleatório e timestamp UTC."""
        return cls(
            run_id=f"run-{uuid.uuid4().hex[:12]}",
            created_at=datetime.now(timezone.utc),
            config=dict(config or {}),
            meta=dict(meta or {}),
        )

    @classmethod
    def from_config_files(
        cls,
        *,
        defaults_path: str,
        local_path: Optional[str] = None,
        meta: Optional[Dict[str, Any]] = None,
    ) -> "RunContext":
        """
        Cria um contexto a partir dos arquivos de configuração da transação.

        O arquivo de defaults (ex.: `config/config.defaults.yaml`) é
        obrigatório; o local é aplicado via deep-merge quando existir.
        Os caminhos usados ficam registrados em `meta["config_paths"]`.

        Raises:
            ConfigError: Propagada de `load_config` (arquivo ausente,
                formato inválido ou conflito de merge).
        """
        config = load_config(defaults_path=defaults_path, local_path=local_path)
        meta = dict(meta or {})
        meta["config_paths"] = {"defaults": defaults_path, "local": local_path}
        return cls.create(config, meta=meta)

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, resource: str, level: str, message: str, **extra: Any) -> None:
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {level}")

        event = {
            "run_id": self.run_id,
            "resource": resource,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

        if level == "warning":
            self.add_warning(resource=resource, message=message)

    def add_warning(self, *, resource: str, message: str) -> None:
        if resource not in self.warnings:
            self.warnings[resource] = []
        self.warnings[resource].append(message)

    def messages(self, *, resource: Optional[str] = None, level: Optional[str] = None) -> List[str]:
        """Mensagens do log, opcionalmente filtradas por recurso e nível."""
        return [
            e["message"]
            for e in self.events
            if (resource is None or e["resource"] == resource)
            and (level is None or e["level"] == level)
        ]
