# tests/conftest.py
"""
Fixtures compartilhados para testes do Atlas Converge.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações mínimas e determinísticas (YAML e dict resolvido)
- contexto de execução controlado (RunContext)
- um "sistema real" em memória e fábricas de providers
- fábrica de Transaction já ligada ao contexto de teste

O objetivo destas fixtures é permitir testes do core
(config, catalog, engine e report) sem depender de:
- filesystem
- serviços ou arquivos reais do sistema operacional
- relógio de parede (o relógio da Transaction é fixo)

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Recursos e providers dummy vivem em `tests/fixtures/resources`
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas

Invariantes:
    - Nenhuma fixture executa uma transação
    - Nenhuma fixture realiza I/O
    - Cada teste recebe um sistema em memória novo e isolado

Limites explícitos:
    - Não substituir testes de integração
    - Não conter lógica condicional complexa
"""

import pytest
from datetime import datetime, timezone


# =====================================================
# Config Loader fixtures
# =====================================================

@pytest.fixture
def project_like_config_defaults_yaml() -> str:
    """
    Fixture que fornece um YAML de configuração padrão (defaults) semelhante ao uso real do projeto.

    Representa o conteúdo típico de `config/config.defaults.yaml`, a base
    canônica sobre a qual configurações locais são aplicadas via deep-merge.

    Usado por:
        - Testes do loader de config
        - Testes de deep-merge (defaults + local)
        - Testes de TransactionOptions a partir de config resolvida

    Returns:
        str: Conteúdo YAML representando configuração padrão (defaults).
    """
    return """\
transaction:
  tags: []
  ignore_tags: false
  ignore_schedules: false
  noop: false
  evaltrace: false
"""


@pytest.fixture
def project_like_config_local_yaml() -> str:
    """
    Fixture que fornece um YAML de configuração local (override).

    Simula um `config.local.yaml` que restringe a transação a duas tags
    (string delimitada) e liga o modo noop global.

    Returns:
        str: Conteúdo YAML representando configuração local de override.
    """
    return """\
transaction:
  tags: "web, db"
  noop: true
"""


# =====================================================
# Engine fixtures (RunContext + sistema em memória)
# =====================================================

@pytest.fixture
def dummy_config() -> dict:
    """
    Fixture que fornece uma configuração mínima, já resolvida.

    Decisões arquiteturais:
        - Config é representada como dicionário já resolvido
        - Todos os filtros desligados: nenhum recurso é pulado por config

    Returns:
        dict: Configuração mínima e válida para execução de testes.
    """
    return {
        "transaction": {
            "tags": [],
            "ignore_tags": False,
            "ignore_schedules": False,
            "noop": False,
            "evaltrace": False,
        },
    }


@pytest.fixture
def dummy_ctx(dummy_config):
    """
    Fixture que fornece um RunContext determinístico para testes.

    Decisões arquiteturais:
        - `run_id` e `created_at` são fixos para garantir determinismo
        - O import de RunContext é feito de forma lazy

    Returns:
        RunContext: Contexto de execução isolado e previsível para testes.
    """
    from atlas_converge.core.context import RunContext
    return RunContext(
        run_id="run-test-001",
        created_at=datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc),
        config=dummy_config,
        meta={"source": "pytest"},
    )


@pytest.fixture
def fixed_now() -> datetime:
    """Instante fixo (sexta-feira, 10:30) usado como relógio das transações."""
    return datetime(2026, 1, 16, 10, 30, 0)


@pytest.fixture
def system() -> dict:
    """Estado "real" em memória: {nome_de_sistema: {propriedade: valor}}."""
    return {}


@pytest.fixture
def provider_for(system):
    """
    Fixture factory de providers em memória ligados ao `system` do teste.

    Uso:
        provider_for("nginx")
        provider_for("nginx", fail_on=["ensure"])
        provider_for("nginx", cls=UnreadableProvider)
    """
    from tests.fixtures.resources.dummy_providers import MemoryProvider

    def _make(name: str, *, cls=MemoryProvider, fail_on=()):
        return cls(system, name, fail_on=fail_on)

    return _make


@pytest.fixture
def prefetch_calls(monkeypatch):
    """Isola o registro de chamadas de `PrefetchingMemoryProvider.prefetch` por teste."""
    from tests.fixtures.resources.dummy_providers import PrefetchingMemoryProvider

    calls = []
    monkeypatch.setattr(PrefetchingMemoryProvider, "prefetch_calls", calls)
    return calls


@pytest.fixture
def make_transaction(dummy_ctx, fixed_now):
    """
    Fixture factory que monta uma Transaction sobre recursos e edges dados.

    Args (da função retornada):
        resources: recursos em ordem de declaração
        edges: tuplas (source, target) ou (source, target, callback)
               (com callback, a edge é uma assinatura ALL_EVENTS)
        **kwargs: repassados à Transaction (options, cancellation, ...)

    Returns:
        Callable[..., Transaction]
    """
    from atlas_converge.core.catalog.catalog import Catalog
    from atlas_converge.core.catalog.graph import RelationshipGraph
    from atlas_converge.core.engine.transaction import Transaction

    def _make(resources, edges=(), **kwargs):
        catalog = Catalog.from_resources(resources, version="test-catalog")
        graph = RelationshipGraph(catalog)
        for edge in edges:
            if len(edge) == 3:
                graph.subscribe(edge[0], edge[1], callback=edge[2])
            else:
                graph.require(edge[0], edge[1])
        kwargs.setdefault("ctx", dummy_ctx)
        kwargs.setdefault("clock", lambda: fixed_now)
        return Transaction(catalog, graph=graph, **kwargs)

    return _make
