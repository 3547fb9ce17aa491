# src/atlas_converge/core/config/errors.py
"""
Exceções canônicas da camada de configuração do Atlas Converge.

Este módulo define a hierarquia de exceções utilizadas durante o
carregamento, a validação estrutural e a resolução da configuração de
uma transação.

Princípios fundamentais:
    - Exceções são tipadas e semânticas
    - Erros estruturais são tratados como falhas fatais
    - Mensagens de erro são claras e direcionadas ao operador

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção representa falha de aplicação de recurso

Limites explícitos:
    - Não executa transações
    - Não realiza fallback ou recovery
"""


class ConfigError(Exception):
    """
    Exceção base para erros relacionados à configuração do Atlas Converge.

    Permite captura genérica de erros de configuração e distinção clara
    entre falhas estruturais e falhas de convergência de recursos.
    """


class DefaultsNotFoundError(ConfigError):
    """
    Exceção levantada quando o arquivo de configuração base (defaults)
    não é encontrado no caminho especificado.

    Decisões arquiteturais:
        - O arquivo de defaults é obrigatório
        - Defaults ausentes não são inferidos nem criados automaticamente
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Exceção levantada quando o formato do arquivo de configuração
    não é suportado pelo loader.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """
    Exceção levantada quando o conteúdo raiz da configuração
    não é um dicionário (`dict`).
    """


class ConfigTypeConflictError(ConfigError):
    """
    Exceção levantada quando ocorre conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"transaction": {"noop": false}}
        - override: {"transaction": "noop"}

    Invariantes:
        - Nenhum merge parcial é produzido em caso de conflito
    """


class InvalidTransactionOptionError(ConfigError):
    """
    Exceção levantada quando a seção `transaction` da configuração contém
    um valor de tipo inválido (ex.: `noop: "sim"` ou `tags: 42`).

    Decisões arquiteturais:
        - Flags booleanas não sofrem coerção implícita
        - O erro ocorre antes de qualquer recurso ser avaliado
    """
