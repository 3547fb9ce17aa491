# tests/core/context/test_run_context_config.py
"""
Testes de criação do RunContext a partir dos arquivos de configuração.

Os testes asseguram que:
- defaults e overrides locais são resolvidos via deep-merge
- a configuração resultante governa as opções da Transaction
- o arquivo de defaults distribuído com o projeto é utilizável
"""

from pathlib import Path

import pytest

try:
    from atlas_converge.core.config.errors import DefaultsNotFoundError
    from atlas_converge.core.config.options import TransactionOptions
    from atlas_converge.core.context import RunContext
except Exception as e:  # noqa: BLE001
    DefaultsNotFoundError = None
    TransactionOptions = None
    RunContext = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing RunContext config API. Implement:\n"
            "- src/atlas_converge/core/context.py (RunContext.from_config_files)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_context_from_defaults_and_local(tmp_path: Path, project_like_config_defaults_yaml, project_like_config_local_yaml):
    _require_imports()
    defaults = tmp_path / "config.defaults.yaml"
    local = tmp_path / "config.local.yaml"
    defaults.write_text(project_like_config_defaults_yaml, encoding="utf-8")
    local.write_text(project_like_config_local_yaml, encoding="utf-8")

    ctx = RunContext.from_config_files(
        defaults_path=str(defaults),
        local_path=str(local),
        meta={"host": "web01"},
    )

    assert ctx.config["transaction"]["noop"] is True
    assert ctx.config["transaction"]["ignore_schedules"] is False
    assert ctx.meta == {
        "host": "web01",
        "config_paths": {"defaults": str(defaults), "local": str(local)},
    }

    options = TransactionOptions.from_config(ctx.config)
    assert options.tags == ["web", "db"]
    assert options.noop is True


def test_missing_defaults_raises(tmp_path: Path):
    _require_imports()
    with pytest.raises(DefaultsNotFoundError):
        RunContext.from_config_files(defaults_path=str(tmp_path / "missing.yaml"))


def test_context_from_shipped_defaults():
    _require_imports()
    path = Path(__file__).resolve().parents[3] / "config" / "config.defaults.yaml"

    ctx = RunContext.from_config_files(defaults_path=str(path))

    assert TransactionOptions.from_config(ctx.config) == TransactionOptions()
    assert ctx.meta["config_paths"]["local"] is None
