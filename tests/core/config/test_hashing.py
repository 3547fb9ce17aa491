# tests/core/config/test_hashing.py
"""
Testes do hashing canônico de configuração.

O hash identifica a configuração efetiva de uma transação e é gravado
em `report.run["config_hash"]`.

Invariantes:
    - Configurações estruturalmente equivalentes produzem o mesmo hash
    - O hash é SHA-256 do JSON canônico (chaves ordenadas, separadores compactos)
"""

import hashlib
import json

import pytest

try:
    from atlas_converge.core.config.hashing import compute_config_hash
except Exception as e:
    compute_config_hash = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing config hashing. Implement:\n"
            "- src/atlas_converge/core/config/hashing.py (compute_config_hash)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_hash_is_deterministic():
    """
    Verifica que a ordem de inserção das chaves não altera o hash.
    """
    _require_imports()
    a = {"transaction": {"noop": False, "tags": ["web"]}}
    b = {"transaction": {"tags": ["web"], "noop": False}}

    assert compute_config_hash(a) == compute_config_hash(b)


def test_hash_matches_sha256_of_canonical_json():
    _require_imports()
    cfg = {"transaction": {"noop": True, "tags": "web, db"}}
    canonical = json.dumps(cfg, sort_keys=True, separators=(",", ":"), ensure_ascii=False)

    assert compute_config_hash(cfg) == hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def test_hash_changes_on_override():
    _require_imports()
    base = {"transaction": {"noop": False}}
    changed = {"transaction": {"noop": True}}

    assert compute_config_hash(base) != compute_config_hash(changed)


def test_hash_rejects_non_dict():
    _require_imports()
    with pytest.raises(TypeError):
        compute_config_hash(["transaction"])
