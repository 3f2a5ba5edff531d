from __future__ import annotations

from pathlib import Path  # noqa: TC003

import pytest

from skushift.config import (
    ConfigurationError,
    get_database_config,
    get_ledger_config,
    get_storage_config,
)
from skushift.config.storage import DEFAULT_DB_FILENAME


def test_storage_prefers_explicit_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    custom = tmp_path / "custom-data"
    monkeypatch.setenv("SKUSHIFT_DATA_DIR", str(custom))

    assert get_storage_config().resolve_data_dir() == custom.resolve()


def test_database_uri_uses_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LEDGER_DATABASE_URI", "sqlite:///override.db")

    assert get_database_config().uri == "sqlite:///override.db"


def test_database_uri_creates_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("LEDGER_DATABASE_URI", raising=False)
    monkeypatch.setenv("SKUSHIFT_DATA_DIR", str(tmp_path / "data-dir"))

    uri = get_database_config().uri

    expected_path = (tmp_path / "data-dir" / DEFAULT_DB_FILENAME).resolve()
    assert uri == f"sqlite+pysqlite:///{expected_path}"
    assert expected_path.parent.exists()


def test_ledger_defaults_to_sqlite(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LEDGER_BACKEND", raising=False)
    monkeypatch.setenv("LEDGER_DATABASE_URI", "sqlite:///ledger.db")

    config = get_ledger_config()

    assert config.backend == "sqlite"
    assert config.database is not None
    assert config.database.uri == "sqlite:///ledger.db"


def test_catalog_ledger_needs_no_database(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LEDGER_BACKEND", " Catalog ")

    config = get_ledger_config()

    assert config.backend == "catalog"
    assert config.database is None


def test_unknown_ledger_backend_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LEDGER_BACKEND", "redis")

    with pytest.raises(ConfigurationError, match="redis"):
        get_ledger_config()
