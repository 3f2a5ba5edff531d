from __future__ import annotations

import pytest

from skushift.config import (
    MissingConfigurationError,
    get_catalog_api_config,
    get_reassignment_options,
)


def test_catalog_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CATALOG_API_URL", "https://api.example.com/")
    monkeypatch.setenv("CATALOG_PROJECT_KEY", "shop")
    monkeypatch.setenv("CATALOG_ACCESS_TOKEN", "secret")

    config = get_catalog_api_config()

    assert config.project_url == "https://api.example.com/shop/"
    assert config.resilience.base_url == "https://api.example.com/shop/"
    assert config.resilience.default_headers == {"Authorization": "Bearer secret"}
    assert config.resilience.ratelimit is not None
    assert 409 not in config.resilience.retry.status_forcelist


def test_catalog_config_requires_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CATALOG_API_URL", "https://api.example.com")
    monkeypatch.delenv("CATALOG_PROJECT_KEY", raising=False)
    monkeypatch.delenv("CATALOG_ACCESS_TOKEN", raising=False)

    with pytest.raises(MissingConfigurationError, match="CATALOG_ACCESS_TOKEN"):
        get_catalog_api_config()


def test_reassignment_options_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REASSIGNMENT_BLACKLIST", "color,material")
    monkeypatch.setenv("REASSIGNMENT_RETAIN_ATTRIBUTES", "prices, size")
    monkeypatch.setenv("REASSIGNMENT_DETACH_CONCURRENCY", "5")
    monkeypatch.delenv("REASSIGNMENT_CONFLICT_RETRIES", raising=False)

    options = get_reassignment_options()

    assert options.blacklist == frozenset({"color", "material"})
    assert options.retain_existing_attributes == ("prices", "size")
    assert options.detach_concurrency == 5
    assert options.max_conflict_retries == 3
