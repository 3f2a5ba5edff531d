"""Application configuration helpers."""

from __future__ import annotations

from .catalog import CatalogApiConfig, get_catalog_api_config
from .env import env_int, env_list, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .reassignment import get_reassignment_options
from .storage import (
    DatabaseConfig,
    LedgerConfig,
    StorageConfig,
    get_database_config,
    get_ledger_config,
    get_storage_config,
)

__all__ = [
    "CatalogApiConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "LedgerConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "env_int",
    "env_list",
    "get_catalog_api_config",
    "get_database_config",
    "get_ledger_config",
    "get_reassignment_options",
    "get_storage_config",
    "require_env_vars",
]
