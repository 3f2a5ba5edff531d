"""Catalog REST API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

CATALOG_TIMEOUT_SECONDS = 20.0
CUSTOM_OBJECT_CONTAINER = "skushift-reassignment-transactions"


@dataclass(frozen=True)
class CatalogApiConfig:
    """Holds catalog API endpoint, credentials and client tuning."""

    base_url: str
    project_key: str
    access_token: str
    resilience: ResilienceConfig
    ledger_container: str = CUSTOM_OBJECT_CONTAINER

    @property
    def project_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/{self.project_key}/"


def get_catalog_api_config(*, resilience: ResilienceConfig | None = None) -> CatalogApiConfig:
    values = require_env_vars(("CATALOG_API_URL", "CATALOG_PROJECT_KEY", "CATALOG_ACCESS_TOKEN"))
    base_url = values["CATALOG_API_URL"]
    project_key = values["CATALOG_PROJECT_KEY"]
    return CatalogApiConfig(
        base_url=base_url,
        project_key=project_key,
        access_token=values["CATALOG_ACCESS_TOKEN"],
        resilience=resilience
        or ResilienceConfig(
            name="catalog",
            base_url=f"{base_url.rstrip('/')}/{project_key}/",
            timeout_seconds=CATALOG_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            default_headers={"Authorization": f"Bearer {values['CATALOG_ACCESS_TOKEN']}"},
        ),
    )
