"""Same-for-all attribute rules read from catalog product types."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

import httpx

from skushift.adapters.http_resilience import BackgroundClient, ResilientClient
from skushift.config.catalog import CatalogApiConfig, get_catalog_api_config

from .client import CatalogAPIError, error_from_response, parse_body, send
from .schema import ProductTypePayload

if TYPE_CHECKING:
    from collections.abc import Callable

    from skushift.config.http_resilience import ResilienceConfig
    from skushift.domain.model import ProductTypeId
    from skushift.domain.ports import SameForAllLookup

log = getLogger(__name__)

SAME_FOR_ALL: Final[str] = "SameForAll"


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class ProductTypeRules:
    """``SameForAllLookup`` fetching each product type once per instance."""

    config: CatalogApiConfig = field(default_factory=get_catalog_api_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    http: BackgroundClient | None = None
    _http: BackgroundClient = field(init=False, repr=False)
    _cache: dict[ProductTypeId, frozenset[str]] = field(
        default_factory=dict["ProductTypeId", "frozenset[str]"], repr=False
    )

    def __post_init__(self) -> None:
        self._http = self.http or BackgroundClient(
            self.config.resilience, client_factory=self.client_factory
        )

    def close(self) -> None:
        self._http.close()

    def __call__(self, product_type_id: ProductTypeId) -> frozenset[str]:
        cached = self._cache.get(product_type_id)
        if cached is not None:
            return cached
        names = self._http.run(lambda client: self._fetch(client, product_type_id))
        self._cache[product_type_id] = names
        return names

    async def _fetch(
        self, client: ResilientClient, product_type_id: ProductTypeId
    ) -> frozenset[str]:
        response = await send(client, "GET", f"product-types/{product_type_id}")
        if response.status_code == httpx.codes.NOT_FOUND:
            raise CatalogAPIError(
                f"Product type {product_type_id} does not exist", status_code=response.status_code
            )
        if not response.is_success:
            raise error_from_response(response)
        product_type = parse_body(response, ProductTypePayload.model_validate)
        names = frozenset(
            attribute.name
            for attribute in product_type.attributes
            if attribute.attribute_constraint == SAME_FOR_ALL
        )
        log.debug("Product type %s has same-for-all attributes %s", product_type_id, sorted(names))
        return names


if TYPE_CHECKING:
    _rules_check: SameForAllLookup = ProductTypeRules()
