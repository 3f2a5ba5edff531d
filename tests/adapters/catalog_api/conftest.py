"""Shared fixtures for catalog REST adapter tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from skushift.adapters.catalog_api import CustomObjectLedger, HttpCatalogGateway, ProductTypeRules
from tests.support.http import make_catalog_config, make_client_factory

if TYPE_CHECKING:
    from collections.abc import Iterator

    from tests.support.http import GatewayFactory, Handler, LedgerFactory, RulesFactory

type CatalogAdapter = HttpCatalogGateway | CustomObjectLedger | ProductTypeRules


@pytest.fixture
def built_adapters() -> Iterator[list[CatalogAdapter]]:
    """Adapters built during a test; their background loops are closed afterwards."""

    adapters: list[CatalogAdapter] = []
    yield adapters
    for adapter in adapters:
        adapter.close()


@pytest.fixture
def gateway_for(built_adapters: list[CatalogAdapter]) -> GatewayFactory:
    def build(handler: Handler, **kwargs: int) -> HttpCatalogGateway:
        gateway = HttpCatalogGateway(
            config=make_catalog_config(), client_factory=make_client_factory(handler), **kwargs
        )
        built_adapters.append(gateway)
        return gateway

    return build


@pytest.fixture
def ledger_for(built_adapters: list[CatalogAdapter]) -> LedgerFactory:
    def build(handler: Handler, **kwargs: int) -> CustomObjectLedger:
        ledger = CustomObjectLedger(
            config=make_catalog_config(), client_factory=make_client_factory(handler), **kwargs
        )
        built_adapters.append(ledger)
        return ledger

    return build


@pytest.fixture
def rules_for(built_adapters: list[CatalogAdapter]) -> RulesFactory:
    def build(handler: Handler) -> ProductTypeRules:
        rules = ProductTypeRules(
            config=make_catalog_config(), client_factory=make_client_factory(handler)
        )
        built_adapters.append(rules)
        return rules

    return build
