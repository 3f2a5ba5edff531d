"""Public interface for the catalog REST adapter."""

from __future__ import annotations

from .client import CatalogAPIError, HttpCatalogGateway, sku_predicate, slug_predicate
from .ledger import CustomObjectLedger
from .product_types import ProductTypeRules
from .schema import ProductDraftPayload, ProductPayload
from .translator import (
    action_to_payload,
    draft_to_payload,
    parse_draft,
    parse_entry,
    update_payload,
)

__all__ = [
    "CatalogAPIError",
    "CustomObjectLedger",
    "HttpCatalogGateway",
    "ProductDraftPayload",
    "ProductPayload",
    "ProductTypeRules",
    "action_to_payload",
    "draft_to_payload",
    "parse_draft",
    "parse_entry",
    "sku_predicate",
    "slug_predicate",
    "update_payload",
]
