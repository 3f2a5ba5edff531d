"""Public domain model surface."""

from __future__ import annotations

from skushift.domain.model.actions import (
    AddVariant,
    ChangeMasterVariant,
    ChangeProductType,
    ChangeSlug,
    Publish,
    RemoveVariant,
    UpdateAction,
)
from skushift.domain.model.catalog import CatalogEntry, Draft, EntryData, Variant
from skushift.domain.model.primitives import (
    EntryId,
    JsonObject,
    Locale,
    LocalizedString,
    ProductTypeId,
    Sku,
    shares_localized_value,
)
from skushift.domain.model.transaction import EntrySnapshot, TransactionRecord

__all__ = [
    "AddVariant",
    "CatalogEntry",
    "ChangeMasterVariant",
    "ChangeProductType",
    "ChangeSlug",
    "Draft",
    "EntryData",
    "EntryId",
    "EntrySnapshot",
    "JsonObject",
    "Locale",
    "LocalizedString",
    "ProductTypeId",
    "Publish",
    "RemoveVariant",
    "Sku",
    "TransactionRecord",
    "UpdateAction",
    "Variant",
    "shares_localized_value",
]
