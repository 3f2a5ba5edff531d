"""Pydantic models describing the catalog REST API payloads."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime  # noqa: TC003
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

type LocalizedPayload = dict[str, str]


class CatalogBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, alias_generator=to_camel)


class ReferencePayload(CatalogBaseModel):
    type_id: str
    id: str


class AttributePayload(CatalogBaseModel):
    name: str
    value: Any = None


class VariantPayload(CatalogBaseModel):
    id: int | None = None
    sku: str
    key: str | None = None
    prices: list[dict[str, Any]] = Field(default_factory=list)
    images: list[dict[str, Any]] = Field(default_factory=list)
    attributes: list[AttributePayload] = Field(default_factory=list["AttributePayload"])


class ProductDataPayload(CatalogBaseModel):
    name: LocalizedPayload = Field(default_factory=dict)
    slug: LocalizedPayload = Field(default_factory=dict)
    master_variant: VariantPayload
    variants: list[VariantPayload] = Field(default_factory=list["VariantPayload"])


class MasterDataPayload(CatalogBaseModel):
    published: bool = False
    staged: ProductDataPayload
    current: ProductDataPayload | None = None


class ProductPayload(CatalogBaseModel):
    id: str
    version: int
    key: str | None = None
    product_type: ReferencePayload
    tax_category: ReferencePayload | None = None
    state: ReferencePayload | None = None
    master_data: MasterDataPayload


class ProductDraftPayload(CatalogBaseModel):
    product_type: ReferencePayload
    key: str | None = None
    name: LocalizedPayload = Field(default_factory=dict)
    slug: LocalizedPayload = Field(default_factory=dict)
    master_variant: VariantPayload
    variants: list[VariantPayload] = Field(default_factory=list["VariantPayload"])
    tax_category: ReferencePayload | None = None
    state: ReferencePayload | None = None


class PagedQueryResponse(CatalogBaseModel):
    limit: int = 0
    offset: int = 0
    count: int = 0
    total: int | None = None
    results: list[dict[str, Any]] = Field(default_factory=list)


class CustomObjectPayload(CatalogBaseModel):
    id: str | None = None
    version: int = 0
    container: str
    key: str
    value: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None


class AttributeDefinitionPayload(CatalogBaseModel):
    name: str
    attribute_constraint: str = "None"


class ProductTypePayload(CatalogBaseModel):
    id: str
    version: int = 0
    attributes: list[AttributeDefinitionPayload] = Field(
        default_factory=list["AttributeDefinitionPayload"]
    )


class ErrorObjectPayload(CatalogBaseModel):
    code: str
    message: str = ""


class ErrorResponse(CatalogBaseModel):
    status_code: int
    message: str = ""
    errors: list[ErrorObjectPayload] = Field(default_factory=list["ErrorObjectPayload"])


type ProductPayloadInput = ProductPayload | Mapping[str, object]
type ProductDraftPayloadInput = ProductDraftPayload | Mapping[str, object]

PRODUCT_TYPE_ID: Literal["product-type"] = "product-type"
TAX_CATEGORY_TYPE_ID: Literal["tax-category"] = "tax-category"
STATE_TYPE_ID: Literal["state"] = "state"
