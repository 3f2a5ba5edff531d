"""Update actions understood by ``CatalogGateway.update``."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .catalog import Variant
    from .primitives import JsonObject, LocalizedString, ProductTypeId, Sku


@dataclass(frozen=True, slots=True, kw_only=True)
class AddVariant:
    sku: Sku
    key: str | None = None
    prices: list[JsonObject] = field(default_factory=list["JsonObject"])
    images: list[JsonObject] = field(default_factory=list["JsonObject"])
    attributes: dict[str, object] = field(default_factory=dict[str, object])

    @classmethod
    def from_variant(cls, variant: Variant) -> AddVariant:
        return cls(
            sku=variant.sku,
            key=variant.key,
            prices=list(variant.prices),
            images=list(variant.images),
            attributes=dict(variant.attributes),
        )


@dataclass(frozen=True, slots=True)
class RemoveVariant:
    sku: Sku


@dataclass(frozen=True, slots=True)
class ChangeMasterVariant:
    sku: Sku


@dataclass(frozen=True, slots=True)
class ChangeProductType:
    product_type_id: ProductTypeId


@dataclass(frozen=True, slots=True)
class ChangeSlug:
    slug: LocalizedString


@dataclass(frozen=True, slots=True)
class Publish:
    pass


type UpdateAction = (
    AddVariant | RemoveVariant | ChangeMasterVariant | ChangeProductType | ChangeSlug | Publish
)
