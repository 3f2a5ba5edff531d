"""Pydantic payload models for ledger records.

The ledger stores plain JSON. These models define that JSON and convert it to
and from the domain dataclasses, so any ledger backend can persist transactions
without knowing the domain types.
"""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import TYPE_CHECKING, Any, Final, Literal

from pydantic import BaseModel, ConfigDict, Field

from skushift.domain.model import (
    CatalogEntry,
    Draft,
    EntryData,
    EntrySnapshot,
    TransactionRecord,
    Variant,
)

from .anonymize import epoch_millis

if TYPE_CHECKING:
    from skushift.domain.model import EntryId

TRANSACTION_KIND: Final[str] = "reassignment"
SNAPSHOT_KIND: Final[str] = "product-type-change"


class RecordBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", from_attributes=True)


class VariantModel(RecordBaseModel):
    sku: str
    key: str | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)
    prices: list[dict[str, Any]] = Field(default_factory=list)
    images: list[dict[str, Any]] = Field(default_factory=list)
    variant_id: int | None = None

    def to_domain(self) -> Variant:
        return Variant(
            sku=self.sku,
            key=self.key,
            attributes=dict(self.attributes),
            prices=[dict(price) for price in self.prices],
            images=[dict(image) for image in self.images],
            variant_id=self.variant_id,
        )


class DraftModel(RecordBaseModel):
    product_type_id: str
    master_variant: VariantModel
    variants: list[VariantModel] = Field(default_factory=list["VariantModel"])
    key: str | None = None
    name: dict[str, str] = Field(default_factory=dict)
    slug: dict[str, str] = Field(default_factory=dict)
    tax_category_id: str | None = None
    state_id: str | None = None

    def to_domain(self) -> Draft:
        return Draft(
            product_type_id=self.product_type_id,
            master_variant=self.master_variant.to_domain(),
            variants=[variant.to_domain() for variant in self.variants],
            key=self.key,
            name=dict(self.name),
            slug=dict(self.slug),
            tax_category_id=self.tax_category_id,
            state_id=self.state_id,
        )


class EntryDataModel(RecordBaseModel):
    master_variant: VariantModel
    variants: list[VariantModel] = Field(default_factory=list["VariantModel"])
    name: dict[str, str] = Field(default_factory=dict)
    slug: dict[str, str] = Field(default_factory=dict)

    def to_domain(self) -> EntryData:
        return EntryData(
            master_variant=self.master_variant.to_domain(),
            variants=[variant.to_domain() for variant in self.variants],
            name=dict(self.name),
            slug=dict(self.slug),
        )


class EntryModel(RecordBaseModel):
    id: str
    version: int
    product_type_id: str
    staged: EntryDataModel
    current: EntryDataModel | None = None
    key: str | None = None
    published: bool = False
    tax_category_id: str | None = None
    state_id: str | None = None

    def to_domain(self) -> CatalogEntry:
        return CatalogEntry(
            id=self.id,
            version=self.version,
            product_type_id=self.product_type_id,
            staged=self.staged.to_domain(),
            current=self.current.to_domain() if self.current is not None else None,
            key=self.key,
            published=self.published,
            tax_category_id=self.tax_category_id,
            state_id=self.state_id,
        )


class TransactionModel(RecordBaseModel):
    kind: Literal["reassignment"] = "reassignment"
    new_draft: DraftModel
    created_at: datetime
    backup_variants: list[VariantModel] = Field(default_factory=list["VariantModel"])
    backup_draft: DraftModel | None = None
    target_id: str | None = None

    @classmethod
    def from_domain(cls, record: TransactionRecord) -> TransactionModel:
        return cls.model_validate(record)

    def to_domain(self, key: str) -> TransactionRecord:
        return TransactionRecord(
            key=key,
            new_draft=self.new_draft.to_domain(),
            created_at=self.created_at,
            backup_variants=[variant.to_domain() for variant in self.backup_variants],
            backup_draft=self.backup_draft.to_domain() if self.backup_draft else None,
            target_id=self.target_id,
        )


class SnapshotModel(RecordBaseModel):
    kind: Literal["product-type-change"] = "product-type-change"
    entry: EntryModel
    created_at: datetime

    @classmethod
    def from_domain(cls, snapshot: EntrySnapshot) -> SnapshotModel:
        return cls.model_validate(snapshot)

    def to_domain(self, key: str) -> EntrySnapshot:
        return EntrySnapshot(key=key, entry=self.entry.to_domain(), created_at=self.created_at)


def transaction_key(entry_id: EntryId, created_at: datetime) -> str:
    return f"{entry_id}-{epoch_millis(created_at)}"


def snapshot_key(transaction_key: str) -> str:
    return f"{transaction_key}-product-type"
