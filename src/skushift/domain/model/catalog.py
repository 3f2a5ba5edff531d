"""Catalog building blocks: variants, drafts and existing entries.

Drafts describe the desired state of one product; entries are what the remote
catalog currently holds. Both are plain dataclasses; every transformation in
the reassignment core builds new values with ``dataclasses.replace`` or the
builders in ``domain.reassignment.variants`` instead of mutating in place.
"""

from __future__ import annotations

import copy
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .primitives import EntryId, JsonObject, LocalizedString, ProductTypeId, Sku


@dataclass(slots=True, kw_only=True)
class Variant:
    """One SKU's data within a draft or an entry."""

    sku: Sku
    key: str | None = None
    attributes: dict[str, object] = field(default_factory=dict[str, object])
    prices: list[JsonObject] = field(default_factory=list["JsonObject"])
    images: list[JsonObject] = field(default_factory=list["JsonObject"])
    variant_id: int | None = None

    def clone(self) -> Variant:
        return copy.deepcopy(self)


def _skus(variants: list[Variant]) -> list[Sku]:
    return [variant.sku for variant in variants]


@dataclass(slots=True, kw_only=True)
class Draft:
    """Desired state of one catalog entry."""

    product_type_id: ProductTypeId
    master_variant: Variant
    variants: list[Variant] = field(default_factory=list["Variant"])
    key: str | None = None
    name: LocalizedString = field(default_factory=dict[str, str])
    slug: LocalizedString = field(default_factory=dict[str, str])
    tax_category_id: str | None = None
    state_id: str | None = None

    @property
    def all_variants(self) -> list[Variant]:
        return [self.master_variant, *self.variants]

    @property
    def skus(self) -> list[Sku]:
        return _skus(self.all_variants)

    @property
    def identity(self) -> str:
        """Human-readable handle used in logs and failure reports."""
        return self.key or f"sku:{self.master_variant.sku}"

    def duplicate_skus(self) -> list[Sku]:
        counts = Counter(self.skus)
        return sorted(sku for sku, count in counts.items() if count > 1)


@dataclass(slots=True, kw_only=True)
class EntryData:
    """One projection (staged or current) of an existing entry."""

    master_variant: Variant
    variants: list[Variant] = field(default_factory=list["Variant"])
    name: LocalizedString = field(default_factory=dict[str, str])
    slug: LocalizedString = field(default_factory=dict[str, str])

    @property
    def all_variants(self) -> list[Variant]:
        return [self.master_variant, *self.variants]

    @property
    def skus(self) -> list[Sku]:
        return _skus(self.all_variants)


@dataclass(slots=True, kw_only=True)
class CatalogEntry:
    """An existing product as returned by the catalog gateway."""

    id: EntryId
    version: int
    product_type_id: ProductTypeId
    staged: EntryData
    current: EntryData | None = None
    key: str | None = None
    published: bool = False
    tax_category_id: str | None = None
    state_id: str | None = None

    @property
    def staged_skus(self) -> list[Sku]:
        return self.staged.skus

    @property
    def current_skus(self) -> list[Sku]:
        if self.current is None:
            return []
        return self.current.skus

    @property
    def skus(self) -> list[Sku]:
        """Every SKU this entry holds, staged first, then current-only ones."""
        staged = self.staged_skus
        seen = set(staged)
        return staged + [sku for sku in self.current_skus if sku not in seen]

    def variants_by_sku(self) -> dict[Sku, Variant]:
        """Staged variants win over current ones for SKUs present in both."""
        variants: dict[Sku, Variant] = {}
        for variant in self.staged.all_variants:
            variants[variant.sku] = variant
        if self.current is not None:
            for variant in self.current.all_variants:
                variants.setdefault(variant.sku, variant)
        return variants

    def slugs(self) -> list[LocalizedString]:
        if self.current is None:
            return [self.staged.slug]
        return [self.staged.slug, self.current.slug]
