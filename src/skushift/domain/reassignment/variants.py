"""Variant-set diffing and backup-draft builders.

Variants leave an entry for two reasons:
1) they move from a donor entry to the target because the draft claims them
2) they leave the target because the draft no longer lists them; those are
   displaced into a new anonymized backup entry instead of being deleted
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from skushift.domain.model import Draft

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from skushift.domain.model import CatalogEntry, EntryId, Sku, Variant

    from .anonymize import Anonymizer


@dataclass(slots=True, frozen=True)
class VariantMoves:
    """Variants leaving donors and the target for one draft."""

    donor_variants: tuple[Variant, ...] = ()
    donor_skus_by_entry: dict[EntryId, tuple[Sku, ...]] = field(
        default_factory=dict["EntryId", "tuple[Sku, ...]"]
    )
    displaced_variants: tuple[Variant, ...] = ()

    @property
    def donor_skus(self) -> list[Sku]:
        return [variant.sku for variant in self.donor_variants]


def compute_variant_moves(
    draft: Draft,
    matching_entries: Sequence[CatalogEntry],
    target: CatalogEntry,
) -> VariantMoves:
    """Compute donor removals and target displacements for ``draft``."""

    draft_skus = set(draft.skus)

    donor_variants: list[Variant] = []
    donor_skus_by_entry: dict[EntryId, tuple[Sku, ...]] = {}
    for entry in matching_entries:
        if entry.id == target.id:
            continue
        moving = [
            variant for variant in entry.variants_by_sku().values() if variant.sku in draft_skus
        ]
        if not moving:
            continue
        donor_variants.extend(moving)
        donor_skus_by_entry[entry.id] = tuple(variant.sku for variant in moving)

    displaced = [
        variant for variant in target.variants_by_sku().values() if variant.sku not in draft_skus
    ]

    return VariantMoves(
        donor_variants=tuple(donor_variants),
        donor_skus_by_entry=donor_skus_by_entry,
        displaced_variants=tuple(displaced),
    )


def draft_from_entry(entry: CatalogEntry) -> Draft:
    """Build a detached draft from a deep copy of ``entry``'s staged data."""

    staged = copy.deepcopy(entry.staged)
    return Draft(
        product_type_id=entry.product_type_id,
        key=entry.key,
        name=staged.name,
        slug=staged.slug,
        master_variant=staged.master_variant,
        variants=staged.variants,
        tax_category_id=entry.tax_category_id,
        state_id=entry.state_id,
    )


def build_anonymized_backup_draft(
    target: CatalogEntry,
    displaced_variants: Sequence[Variant],
    *,
    anonymizer: Anonymizer,
) -> Draft | None:
    """Return an anonymized draft holding ``displaced_variants``, if there are any."""

    if not displaced_variants:
        return None
    clones = [_strip_variant_id(variant) for variant in displaced_variants]
    backup = replace(draft_from_entry(target), master_variant=clones[0], variants=clones[1:])
    return anonymizer.draft(backup)


def restrict_draft(draft: Draft, skus: Iterable[Sku]) -> Draft | None:
    """Return a copy of ``draft`` limited to ``skus``; ``None`` when nothing is left."""

    keep = set(skus)
    kept = [variant.clone() for variant in draft.all_variants if variant.sku in keep]
    if not kept:
        return None
    return replace(copy.deepcopy(draft), master_variant=kept[0], variants=kept[1:])


def extend_draft(draft: Draft, variants: Iterable[Variant]) -> Draft:
    """Return a copy of ``draft`` with ``variants`` appended, skipping known SKUs."""

    known = set(draft.skus)
    extra = [_strip_variant_id(variant) for variant in variants if variant.sku not in known]
    clone = copy.deepcopy(draft)
    return replace(clone, variants=[*clone.variants, *extra])


def _strip_variant_id(variant: Variant) -> Variant:
    return replace(variant.clone(), variant_id=None)
