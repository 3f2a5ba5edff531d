"""Decide which existing entries a draft touches and which one to update.

Matching policy for target selection (first rule that applies wins):
- exact SKU-set match
- exactly one entry sharing a slug locale/value pair with the draft
- among slug matches, the entry whose master variant carries the draft's master SKU
- the entry sharing the most SKUs with the draft, ties broken by lowest id
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from skushift.domain.model import shares_localized_value

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from skushift.domain.model import CatalogEntry, Draft, Sku

type SkuIndex = dict[Sku, CatalogEntry]


def build_sku_index(entries: Iterable[CatalogEntry]) -> SkuIndex:
    """Map every SKU held by ``entries`` (staged or current) to its entry."""

    index: SkuIndex = {}
    for entry in entries:
        for sku in entry.skus:
            index[sku] = entry
    return index


def select_matching_entries(draft: Draft, entries: Iterable[CatalogEntry]) -> list[CatalogEntry]:
    """Return the entries sharing at least one SKU with ``draft``."""

    return _entries_for_skus(draft.skus, build_sku_index(entries))


def select_target_entry(draft: Draft, matching_entries: Sequence[CatalogEntry]) -> CatalogEntry:
    """Pick the single entry that will be updated in place for ``draft``."""

    if not matching_entries:
        raise ValueError("Cannot select a target entry without matching entries")

    by_skus = _match_by_sku_set(draft, matching_entries)
    if by_skus is not None:
        return by_skus

    by_slug = _matches_by_slug(draft, matching_entries)
    if len(by_slug) == 1:
        return by_slug[0]

    by_master = _match_by_master_variant(draft, by_slug)
    if by_master is not None:
        return by_master

    draft_skus = set(draft.skus)
    return min(
        matching_entries,
        key=lambda entry: (-len(draft_skus.intersection(entry.skus)), entry.id),
    )


def is_reassignment_needed(draft: Draft, sku_index: SkuIndex) -> bool:
    """Return whether ``draft`` overlaps the catalog in a way that needs fixing.

    A draft needs no reassignment when none of its SKUs exist yet (it is a new
    product) or when exactly one entry holds exactly the draft's SKUs and
    already has the draft's product type.
    """

    entries = _entries_for_skus(draft.skus, sku_index)
    if not entries:
        return False
    if len(entries) > 1:
        return True

    entry = entries[0]
    if set(entry.skus) != set(draft.skus):
        return True
    return entry.product_type_id != draft.product_type_id


def _entries_for_skus(skus: Iterable[Sku], sku_index: SkuIndex) -> list[CatalogEntry]:
    seen: set[str] = set()
    entries: list[CatalogEntry] = []
    for sku in skus:
        entry = sku_index.get(sku)
        if entry is None or entry.id in seen:
            continue
        seen.add(entry.id)
        entries.append(entry)
    return entries


def _match_by_sku_set(draft: Draft, entries: Sequence[CatalogEntry]) -> CatalogEntry | None:
    draft_skus = set(draft.skus)
    for entry in entries:
        if not draft_skus.symmetric_difference(entry.skus):
            return entry
    return None


def _matches_by_slug(draft: Draft, entries: Sequence[CatalogEntry]) -> list[CatalogEntry]:
    return [entry for entry in entries if shares_localized_value(draft.slug, entry.staged.slug)]


def _match_by_master_variant(
    draft: Draft, entries: Sequence[CatalogEntry]
) -> CatalogEntry | None:
    master_sku = draft.master_variant.sku
    for entry in entries:
        if entry.staged.master_variant.sku == master_sku:
            return entry
    return None
