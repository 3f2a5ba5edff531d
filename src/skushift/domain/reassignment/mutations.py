"""Version-checked catalog mutations with local conflict retries.

Every mutation is expressed as a builder: a function from the freshest known
copy of an entry to the actions that still need to happen. On a version
conflict the entry is refetched and the builder runs again, so a step that
already took effect produces no actions and no remote call. The same property
makes every step safe to replay after a crash.
"""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from skushift.domain.errors import EntryNotFoundError, VersionConflictError
from skushift.domain.model import (
    AddVariant,
    ChangeMasterVariant,
    ChangeProductType,
    ChangeSlug,
    Publish,
    RemoveVariant,
    shares_localized_value,
)

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Mapping

    from skushift.domain.model import (
        CatalogEntry,
        Draft,
        ProductTypeId,
        Sku,
        UpdateAction,
        Variant,
    )
    from skushift.domain.ports import CatalogGateway

    from .anonymize import Anonymizer

log = getLogger(__name__)

type ActionBuilder = Callable[[CatalogEntry], list[UpdateAction]]
type DeletePredicate = Callable[[CatalogEntry], bool]


class CatalogMutator:
    """Apply builders to entries, refetching and rebuilding on version conflicts."""

    def __init__(self, gateway: CatalogGateway, *, max_conflict_retries: int = 3) -> None:
        self._gateway = gateway
        self._max_conflict_retries = max_conflict_retries

    def update(self, entry: CatalogEntry, build: ActionBuilder, *, reason: str) -> CatalogEntry:
        """Apply the actions ``build`` yields for ``entry``; return the updated entry."""

        current = entry
        conflicts = 0
        while True:
            actions = build(current)
            if not actions:
                log.debug("Nothing to %s on entry %s", reason, current.id)
                return current
            try:
                updated = self._gateway.update(current, actions)
            except VersionConflictError:
                conflicts += 1
                if conflicts > self._max_conflict_retries:
                    raise
                log.warning(
                    "Version conflict on entry %s while trying to %s (attempt %s), refetching",
                    current.id,
                    reason,
                    conflicts,
                )
                current = self.refetch(current)
                continue
            log.info("Applied %s action(s) to %s entry %s", len(actions), reason, current.id)
            return updated

    def delete_if(self, entry: CatalogEntry, should_delete: DeletePredicate) -> bool:
        """Delete ``entry`` while ``should_delete`` holds; return whether it is gone."""

        current = entry
        conflicts = 0
        while True:
            if not should_delete(current):
                return False
            try:
                self._gateway.delete(current)
            except EntryNotFoundError:
                return True
            except VersionConflictError:
                conflicts += 1
                if conflicts > self._max_conflict_retries:
                    raise
                log.warning("Version conflict deleting entry %s, refetching", current.id)
                fresh = self._gateway.fetch_by_id(current.id)
                if fresh is None:
                    return True
                current = fresh
                continue
            log.info("Deleted entry %s", current.id)
            return True

    def refetch(self, entry: CatalogEntry) -> CatalogEntry:
        fresh = self._gateway.fetch_by_id(entry.id)
        if fresh is None:
            raise EntryNotFoundError(entry.id)
        return fresh


# --- Action builders ---------------------------------------------------------


def removal_actions(entry: CatalogEntry, skus: Collection[Sku]) -> list[UpdateAction]:
    """Remove ``skus`` from ``entry``, moving the master first when it has to go.

    SKUs still present in the published data are flushed with a trailing
    publish. Published-only variants that are not being removed are added back
    to the staged data first, so neither the publish nor an emptied staged
    projection drops them. Callers delete the entry instead when nothing at
    all would be left.
    """

    removing = set(skus)
    staged = entry.staged_skus
    removed = [sku for sku in staged if sku in removing]
    remaining = [sku for sku in staged if sku not in removing]
    publish = bool(removing.intersection(entry.current_skus))
    restored = published_only_variants(entry, removing) if publish or not remaining else []

    actions: list[UpdateAction] = [AddVariant.from_variant(variant) for variant in restored]
    kept = remaining + [variant.sku for variant in restored]
    if removed and kept and entry.staged.master_variant.sku in removing:
        actions.append(ChangeMasterVariant(kept[0]))
    actions.extend(RemoveVariant(sku) for sku in removed)
    if publish:
        actions.append(Publish())
    return actions


def remaining_staged_skus(entry: CatalogEntry, skus: Collection[Sku]) -> list[Sku]:
    removing = set(skus)
    return [sku for sku in entry.staged_skus if sku not in removing]


def published_only_variants(entry: CatalogEntry, skus: Collection[Sku] = ()) -> list[Variant]:
    """Variants held only in ``entry``'s published data, excluding ``skus``."""

    if entry.current is None:
        return []
    skipped = set(entry.staged_skus).union(skus)
    return [variant.clone() for variant in entry.current.all_variants if variant.sku not in skipped]


def attach_actions(
    entry: CatalogEntry,
    variants: Iterable[Variant],
    master_sku: Sku,
) -> list[UpdateAction]:
    """Add the ``variants`` missing from ``entry`` and make ``master_sku`` the master."""

    present = set(entry.staged_skus)
    actions: list[UpdateAction] = [
        AddVariant.from_variant(variant) for variant in variants if variant.sku not in present
    ]
    if entry.staged.master_variant.sku != master_sku:
        actions.append(ChangeMasterVariant(master_sku))
    return actions


def product_type_actions(entry: CatalogEntry, product_type_id: ProductTypeId) -> list[UpdateAction]:
    if entry.product_type_id == product_type_id:
        return []
    return [ChangeProductType(product_type_id)]


def slug_actions(entry: CatalogEntry, slug: Mapping[str, str]) -> list[UpdateAction]:
    if not slug or entry.staged.slug == slug:
        return []
    return [ChangeSlug(dict(slug))]


def rename_slug_actions(
    entry: CatalogEntry,
    slug: Mapping[str, str],
    *,
    anonymizer: Anonymizer,
) -> list[UpdateAction]:
    """Move ``entry`` off ``slug`` in both its staged and published data."""

    actions: list[UpdateAction] = []
    if shares_localized_value(slug, entry.staged.slug):
        actions.append(ChangeSlug(anonymizer.slug(entry.staged.slug)))
    if entry.current is not None and shares_localized_value(slug, entry.current.slug):
        actions.extend(AddVariant.from_variant(v) for v in published_only_variants(entry))
        actions.append(Publish())
    return actions


def conflicts_with_slug(entry: CatalogEntry, slug: Mapping[str, str]) -> bool:
    return any(shares_localized_value(slug, candidate) for candidate in entry.slugs())


def draft_variants(draft: Draft) -> list[Variant]:
    return [variant.clone() for variant in draft.all_variants]


__all__ = [
    "ActionBuilder",
    "CatalogMutator",
    "attach_actions",
    "conflicts_with_slug",
    "draft_variants",
    "product_type_actions",
    "published_only_variants",
    "remaining_staged_skus",
    "removal_actions",
    "rename_slug_actions",
    "slug_actions",
]
