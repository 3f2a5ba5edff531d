"""Recovery checkpoints persisted in the ledger."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from .catalog import CatalogEntry, Draft, Variant
    from .primitives import EntryId, Sku


@dataclass(slots=True, kw_only=True)
class TransactionRecord:
    """Checkpoint written before the first mutation of a draft's reassignment.

    ``backup_variants`` holds the donor variants as they looked before being
    detached; ``backup_draft`` the anonymized draft for variants displaced from
    the target. Both are replayed verbatim when a run is interrupted.
    """

    key: str
    new_draft: Draft
    created_at: datetime
    backup_variants: list[Variant] = field(default_factory=list["Variant"])
    backup_draft: Draft | None = None
    target_id: EntryId | None = None

    @property
    def skus(self) -> list[Sku]:
        """All SKUs the record may have put in motion."""
        skus = list(self.new_draft.skus)
        skus.extend(variant.sku for variant in self.backup_variants)
        if self.backup_draft is not None:
            skus.extend(self.backup_draft.skus)
        return list(dict.fromkeys(skus))


@dataclass(slots=True, kw_only=True)
class EntrySnapshot:
    """Copy of an entry taken before a product-type change."""

    key: str
    entry: CatalogEntry
    created_at: datetime
