"""Error types raised by the reassignment core and its adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from skushift.domain.model import EntryId, LocalizedString, Sku


class ReassignmentError(RuntimeError):
    """Base class for failures that abort the reassignment of one draft."""


class InvalidDraftError(ReassignmentError):
    """Raised when a draft violates its own invariants."""

    def __init__(self, message: str, *, skus: Iterable[Sku] = ()) -> None:
        super().__init__(message)
        self.skus = tuple(skus)


class CatalogGatewayError(ReassignmentError):
    """Raised when the remote catalog rejects or fails a call."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class VersionConflictError(CatalogGatewayError):
    """Raised when an update or delete was issued against a stale version."""

    def __init__(self, entry_id: EntryId, version: int) -> None:
        super().__init__(
            f"Entry {entry_id} was modified concurrently (version {version} is stale)",
            status_code=409,
        )
        self.entry_id = entry_id
        self.version = version


class EntryNotFoundError(CatalogGatewayError):
    """Raised when an entry expected to exist is gone."""

    def __init__(self, entry_id: EntryId) -> None:
        super().__init__(f"Entry {entry_id} does not exist", status_code=404)
        self.entry_id = entry_id


class SlugCollisionError(ReassignmentError):
    """Raised when other entries still hold the draft's slug after renaming them."""

    def __init__(self, slug: LocalizedString, entry_ids: Iterable[EntryId]) -> None:
        self.slug = dict(slug)
        self.entry_ids = tuple(entry_ids)
        super().__init__(
            f"Slug {self.slug} is still used by entries: {', '.join(self.entry_ids)}"
        )


class SameForAllConflictError(ReassignmentError):
    """Raised when a same-for-all attribute has differing values within one draft."""

    def __init__(self, attribute: str, values: Iterable[object]) -> None:
        self.attribute = attribute
        self.values = tuple(values)
        super().__init__(
            f"Same-for-all attribute {attribute!r} has differing values: {self.values!r}"
        )


class LedgerError(ReassignmentError):
    """Raised when the recovery ledger cannot store or load a record."""
