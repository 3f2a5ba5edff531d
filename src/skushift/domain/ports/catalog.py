"""Port for the remote catalog store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from skushift.domain.model import CatalogEntry, Draft, EntryId, Sku, UpdateAction


@runtime_checkable
class CatalogGateway(Protocol):
    """Remote CRUD and query operations over catalog entries.

    ``update`` and ``delete`` are version-checked: implementations raise
    ``VersionConflictError`` when ``entry.version`` is stale. Retrying transient
    transport failures is the implementation's job, not the caller's.
    """

    def find_by_skus(self, skus: Iterable[Sku]) -> list[CatalogEntry]: ...

    def find_by_slug(self, slug: Mapping[str, str]) -> list[CatalogEntry]: ...

    def fetch_by_id(self, entry_id: EntryId) -> CatalogEntry | None: ...

    def create(self, draft: Draft) -> CatalogEntry: ...

    def update(self, entry: CatalogEntry, actions: Sequence[UpdateAction]) -> CatalogEntry: ...

    def delete(self, entry: CatalogEntry) -> None: ...


__all__ = ["CatalogGateway"]
