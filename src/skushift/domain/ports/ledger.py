"""Port for the durable key-value store holding recovery records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime


@dataclass(slots=True, frozen=True)
class LedgerRecord:
    """Raw record as stored by a ledger backend."""

    key: str
    payload: dict[str, object] = field(default_factory=dict[str, object])
    created_at: datetime | None = None


@runtime_checkable
class RecoveryLedger(Protocol):
    """Durable store for pending-transaction records keyed by an opaque key."""

    def create(self, key: str, payload: Mapping[str, object]) -> LedgerRecord: ...

    def fetch(self, key: str) -> LedgerRecord | None: ...

    def fetch_all(self) -> list[LedgerRecord]: ...

    def delete(self, key: str) -> None: ...


__all__ = ["LedgerRecord", "RecoveryLedger"]
