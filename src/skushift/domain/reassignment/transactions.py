"""Thin adapter turning the raw recovery ledger into typed transaction records."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from skushift.domain.errors import LedgerError
from skushift.domain.model import EntrySnapshot, TransactionRecord

from .anonymize import utcnow
from .records import (
    TRANSACTION_KIND,
    SnapshotModel,
    TransactionModel,
    snapshot_key,
    transaction_key,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from skushift.domain.model import CatalogEntry, Draft, Variant
    from skushift.domain.ports import LedgerRecord, RecoveryLedger

log = getLogger(__name__)


class TransactionLog:
    """Open, list and close reassignment transactions stored in a ledger."""

    def __init__(
        self,
        ledger: RecoveryLedger,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._ledger = ledger
        self._clock = clock

    def open(
        self,
        *,
        draft: Draft,
        target: CatalogEntry,
        backup_variants: Sequence[Variant] = (),
        backup_draft: Draft | None = None,
    ) -> TransactionRecord:
        created_at = self._clock()
        record = TransactionRecord(
            key=transaction_key(target.id, created_at),
            new_draft=draft,
            created_at=created_at,
            backup_variants=[variant.clone() for variant in backup_variants],
            backup_draft=backup_draft,
            target_id=target.id,
        )
        payload = TransactionModel.from_domain(record).model_dump(mode="json")
        self._ledger.create(record.key, payload)
        log.info("Opened transaction %s for draft %s", record.key, draft.identity)
        return record

    def pending(self) -> list[TransactionRecord]:
        """Return stored transactions, oldest first. Snapshots are not listed."""

        records: list[TransactionRecord] = []
        for raw in self._ledger.fetch_all():
            if raw.payload.get("kind") != TRANSACTION_KIND:
                continue
            record = self._decode_transaction(raw)
            if record is not None:
                records.append(record)
        records.sort(key=lambda record: (record.created_at, record.key))
        return records

    def close(self, key: str) -> None:
        self.discard_snapshot(key)
        self._ledger.delete(key)
        log.info("Closed transaction %s", key)

    def save_snapshot(self, key: str, entry: CatalogEntry) -> EntrySnapshot:
        """Store ``entry`` under the snapshot key of transaction ``key``.

        An existing snapshot wins: it holds the entry as it was before the first
        attempt, which is what a replay has to restore.
        """

        existing = self.load_snapshot(key)
        if existing is not None:
            return existing
        snapshot = EntrySnapshot(key=snapshot_key(key), entry=entry, created_at=self._clock())
        payload = SnapshotModel.from_domain(snapshot).model_dump(mode="json")
        self._ledger.create(snapshot.key, payload)
        log.debug("Saved snapshot of entry %s as %s", entry.id, snapshot.key)
        return snapshot

    def load_snapshot(self, key: str) -> EntrySnapshot | None:
        raw = self._ledger.fetch(snapshot_key(key))
        if raw is None:
            return None
        try:
            return SnapshotModel.model_validate(raw.payload).to_domain(raw.key)
        except ValidationError as exc:
            raise LedgerError(f"Ledger record {raw.key} is not a valid snapshot") from exc

    def discard_snapshot(self, key: str) -> None:
        if self._ledger.fetch(snapshot_key(key)) is not None:
            self._ledger.delete(snapshot_key(key))

    @staticmethod
    def _decode_transaction(raw: LedgerRecord) -> TransactionRecord | None:
        try:
            return TransactionModel.model_validate(raw.payload).to_domain(raw.key)
        except ValidationError:
            log.exception("Skipping unreadable transaction record %s", raw.key)
            return None


__all__ = ["TransactionLog"]
