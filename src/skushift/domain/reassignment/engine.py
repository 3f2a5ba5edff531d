"""Batch entry point: replay interrupted work, then reassign each draft."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from skushift.domain.errors import InvalidDraftError, ReassignmentError
from skushift.domain.ports import no_same_for_all_attributes

from .anonymize import utcnow
from .matching import build_sku_index, is_reassignment_needed, select_matching_entries
from .orchestrator import ReassignmentOrchestrator
from .transactions import TransactionLog

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from skushift.domain.model import CatalogEntry, Draft, TransactionRecord
    from skushift.domain.ports import CatalogGateway, RecoveryLedger, SameForAllLookup

    from .anonymize import Anonymizer
    from .orchestrator import ReassignmentOptions, ReassignmentOutcome

log = getLogger(__name__)


@dataclass(slots=True)
class ReassignmentStatistics:
    replayed: int = 0
    backup_entries_created: int = 0
    product_type_changes: int = 0
    slug_renames: int = 0
    donor_entries_deleted: int = 0

    def record(self, outcome: ReassignmentOutcome) -> None:
        if outcome.backup_entry_id is not None:
            self.backup_entries_created += 1
        if outcome.product_type_changed:
            self.product_type_changes += 1
        self.slug_renames += len(outcome.renamed_entry_ids)
        self.donor_entries_deleted += len(outcome.deleted_entry_ids)


@dataclass(slots=True, frozen=True)
class ReassignmentFailure:
    draft: Draft
    error: ReassignmentError

    @property
    def identity(self) -> str:
        return self.draft.identity


@dataclass(slots=True)
class ReassignmentResult:
    """Summary of one ``execute`` or ``replay_pending`` call."""

    processed_count: int = 0
    skipped_count: int = 0
    failures: list[ReassignmentFailure] = field(default_factory=list["ReassignmentFailure"])
    statistics: ReassignmentStatistics = field(default_factory=ReassignmentStatistics)

    @property
    def succeeded(self) -> bool:
        return not self.failures


class ReassignmentEngine:
    """Reconcile drafts against the catalog so every SKU lives in one entry.

    Drafts are handled strictly one after another; a failing draft is reported
    in the result and never stops the batch.
    """

    def __init__(
        self,
        gateway: CatalogGateway,
        ledger: RecoveryLedger,
        *,
        options: ReassignmentOptions | None = None,
        same_for_all: SameForAllLookup = no_same_for_all_attributes,
        anonymizer: Anonymizer | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._gateway = gateway
        self._transactions = TransactionLog(ledger, clock=clock)
        self._orchestrator = ReassignmentOrchestrator(
            gateway,
            self._transactions,
            options=options,
            same_for_all=same_for_all,
            anonymizer=anonymizer,
        )

    def pending_transactions(self) -> list[TransactionRecord]:
        return self._transactions.pending()

    def replay_pending(self, result: ReassignmentResult | None = None) -> ReassignmentResult:
        """Resume every transaction left behind by an interrupted run, oldest first."""

        result = result if result is not None else ReassignmentResult()
        pending = self._transactions.pending()
        if pending:
            log.info("Replaying %s pending transaction(s)", len(pending))
        for record in pending:
            try:
                outcome = self._orchestrator.resume(record)
            except ReassignmentError as exc:
                log.exception("Replay of transaction %s failed", record.key)
                result.failures.append(ReassignmentFailure(record.new_draft, exc))
                continue
            result.statistics.replayed += 1
            result.statistics.record(outcome)
        return result

    def execute(
        self,
        drafts: Iterable[Draft],
        existing_entries: Iterable[CatalogEntry] | None = None,
    ) -> ReassignmentResult:
        result = self.replay_pending()

        valid: list[Draft] = []
        for draft in drafts:
            duplicates = draft.duplicate_skus()
            if duplicates:
                error = InvalidDraftError(
                    f"Draft {draft.identity} lists SKUs more than once: {', '.join(duplicates)}",
                    skus=duplicates,
                )
                log.error("%s", error)
                result.failures.append(ReassignmentFailure(draft, error))
                continue
            valid.append(draft)

        index = build_sku_index(self._load_entries(valid, existing_entries))
        candidates = [draft for draft in valid if is_reassignment_needed(draft, index)]
        result.skipped_count += len(valid) - len(candidates)
        log.info("%s of %s draft(s) need reassignment", len(candidates), len(valid))

        for draft in candidates:
            try:
                entries = self._gateway.find_by_skus(draft.skus)
                if not is_reassignment_needed(draft, build_sku_index(entries)):
                    log.info("Draft %s no longer needs reassignment", draft.identity)
                    result.skipped_count += 1
                    continue
                outcome = self._orchestrator.process(
                    draft, select_matching_entries(draft, entries)
                )
            except ReassignmentError as exc:
                log.exception("Reassignment of draft %s failed", draft.identity)
                result.failures.append(ReassignmentFailure(draft, exc))
                continue
            result.processed_count += 1
            result.statistics.record(outcome)

        log.info(
            "Reassignment finished: %s processed, %s skipped, %s failed",
            result.processed_count,
            result.skipped_count,
            len(result.failures),
        )
        return result

    def _load_entries(
        self,
        drafts: Iterable[Draft],
        existing_entries: Iterable[CatalogEntry] | None,
    ) -> list[CatalogEntry]:
        if existing_entries is not None:
            refreshed: list[CatalogEntry] = []
            for entry in existing_entries:
                fresh = self._gateway.fetch_by_id(entry.id)
                if fresh is not None:
                    refreshed.append(fresh)
            return refreshed

        skus = list(dict.fromkeys(sku for draft in drafts for sku in draft.skus))
        if not skus:
            return []
        return self._gateway.find_by_skus(skus)


__all__ = [
    "ReassignmentEngine",
    "ReassignmentFailure",
    "ReassignmentResult",
    "ReassignmentStatistics",
]
