"""Per-draft reassignment protocol.

One draft moves through these steps, each an idempotent catalog mutation:

    Start -> TypeReconcile -> DetachFromDonors -> AttachToTarget
          -> DisplaceFromTarget (only with a backup draft)
          -> EnsureSlugUniqueness -> Committed

A transaction record is written to the ledger before the first step and deleted
after the last one, so an interrupted run can be resumed with the same backup
data. Only this module opens and closes transaction records.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from logging import getLogger
from typing import TYPE_CHECKING

from skushift.domain.errors import EntryNotFoundError, InvalidDraftError, SlugCollisionError
from skushift.domain.ports import no_same_for_all_attributes

from .anonymize import Anonymizer
from .attributes import retain_existing_attributes, strip_blacklisted, validate_same_for_all
from .matching import select_matching_entries, select_target_entry
from .mutations import (
    CatalogMutator,
    attach_actions,
    conflicts_with_slug,
    draft_variants,
    product_type_actions,
    published_only_variants,
    remaining_staged_skus,
    removal_actions,
    rename_slug_actions,
    slug_actions,
)
from .variants import (
    VariantMoves,
    build_anonymized_backup_draft,
    compute_variant_moves,
    draft_from_entry,
    extend_draft,
    restrict_draft,
)

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Sequence

    from skushift.domain.model import (
        CatalogEntry,
        Draft,
        EntryId,
        Sku,
        TransactionRecord,
        Variant,
    )
    from skushift.domain.ports import CatalogGateway, SameForAllLookup

    from .transactions import TransactionLog

log = getLogger(__name__)


@dataclass(slots=True, frozen=True, kw_only=True)
class ReassignmentOptions:
    """Tuning knobs for the reassignment protocol.

    Attributes:
        blacklist: same-for-all attributes that are dropped from incoming
            variants instead of rejecting the draft.
        retain_existing_attributes: attribute names (or the variant fields
            ``key``, ``prices``, ``images``, ``attributes``) whose pre-move
            values are kept when a variant changes entry.
        detach_concurrency: worker cap for the parallel donor updates.
        max_conflict_retries: refetch-and-retry budget per mutation.
    """

    blacklist: frozenset[str] = frozenset()
    retain_existing_attributes: tuple[str, ...] = ()
    detach_concurrency: int = 3
    max_conflict_retries: int = 3


@dataclass(slots=True, frozen=True)
class ReassignmentPlan:
    """Everything decided about a draft before the first mutation."""

    draft: Draft
    target: CatalogEntry
    matching_entries: tuple[CatalogEntry, ...]
    moves: VariantMoves
    backup_draft: Draft | None = None


@dataclass(slots=True, kw_only=True)
class ReassignmentOutcome:
    """What one committed reassignment changed."""

    transaction_key: str
    target_id: EntryId
    product_type_changed: bool = False
    recreated_target: bool = False
    backup_entry_id: EntryId | None = None
    renamed_entry_ids: list[EntryId] = field(default_factory=list["EntryId"])
    deleted_entry_ids: list[EntryId] = field(default_factory=list["EntryId"])


def is_same_entry(left: CatalogEntry, right: CatalogEntry) -> bool:
    """Return whether both values describe the same catalog entry.

    A product-type change may be implemented by the store as delete and
    recreate, so an entry that kept its staged SKUs counts as the same one
    even with a new id.
    """

    if left.id == right.id:
        return True
    return set(left.staged_skus) == set(right.staged_skus)


class ReassignmentOrchestrator:
    def __init__(
        self,
        gateway: CatalogGateway,
        transactions: TransactionLog,
        *,
        options: ReassignmentOptions | None = None,
        same_for_all: SameForAllLookup = no_same_for_all_attributes,
        anonymizer: Anonymizer | None = None,
    ) -> None:
        self._gateway = gateway
        self._transactions = transactions
        self._options = options or ReassignmentOptions()
        self._same_for_all = same_for_all
        self._anonymizer = anonymizer or Anonymizer()
        self._mutator = CatalogMutator(
            gateway, max_conflict_retries=self._options.max_conflict_retries
        )

    @property
    def options(self) -> ReassignmentOptions:
        return self._options

    def validate(self, draft: Draft) -> None:
        """Reject drafts that must not cause any mutation."""

        duplicates = draft.duplicate_skus()
        if duplicates:
            raise InvalidDraftError(
                f"Draft {draft.identity} lists SKUs more than once: {', '.join(duplicates)}",
                skus=duplicates,
            )
        validate_same_for_all(
            draft,
            self._same_for_all(draft.product_type_id),
            blacklist=self._options.blacklist,
        )

    def plan(self, draft: Draft, matching_entries: Sequence[CatalogEntry]) -> ReassignmentPlan:
        target = select_target_entry(draft, matching_entries)
        moves = compute_variant_moves(draft, matching_entries, target)
        backup_draft = build_anonymized_backup_draft(
            target, moves.displaced_variants, anonymizer=self._anonymizer
        )
        return ReassignmentPlan(
            draft=draft,
            target=target,
            matching_entries=tuple(matching_entries),
            moves=moves,
            backup_draft=backup_draft,
        )

    def process(
        self, draft: Draft, matching_entries: Sequence[CatalogEntry]
    ) -> ReassignmentOutcome:
        """Reassign variants so that one entry holds exactly ``draft``'s SKUs."""

        self.validate(draft)
        plan = self.plan(draft, matching_entries)
        log.info(
            "Reassigning draft %s onto entry %s (%s donor(s), %s displaced variant(s))",
            draft.identity,
            plan.target.id,
            len(plan.moves.donor_skus_by_entry),
            len(plan.moves.displaced_variants),
        )
        record = self._transactions.open(
            draft=draft,
            target=plan.target,
            backup_variants=plan.moves.donor_variants,
            backup_draft=plan.backup_draft,
        )
        outcome = self._run(record, plan)
        self._transactions.close(record.key)
        return outcome

    def resume(self, record: TransactionRecord) -> ReassignmentOutcome:
        """Finish an interrupted reassignment from its transaction record."""

        draft = record.new_draft
        log.info("Resuming transaction %s for draft %s", record.key, draft.identity)
        entries = self._gateway.find_by_skus(record.skus)
        target, recreated = self._locate_target(record, entries)
        if recreated:
            entries = self._gateway.find_by_skus(record.skus)

        matching = select_matching_entries(draft, entries)
        moves = compute_variant_moves(draft, matching, target)
        plan = ReassignmentPlan(
            draft=draft,
            target=target,
            matching_entries=tuple(matching),
            moves=moves,
            backup_draft=self._merge_backup_draft(record, target, moves),
        )
        outcome = self._run(record, plan)
        outcome.recreated_target = recreated
        self._transactions.close(record.key)
        return outcome

    # --- Steps ---------------------------------------------------------------

    def _run(self, record: TransactionRecord, plan: ReassignmentPlan) -> ReassignmentOutcome:
        draft = plan.draft
        outcome = ReassignmentOutcome(transaction_key=record.key, target_id=plan.target.id)

        target = self._reconcile_product_type(record, draft, plan.target, outcome)
        self._detach_from_donors(plan, outcome)
        target = self._attach_to_target(draft, target, record.backup_variants)
        if plan.backup_draft is not None:
            target = self._displace_from_target(target, plan.backup_draft, outcome)
        target = self._ensure_slug_uniqueness(draft, target, outcome)

        outcome.target_id = target.id
        log.info("Committed transaction %s on entry %s", record.key, target.id)
        return outcome

    def _reconcile_product_type(
        self,
        record: TransactionRecord,
        draft: Draft,
        target: CatalogEntry,
        outcome: ReassignmentOutcome,
    ) -> CatalogEntry:
        if target.product_type_id == draft.product_type_id:
            return target

        self._transactions.save_snapshot(record.key, target)
        updated = self._mutator.update(
            target,
            lambda entry: product_type_actions(entry, draft.product_type_id),
            reason="change product type",
        )
        if updated.id != target.id and is_same_entry(target, updated):
            log.info(
                "Entry %s was replaced by %s during product-type change", target.id, updated.id
            )
        self._transactions.discard_snapshot(record.key)
        outcome.product_type_changed = True
        return updated

    def _detach_from_donors(self, plan: ReassignmentPlan, outcome: ReassignmentOutcome) -> None:
        donors = [
            (entry, plan.moves.donor_skus_by_entry[entry.id])
            for entry in plan.matching_entries
            if entry.id in plan.moves.donor_skus_by_entry
        ]
        if not donors:
            return

        workers = max(1, min(self._options.detach_concurrency, len(donors)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            deleted = list(pool.map(lambda donor: self._detach(*donor), donors))
        outcome.deleted_entry_ids.extend(
            entry.id for (entry, _), was_deleted in zip(donors, deleted, strict=True) if was_deleted
        )

    def _detach(self, donor: CatalogEntry, skus: Collection[Sku]) -> bool:
        """Detach ``skus`` from ``donor``; return whether the donor was deleted."""

        def nothing_left(entry: CatalogEntry) -> bool:
            # published-only variants keep the donor alive
            return not remaining_staged_skus(entry, skus) and not published_only_variants(
                entry, skus
            )

        if nothing_left(donor) and self._mutator.delete_if(donor, nothing_left):
            return True

        self._mutator.update(
            donor,
            lambda entry: removal_actions(entry, skus),
            reason="detach variants",
        )
        return False

    def _attach_to_target(
        self,
        draft: Draft,
        target: CatalogEntry,
        backup_variants: Iterable[Variant],
    ) -> CatalogEntry:
        previous = {variant.sku: variant for variant in backup_variants}
        incoming = retain_existing_attributes(
            draft_variants(draft), previous, self._options.retain_existing_attributes
        )
        same_for_all = self._same_for_all(draft.product_type_id)
        incoming = [
            strip_blacklisted(variant, same_for_all, blacklist=self._options.blacklist)
            for variant in incoming
        ]
        master_sku = draft.master_variant.sku
        return self._mutator.update(
            target,
            lambda entry: attach_actions(entry, incoming, master_sku),
            reason="attach variants",
        )

    def _displace_from_target(
        self,
        target: CatalogEntry,
        backup_draft: Draft,
        outcome: ReassignmentOutcome,
    ) -> CatalogEntry:
        displaced = backup_draft.skus
        target = self._mutator.update(
            target,
            lambda entry: removal_actions(entry, displaced),
            reason="displace variants",
        )

        held = {sku for entry in self._gateway.find_by_skus(displaced) for sku in entry.skus}
        backup = restrict_draft(backup_draft, [sku for sku in displaced if sku not in held])
        if backup is None:
            log.info("Backup entry for %s already exists", ", ".join(displaced))
            return target

        created = self._gateway.create(backup)
        log.info("Created backup entry %s holding %s", created.id, ", ".join(backup.skus))
        outcome.backup_entry_id = created.id
        return target

    def _ensure_slug_uniqueness(
        self,
        draft: Draft,
        target: CatalogEntry,
        outcome: ReassignmentOutcome,
    ) -> CatalogEntry:
        if not draft.slug:
            # no slug requested: the target keeps its own
            return target

        for entry in self._slug_conflicts(draft, target):
            self._mutator.update(
                entry,
                lambda fresh: rename_slug_actions(fresh, draft.slug, anonymizer=self._anonymizer),
                reason="rename conflicting slug",
            )
            outcome.renamed_entry_ids.append(entry.id)

        remaining = self._slug_conflicts(draft, target)
        if remaining:
            raise SlugCollisionError(draft.slug, [entry.id for entry in remaining])

        return self._mutator.update(
            target,
            lambda entry: slug_actions(entry, draft.slug),
            reason="set slug",
        )

    def _slug_conflicts(self, draft: Draft, target: CatalogEntry) -> list[CatalogEntry]:
        return [
            entry
            for entry in self._gateway.find_by_slug(draft.slug)
            if entry.id != target.id and conflicts_with_slug(entry, draft.slug)
        ]

    # --- Resume helpers ------------------------------------------------------

    def _locate_target(
        self,
        record: TransactionRecord,
        entries: Sequence[CatalogEntry],
    ) -> tuple[CatalogEntry, bool]:
        draft = record.new_draft
        if record.target_id is not None:
            for entry in entries:
                if entry.id == record.target_id:
                    return entry, False
            fetched = self._gateway.fetch_by_id(record.target_id)
            if fetched is not None:
                return fetched, False

        snapshot = self._transactions.load_snapshot(record.key)
        if snapshot is not None:
            for entry in entries:
                if (
                    is_same_entry(snapshot.entry, entry)
                    and entry.product_type_id == draft.product_type_id
                ):
                    log.info("Target of %s was replaced by entry %s", record.key, entry.id)
                    return entry, False

        held = {sku for entry in entries for sku in entry.skus}
        source: Draft | None = None
        if snapshot is not None:
            restored = replace(
                draft_from_entry(snapshot.entry), product_type_id=draft.product_type_id
            )
            source = restrict_draft(restored, [sku for sku in restored.skus if sku not in held])
        if source is None:
            source = restrict_draft(draft, [sku for sku in draft.skus if sku not in held])
        if source is None:
            raise EntryNotFoundError(record.target_id or record.key)

        log.warning(
            "Target entry %s of transaction %s is gone, recreating it with %s",
            record.target_id,
            record.key,
            ", ".join(source.skus),
        )
        return self._gateway.create(source), True

    def _merge_backup_draft(
        self,
        record: TransactionRecord,
        target: CatalogEntry,
        moves: VariantMoves,
    ) -> Draft | None:
        """Prefer the recorded backup draft and add any newly displaced variants."""

        if record.backup_draft is None:
            return build_anonymized_backup_draft(
                target, moves.displaced_variants, anonymizer=self._anonymizer
            )
        return extend_draft(record.backup_draft, moves.displaced_variants)


__all__ = [
    "ReassignmentOptions",
    "ReassignmentOrchestrator",
    "ReassignmentOutcome",
    "ReassignmentPlan",
    "is_same_entry",
]
