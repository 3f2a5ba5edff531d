from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from skushift.domain.errors import InvalidDraftError, SameForAllConflictError
from skushift.domain.model import ChangeSlug
from skushift.domain.reassignment import (
    ReassignmentEngine,
    ReassignmentOptions,
    is_anonymized,
)
from tests.helpers.catalog import make_draft, make_entry
from tests.support.catalog import SimulatedCrashError

if TYPE_CHECKING:
    from skushift.domain.reassignment import Anonymizer
    from tests.support.catalog import InMemoryCatalogGateway, InMemoryRecoveryLedger


def _assert_single_owner(gateway: InMemoryCatalogGateway) -> None:
    shared = {sku: owners for sku, owners in gateway.sku_owners().items() if len(owners) > 1}
    assert shared == {}


def _backup_entries(gateway: InMemoryCatalogGateway) -> list[str]:
    return [
        entry_id for entry_id, entry in gateway.entries.items() if is_anonymized(entry.staged.slug)
    ]


def test_draft_pulls_variants_from_two_entries(
    gateway: InMemoryCatalogGateway, engine: ReassignmentEngine
) -> None:
    gateway.add(make_entry("e1", "1", "2"))
    gateway.add(make_entry("e2", "3", "4"))

    result = engine.execute([make_draft("1", "3")])

    assert result.succeeded
    assert result.processed_count == 1
    assert gateway.get("e1").staged_skus == ["1", "3"]
    assert gateway.get("e2").staged_skus == ["4"]
    (backup_id,) = _backup_entries(gateway)
    assert gateway.get(backup_id).staged_skus == ["2"]
    assert result.statistics.backup_entries_created == 1
    _assert_single_owner(gateway)


def test_draft_shrinking_an_entry_keeps_displaced_variants(
    gateway: InMemoryCatalogGateway, engine: ReassignmentEngine
) -> None:
    gateway.add(make_entry("e1", "1", "2", "3"))

    result = engine.execute([make_draft("1")])

    assert result.succeeded
    assert gateway.get("e1").staged_skus == ["1"]
    (backup_id,) = _backup_entries(gateway)
    backup = gateway.get(backup_id)
    assert backup.staged_skus == ["2", "3"]
    assert backup.key is not None
    assert backup.key.startswith("entry-e1-")


def test_matching_drafts_cause_no_mutation(
    gateway: InMemoryCatalogGateway, engine: ReassignmentEngine
) -> None:
    gateway.add(make_entry("e1", "1", "2"))
    gateway.add(make_entry("e2", "3"))

    result = engine.execute([make_draft("2", "1"), make_draft("3"), make_draft("new")])

    assert result.processed_count == 0
    assert result.skipped_count == 3
    assert gateway.mutations == []


def test_second_execution_is_a_no_op(
    gateway: InMemoryCatalogGateway, engine: ReassignmentEngine
) -> None:
    gateway.add(make_entry("e1", "1", "2"))
    gateway.add(make_entry("e2", "3", "4"))
    drafts = [make_draft("1", "3")]
    engine.execute(drafts)
    mutations = list(gateway.mutations)

    result = engine.execute(drafts)

    assert result.skipped_count == 1
    assert gateway.mutations == mutations


def test_product_type_change(gateway: InMemoryCatalogGateway, engine: ReassignmentEngine) -> None:
    gateway.add(make_entry("e1", "1", "2", product_type="pt1"))

    result = engine.execute([make_draft("1", "2", product_type="pt2")])

    assert result.statistics.product_type_changes == 1
    assert gateway.get("e1").product_type_id == "pt2"
    assert engine.pending_transactions() == []


def test_conflicting_slug_is_renamed(
    gateway: InMemoryCatalogGateway, engine: ReassignmentEngine
) -> None:
    gateway.add(make_entry("e1", "1", "2"))
    gateway.add(make_entry("e3", "9", slug={"en": "shared"}, current_skus=["9"]))

    result = engine.execute([make_draft("1", slug={"en": "shared"})])

    assert result.statistics.slug_renames == 1
    assert gateway.get("e1").staged.slug == {"en": "shared"}
    renamed = gateway.get("e3")
    assert is_anonymized(renamed.staged.slug)
    assert renamed.staged.slug["en"].startswith("shared_")
    assert renamed.current is not None
    assert renamed.current.slug == renamed.staged.slug


def test_sku_only_in_published_data_is_flushed(
    gateway: InMemoryCatalogGateway, engine: ReassignmentEngine
) -> None:
    gateway.add(make_entry("e1", "1"))
    gateway.add(make_entry("e2", "6", current_skus=["6", "5"]))

    result = engine.execute([make_draft("1", "5")])

    assert result.succeeded
    assert gateway.get("e1").staged_skus == ["1", "5"]
    assert gateway.get("e2").skus == ["6"]
    _assert_single_owner(gateway)


def test_emptied_donor_is_deleted(
    gateway: InMemoryCatalogGateway, engine: ReassignmentEngine
) -> None:
    gateway.add(make_entry("e1", "1"))
    gateway.add(make_entry("e2", "2"))

    result = engine.execute([make_draft("1", "2")])

    assert result.statistics.donor_entries_deleted == 1
    assert gateway.fetch_by_id("e2") is None
    assert gateway.get("e1").staged_skus == ["1", "2"]


def test_donor_keeps_variants_it_only_publishes(
    gateway: InMemoryCatalogGateway, engine: ReassignmentEngine
) -> None:
    gateway.add(make_entry("e1", "1"))
    gateway.add(make_entry("e2", "3", current_skus=["3", "4"]))

    result = engine.execute([make_draft("1", "3")])

    assert result.succeeded
    assert result.statistics.donor_entries_deleted == 0
    assert gateway.get("e1").staged_skus == ["1", "3"]
    donor = gateway.get("e2")
    assert donor.staged_skus == ["4"]
    assert donor.current_skus == ["4"]
    assert set(gateway.sku_owners()) == {"1", "3", "4"}
    _assert_single_owner(gateway)


def test_draft_without_slug_keeps_the_target_slug(
    gateway: InMemoryCatalogGateway, engine: ReassignmentEngine
) -> None:
    gateway.add(make_entry("e1", "1", "2", "3"))

    result = engine.execute([make_draft("1", slug={})])

    assert result.succeeded
    target = gateway.get("e1")
    assert target.staged_skus == ["1"]
    assert target.staged.slug == {"en": "entry-e1"}
    assert engine.pending_transactions() == []


def test_same_for_all_conflict_is_reported(
    gateway: InMemoryCatalogGateway,
    ledger: InMemoryRecoveryLedger,
    anonymizer: Anonymizer,
) -> None:
    gateway.add(make_entry("e1", "1"))
    gateway.add(make_entry("e2", "2"))
    engine = ReassignmentEngine(
        gateway,
        ledger,
        same_for_all=lambda product_type: frozenset({"color"}),
        anonymizer=anonymizer,
    )
    draft = make_draft("1", "2", attributes={"1": {"color": "red"}, "2": {"color": "blue"}})

    result = engine.execute([draft])

    (failure,) = result.failures
    assert isinstance(failure.error, SameForAllConflictError)
    assert failure.identity == "product-1"
    assert gateway.mutations == []


def test_blacklisted_attributes_are_stripped(
    gateway: InMemoryCatalogGateway,
    ledger: InMemoryRecoveryLedger,
    anonymizer: Anonymizer,
) -> None:
    gateway.add(make_entry("e1", "1"))
    gateway.add(make_entry("e2", "2"))
    engine = ReassignmentEngine(
        gateway,
        ledger,
        options=ReassignmentOptions(blacklist=frozenset({"color"})),
        same_for_all=lambda product_type: frozenset({"color"}),
        anonymizer=anonymizer,
    )
    draft = make_draft(
        "1", "2", attributes={"1": {"color": "red"}, "2": {"color": "blue", "size": "L"}}
    )

    result = engine.execute([draft])

    assert result.succeeded
    (moved,) = gateway.get("e1").staged.variants
    assert moved.attributes == {"size": "L"}


def test_retained_attributes_survive_the_move(
    gateway: InMemoryCatalogGateway,
    ledger: InMemoryRecoveryLedger,
    anonymizer: Anonymizer,
) -> None:
    gateway.add(make_entry("e1", "1"))
    gateway.add(make_entry("e2", "2", "3", attributes={"2": {"size": "M"}}))
    engine = ReassignmentEngine(
        gateway,
        ledger,
        options=ReassignmentOptions(retain_existing_attributes=("size",)),
        anonymizer=anonymizer,
    )

    engine.execute([make_draft("1", "2", attributes={"2": {"size": "L", "color": "red"}})])

    (moved,) = gateway.get("e1").staged.variants
    assert moved.attributes == {"size": "M", "color": "red"}


def test_failures_do_not_stop_the_batch(
    gateway: InMemoryCatalogGateway, engine: ReassignmentEngine
) -> None:
    gateway.add(make_entry("e1", "1", "2"))
    gateway.add(make_entry("e2", "3", "4"))

    result = engine.execute([make_draft("3", "3"), make_draft("1")])

    (failure,) = result.failures
    assert isinstance(failure.error, InvalidDraftError)
    assert result.processed_count == 1
    assert not result.succeeded
    assert gateway.get("e2").staged_skus == ["3", "4"]


def test_existing_entries_are_refreshed_before_use(
    gateway: InMemoryCatalogGateway, engine: ReassignmentEngine
) -> None:
    stale = gateway.add(make_entry("e1", "1", "2"))
    gateway.update(stale, [ChangeSlug({"en": "renamed"})])

    result = engine.execute([make_draft("1")], existing_entries=[stale])

    assert result.succeeded
    assert gateway.get("e1").staged_skus == ["1"]


@pytest.mark.parametrize("crash_after", range(5))
def test_interrupted_run_is_completed_by_replay(
    gateway: InMemoryCatalogGateway,
    ledger: InMemoryRecoveryLedger,
    engine: ReassignmentEngine,
    crash_after: int,
) -> None:
    gateway.add(make_entry("e1", "1", "2"))
    gateway.add(make_entry("e2", "3", "4"))
    drafts = [make_draft("1", "3")]
    gateway.crash_after = crash_after

    crashed = engine.execute(drafts)

    (failure,) = crashed.failures
    assert isinstance(failure.error, SimulatedCrashError)
    assert len(engine.pending_transactions()) == 1

    result = engine.execute(drafts)

    assert result.succeeded
    assert result.statistics.replayed == 1
    assert result.skipped_count == 1
    assert gateway.get("e1").staged_skus == ["1", "3"]
    assert gateway.get("e1").staged.slug == {"en": "product-1"}
    assert gateway.get("e2").staged_skus == ["4"]
    (backup_id,) = _backup_entries(gateway)
    assert gateway.get(backup_id).staged_skus == ["2"]
    assert ledger.records == {}
    _assert_single_owner(gateway)


def test_replay_pending_without_records_is_empty(engine: ReassignmentEngine) -> None:
    result = engine.replay_pending()

    assert result.statistics.replayed == 0
    assert result.failures == []
