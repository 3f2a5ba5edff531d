"""Variant reassignment core.

Flow for one ``ReassignmentEngine.execute`` call:

1. replay transactions left in the recovery ledger by an interrupted run
2. load the catalog entries touched by the drafts and index them by SKU
3. drop drafts that already match one entry exactly
4. per remaining draft: pick the target entry, compute variant moves, open a
   transaction, run the mutation steps and close the transaction

Modules:
- ``matching``: target selection and the reassignment-needed check
- ``variants``: variant-set diffing and backup-draft builders
- ``attributes``: same-for-all validation and attribute retention
- ``anonymize``: slug and key anonymization for backup entries
- ``mutations``: action builders and conflict-retrying updates
- ``records`` / ``transactions``: ledger payloads and the transaction log
- ``orchestrator`` / ``engine``: the per-draft protocol and the batch driver
"""

from __future__ import annotations

from .anonymize import ANONYMIZED_SLUG_MARKER, Anonymizer, is_anonymized
from .engine import (
    ReassignmentEngine,
    ReassignmentFailure,
    ReassignmentResult,
    ReassignmentStatistics,
)
from .matching import (
    build_sku_index,
    is_reassignment_needed,
    select_matching_entries,
    select_target_entry,
)
from .orchestrator import (
    ReassignmentOptions,
    ReassignmentOrchestrator,
    ReassignmentOutcome,
    ReassignmentPlan,
)
from .transactions import TransactionLog
from .variants import VariantMoves, build_anonymized_backup_draft, compute_variant_moves

__all__ = [
    "ANONYMIZED_SLUG_MARKER",
    "Anonymizer",
    "ReassignmentEngine",
    "ReassignmentFailure",
    "ReassignmentOptions",
    "ReassignmentOrchestrator",
    "ReassignmentOutcome",
    "ReassignmentPlan",
    "ReassignmentResult",
    "ReassignmentStatistics",
    "TransactionLog",
    "VariantMoves",
    "build_anonymized_backup_draft",
    "build_sku_index",
    "compute_variant_moves",
    "is_anonymized",
    "is_reassignment_needed",
    "select_matching_entries",
    "select_target_entry",
]
