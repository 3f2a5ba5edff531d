"""Domain port definitions for adapters."""

from __future__ import annotations

from .catalog import CatalogGateway
from .ledger import LedgerRecord, RecoveryLedger
from .rules import SameForAllLookup, no_same_for_all_attributes

__all__ = [
    "CatalogGateway",
    "LedgerRecord",
    "RecoveryLedger",
    "SameForAllLookup",
    "no_same_for_all_attributes",
]
