"""SQLAlchemy adapter package for the recovery ledger."""

from __future__ import annotations

from .ledger import SqlAlchemyRecoveryLedger
from .mappings import create_all_tables, metadata, reassignment_transaction_table
from .repositories import SqlAlchemyLedgerRecordRepository
from .unit_of_work import (
    SqlAlchemyLedgerUnitOfWork,
    StartupError,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyLedgerRecordRepository",
    "SqlAlchemyLedgerUnitOfWork",
    "SqlAlchemyRecoveryLedger",
    "StartupError",
    "create_all_tables",
    "is_started",
    "metadata",
    "reassignment_transaction_table",
    "shutdown",
    "startup",
]
