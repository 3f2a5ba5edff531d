"""Recovery ledger persisted in a relational database."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from skushift.domain.errors import LedgerError
from skushift.domain.reassignment.anonymize import utcnow

from .unit_of_work import SqlAlchemyLedgerUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

    from skushift.domain.ports import LedgerRecord, RecoveryLedger

log = getLogger(__name__)


@dataclass(slots=True)
class SqlAlchemyRecoveryLedger:
    """``RecoveryLedger`` committing every operation in its own unit of work.

    Requires ``unit_of_work.startup()`` to have run.
    """

    unit_of_work_factory: Callable[[], SqlAlchemyLedgerUnitOfWork] = field(
        default=SqlAlchemyLedgerUnitOfWork
    )
    clock: Callable[[], datetime] = field(default=utcnow)

    def create(self, key: str, payload: Mapping[str, object]) -> LedgerRecord:
        try:
            with self.unit_of_work_factory() as uow:
                record = uow.repositories.records.add(key, payload, self.clock())
                uow.commit()
        except IntegrityError as exc:
            raise LedgerError(f"Ledger record {key} already exists") from exc
        except SQLAlchemyError as exc:
            raise LedgerError(f"Could not store ledger record {key}: {exc}") from exc
        log.debug("Stored ledger record %s", key)
        return record

    def fetch(self, key: str) -> LedgerRecord | None:
        try:
            with self.unit_of_work_factory() as uow:
                return uow.repositories.records.get(key)
        except SQLAlchemyError as exc:
            raise LedgerError(f"Could not load ledger record {key}: {exc}") from exc

    def fetch_all(self) -> list[LedgerRecord]:
        try:
            with self.unit_of_work_factory() as uow:
                return uow.repositories.records.list_all()
        except SQLAlchemyError as exc:
            raise LedgerError(f"Could not list ledger records: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            with self.unit_of_work_factory() as uow:
                removed = uow.repositories.records.remove(key)
                uow.commit()
        except SQLAlchemyError as exc:
            raise LedgerError(f"Could not delete ledger record {key}: {exc}") from exc
        if removed:
            log.debug("Deleted ledger record %s", key)


if TYPE_CHECKING:
    _ledger_check: RecoveryLedger = SqlAlchemyRecoveryLedger()
