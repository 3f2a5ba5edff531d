"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, insert, select

from skushift.domain.ports import LedgerRecord

from .mappings import reassignment_transaction_table

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

    from sqlalchemy import Row
    from sqlalchemy.orm import Session

_table = reassignment_transaction_table


def _to_record(row: Row[tuple[str, dict[str, object], datetime]]) -> LedgerRecord:
    key, payload, created_at = row
    return LedgerRecord(key=key, payload=dict(payload), created_at=created_at)


class SqlAlchemyLedgerRecordRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, key: str, payload: Mapping[str, object], created_at: datetime) -> LedgerRecord:
        self.session.execute(
            insert(_table).values(key=key, payload=dict(payload), created_at=created_at)
        )
        return LedgerRecord(key=key, payload=dict(payload), created_at=created_at)

    def get(self, key: str) -> LedgerRecord | None:
        stmt = select(_table.c.key, _table.c.payload, _table.c.created_at).where(
            _table.c.key == key
        )
        row = self.session.execute(stmt).one_or_none()
        return _to_record(row) if row is not None else None

    def list_all(self) -> list[LedgerRecord]:
        stmt = select(_table.c.key, _table.c.payload, _table.c.created_at).order_by(
            _table.c.created_at, _table.c.key
        )
        return [_to_record(row) for row in self.session.execute(stmt)]

    def remove(self, key: str) -> bool:
        result = self.session.execute(delete(_table).where(_table.c.key == key))
        return bool(result.rowcount)
