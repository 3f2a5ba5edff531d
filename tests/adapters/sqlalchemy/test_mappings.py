from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import inspect

from skushift.adapters.sqlalchemy import create_all_tables

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def test_create_all_tables_builds_ledger_table(sqlite_engine: Engine) -> None:
    create_all_tables(sqlite_engine)

    inspector = inspect(sqlite_engine)
    columns = {column["name"] for column in inspector.get_columns("reassignment_transaction")}
    indexes = {index["name"] for index in inspector.get_indexes("reassignment_transaction")}

    assert columns == {"key", "payload", "created_at"}
    assert "ix_reassignment_transaction_created_at" in indexes

