from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from skushift.adapters.sqlalchemy.unit_of_work import SqlAlchemyLedgerUnitOfWork, shutdown, startup
from skushift.domain.reassignment import (
    Anonymizer,
    ReassignmentEngine,
    ReassignmentOptions,
    ReassignmentOrchestrator,
    TransactionLog,
)
from tests.support.catalog import InMemoryCatalogGateway, InMemoryRecoveryLedger, TickingClock

os.environ.setdefault("LEDGER_DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def anonymizer(clock: TickingClock) -> Anonymizer:
    counter = iter(range(1, 10_000))
    return Anonymizer(clock=clock, suffix_factory=lambda: f"s{next(counter)}")


@pytest.fixture
def gateway() -> InMemoryCatalogGateway:
    return InMemoryCatalogGateway()


@pytest.fixture
def ledger(clock: TickingClock) -> InMemoryRecoveryLedger:
    return InMemoryRecoveryLedger(clock=clock)


@pytest.fixture
def transactions(ledger: InMemoryRecoveryLedger, clock: TickingClock) -> TransactionLog:
    return TransactionLog(ledger, clock=clock)


@pytest.fixture
def options() -> ReassignmentOptions:
    return ReassignmentOptions()


@pytest.fixture
def orchestrator(
    gateway: InMemoryCatalogGateway,
    transactions: TransactionLog,
    options: ReassignmentOptions,
    anonymizer: Anonymizer,
) -> ReassignmentOrchestrator:
    return ReassignmentOrchestrator(gateway, transactions, options=options, anonymizer=anonymizer)


@pytest.fixture
def engine(
    gateway: InMemoryCatalogGateway,
    ledger: InMemoryRecoveryLedger,
    options: ReassignmentOptions,
    anonymizer: Anonymizer,
    clock: TickingClock,
) -> ReassignmentEngine:
    return ReassignmentEngine(gateway, ledger, options=options, anonymizer=anonymizer, clock=clock)


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite+pysqlite://",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyLedgerUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyLedgerUnitOfWork:
        return SqlAlchemyLedgerUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()
