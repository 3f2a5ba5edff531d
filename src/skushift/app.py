"""Application orchestration entry points."""

from __future__ import annotations

from contextlib import contextmanager
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import TypeAdapter

from skushift.adapters.catalog_api import (
    CustomObjectLedger,
    HttpCatalogGateway,
    ProductDraftPayload,
    ProductTypeRules,
    parse_draft,
)
from skushift.adapters.http_resilience import BackgroundClient
from skushift.adapters.sqlalchemy import SqlAlchemyRecoveryLedger, is_started, startup
from skushift.config import (
    get_catalog_api_config,
    get_ledger_config,
    get_reassignment_options,
)
from skushift.domain.ports import no_same_for_all_attributes
from skushift.domain.reassignment import ReassignmentEngine, TransactionLog

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from pathlib import Path

    from skushift.config import LedgerConfig
    from skushift.domain.model import CatalogEntry, Draft, TransactionRecord
    from skushift.domain.ports import CatalogGateway, RecoveryLedger, SameForAllLookup
    from skushift.domain.reassignment import ReassignmentOptions, ReassignmentResult

log = getLogger(__name__)

_DRAFTS_ADAPTER = TypeAdapter(list[ProductDraftPayload])


def load_drafts(path: Path) -> list[Draft]:
    """Read a JSON array of product drafts in the catalog API shape."""

    payloads = _DRAFTS_ADAPTER.validate_json(path.read_bytes())
    drafts = [parse_draft(payload) for payload in payloads]
    log.info("Loaded %s draft(s) from %s", len(drafts), path)
    return drafts


def build_recovery_ledger(
    config: LedgerConfig | None = None,
    *,
    http: BackgroundClient | None = None,
) -> RecoveryLedger:
    """Return the configured ledger backend, starting the database adapter if needed."""

    ledger_config = config or get_ledger_config()
    if ledger_config.backend == "catalog":
        return CustomObjectLedger(http=http)
    if not is_started():
        startup(database_uri=ledger_config.database.uri if ledger_config.database else None)
    return SqlAlchemyRecoveryLedger()


def build_reassignment_engine(
    *,
    gateway: CatalogGateway | None = None,
    ledger: RecoveryLedger | None = None,
    options: ReassignmentOptions | None = None,
    same_for_all: SameForAllLookup | None = None,
    http: BackgroundClient | None = None,
) -> ReassignmentEngine:
    """Wire the engine; unset collaborators come from the configured catalog.

    Same-for-all rules are read from the catalog's product types unless a
    lookup is given. An injected gateway without a lookup gets no rules.
    Catalog adapters built here share ``http`` and with it one rate limit.
    """

    if same_for_all is None:
        same_for_all = (
            ProductTypeRules(http=http) if gateway is None else no_same_for_all_attributes
        )
    return ReassignmentEngine(
        gateway or HttpCatalogGateway(http=http),
        ledger or build_recovery_ledger(http=http),
        options=options or get_reassignment_options(),
        same_for_all=same_for_all,
    )


@contextmanager
def _catalog_client(
    *, gateway: CatalogGateway | None, ledger: RecoveryLedger | None
) -> Iterator[BackgroundClient | None]:
    """Yield the catalog client the adapters still to be built will share.

    Nothing is created when the caller injected every catalog-backed adapter.
    """

    needs_catalog = gateway is None or (
        ledger is None and get_ledger_config().backend == "catalog"
    )
    if not needs_catalog:
        yield None
        return
    http = BackgroundClient(get_catalog_api_config().resilience)
    try:
        yield http
    finally:
        http.close()


def reassign_variants(
    drafts: Iterable[Draft],
    *,
    existing_entries: Iterable[CatalogEntry] | None = None,
    gateway: CatalogGateway | None = None,
    ledger: RecoveryLedger | None = None,
    options: ReassignmentOptions | None = None,
    same_for_all: SameForAllLookup | None = None,
) -> ReassignmentResult:
    """Reassign variants for ``drafts`` using the configured adapters."""

    drafts = list(drafts)
    with _catalog_client(gateway=gateway, ledger=ledger) as http:
        engine = build_reassignment_engine(
            gateway=gateway, ledger=ledger, options=options, same_for_all=same_for_all, http=http
        )
        log.info("Starting variant reassignment for %s draft(s)", len(drafts))
        return engine.execute(drafts, existing_entries)


def replay_pending_transactions(
    *,
    gateway: CatalogGateway | None = None,
    ledger: RecoveryLedger | None = None,
    options: ReassignmentOptions | None = None,
    same_for_all: SameForAllLookup | None = None,
) -> ReassignmentResult:
    with _catalog_client(gateway=gateway, ledger=ledger) as http:
        engine = build_reassignment_engine(
            gateway=gateway, ledger=ledger, options=options, same_for_all=same_for_all, http=http
        )
        return engine.replay_pending()


def list_pending_transactions(*, ledger: RecoveryLedger | None = None) -> list[TransactionRecord]:
    if ledger is not None:
        return TransactionLog(ledger).pending()
    ledger_config = get_ledger_config()
    if ledger_config.backend != "catalog":
        return TransactionLog(build_recovery_ledger(ledger_config)).pending()
    catalog_ledger = CustomObjectLedger()
    try:
        return TransactionLog(catalog_ledger).pending()
    finally:
        catalog_ledger.close()
