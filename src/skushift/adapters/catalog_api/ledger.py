"""Recovery ledger stored as catalog custom objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final, Unpack

import httpx

from skushift.adapters.http_resilience import BackgroundClient, ResilientClient
from skushift.config.catalog import CatalogApiConfig, get_catalog_api_config
from skushift.domain.errors import LedgerError
from skushift.domain.ports import LedgerRecord

from .client import CatalogAPIError, error_from_response, parse_body, send
from .schema import CustomObjectPayload, PagedQueryResponse

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from skushift.adapters.http_resilience import RequestOptions
    from skushift.config.http_resilience import ResilienceConfig
    from skushift.domain.ports import RecoveryLedger

log = getLogger(__name__)

PAGE_SIZE: Final[int] = 500


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def _to_record(payload: CustomObjectPayload) -> LedgerRecord:
    return LedgerRecord(key=payload.key, payload=dict(payload.value), created_at=payload.created_at)


def _parse_record(body: Any) -> LedgerRecord:
    return _to_record(CustomObjectPayload.model_validate(body))


def _parse_page(body: Any) -> tuple[PagedQueryResponse, list[LedgerRecord]]:
    page = PagedQueryResponse.model_validate(body)
    return page, [_parse_record(result) for result in page.results]


def _parse[T](response: httpx.Response, parse: Callable[[Any], T]) -> T:
    try:
        return parse_body(response, parse)
    except CatalogAPIError as exc:
        raise LedgerError(f"Unreadable ledger response: {exc}") from exc


@dataclass(slots=True)
class CustomObjectLedger:
    """``RecoveryLedger`` keeping one custom object per record in a single container."""

    config: CatalogApiConfig = field(default_factory=get_catalog_api_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    http: BackgroundClient | None = None
    page_size: int = PAGE_SIZE
    _http: BackgroundClient = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._http = self.http or BackgroundClient(
            self.config.resilience, client_factory=self.client_factory
        )

    @property
    def container(self) -> str:
        return self.config.ledger_container

    def close(self) -> None:
        self._http.close()

    def create(self, key: str, payload: Mapping[str, object]) -> LedgerRecord:
        return self._http.run(lambda client: self._create(client, key, dict(payload)))

    def fetch(self, key: str) -> LedgerRecord | None:
        return self._http.run(lambda client: self._fetch(client, key))

    def fetch_all(self) -> list[LedgerRecord]:
        return self._http.run(self._fetch_all)

    def delete(self, key: str) -> None:
        self._http.run(lambda client: self._delete(client, key))

    async def _create(
        self, client: ResilientClient, key: str, payload: dict[str, object]
    ) -> LedgerRecord:
        # version 0 makes the API refuse to overwrite an existing record
        body = {"container": self.container, "key": key, "value": payload, "version": 0}
        response = await self._send(client, "POST", "custom-objects", json=body)
        if response.status_code == httpx.codes.CONFLICT:
            raise LedgerError(f"Ledger record {key} already exists")
        self._raise_for_status(response)
        log.debug("Stored ledger record %s/%s", self.container, key)
        return _parse(response, _parse_record)

    async def _fetch(self, client: ResilientClient, key: str) -> LedgerRecord | None:
        response = await self._send(client, "GET", f"custom-objects/{self.container}/{key}")
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        self._raise_for_status(response)
        return _parse(response, _parse_record)

    async def _fetch_all(self, client: ResilientClient) -> list[LedgerRecord]:
        records: list[LedgerRecord] = []
        offset = 0
        while True:
            params = {"limit": self.page_size, "offset": offset, "sort": "createdAt asc"}
            response = await self._send(
                client, "GET", f"custom-objects/{self.container}", params=params
            )
            self._raise_for_status(response)
            page, parsed = _parse(response, _parse_page)
            records.extend(parsed)
            offset += page.count
            if page.count < self.page_size:
                break
        return records

    async def _delete(self, client: ResilientClient, key: str) -> None:
        response = await self._send(client, "DELETE", f"custom-objects/{self.container}/{key}")
        if response.status_code == httpx.codes.NOT_FOUND:
            return
        self._raise_for_status(response)
        log.debug("Deleted ledger record %s/%s", self.container, key)

    @staticmethod
    async def _send(
        client: ResilientClient,
        method: str,
        url: str,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        try:
            return await send(client, method, url, **kwargs)
        except CatalogAPIError as exc:
            raise LedgerError(str(exc)) from exc

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return
        error = error_from_response(response)
        raise LedgerError(f"Ledger request failed: {error}") from error


if TYPE_CHECKING:
    _ledger_check: RecoveryLedger = CustomObjectLedger()
