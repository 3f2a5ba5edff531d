"""HTTP gateway for the catalog REST API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final, Unpack

import httpx
from pydantic import ValidationError

from skushift.adapters.http_resilience import BackgroundClient, ResilientClient
from skushift.config.catalog import CatalogApiConfig, get_catalog_api_config
from skushift.domain.errors import CatalogGatewayError, EntryNotFoundError, VersionConflictError

from .schema import ErrorResponse, PagedQueryResponse
from .translator import draft_to_payload, parse_entry, update_payload

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence

    from skushift.adapters.http_resilience import RequestOptions
    from skushift.config.http_resilience import ResilienceConfig
    from skushift.domain.model import CatalogEntry, Draft, EntryId, Sku, UpdateAction
    from skushift.domain.ports import CatalogGateway

log = getLogger(__name__)

SKU_BATCH_SIZE: Final[int] = 20
LOAD_CONCURRENCY: Final[int] = 2
PAGE_SIZE: Final[int] = 500


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class CatalogAPIError(CatalogGatewayError):
    """Raised when the catalog API answers with an unexpected error."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        codes: Sequence[str] = (),
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.codes = tuple(codes)


def error_from_response(response: httpx.Response) -> CatalogAPIError:
    try:
        payload = ErrorResponse.model_validate(response.json())
    except (ValueError, ValidationError):
        return CatalogAPIError(
            f"Catalog API returned {response.status_code} for "
            f"{response.request.method} {response.request.url}",
            status_code=response.status_code,
        )
    log.error("Catalog API error %s: %s", payload.status_code, payload.message)
    return CatalogAPIError(
        payload.message or f"Catalog API returned {payload.status_code}",
        status_code=response.status_code,
        codes=[error.code for error in payload.errors],
    )


def parse_body[T](response: httpx.Response, parse: Callable[[Any], T]) -> T:
    """Parse a successful response body; malformed bodies become ``CatalogAPIError``."""

    try:
        return parse(response.json())
    except (ValueError, ValidationError) as exc:
        raise CatalogAPIError(
            f"Catalog API returned a malformed body for "
            f"{response.request.method} {response.request.url}: {exc}",
            status_code=response.status_code,
        ) from exc


async def send(
    client: ResilientClient,
    method: str,
    url: str,
    **kwargs: Unpack[RequestOptions],
) -> httpx.Response:
    """Issue one request; transport failures left after retries become ``CatalogAPIError``."""

    try:
        return await client.request(method, url, **kwargs)
    except httpx.HTTPError as exc:
        raise CatalogAPIError(f"{method} {url} failed: {exc}") from exc


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def sku_predicate(skus: Sequence[Sku]) -> str:
    values = ", ".join(_quote(sku) for sku in skus)
    variants = f"masterVariant(sku in ({values})) or variants(sku in ({values}))"
    return f"masterData(staged({variants}) or current({variants}))"


def slug_predicate(slug: Mapping[str, str]) -> str:
    pairs = " or ".join(f"slug({locale}={_quote(value)})" for locale, value in slug.items())
    return f"masterData(staged({pairs}) or current({pairs}))"


def _chunks(skus: Sequence[Sku], size: int) -> Iterator[Sequence[Sku]]:
    for start in range(0, len(skus), size):
        yield skus[start : start + size]


def _parse_page(body: Any) -> tuple[PagedQueryResponse, list[CatalogEntry]]:
    page = PagedQueryResponse.model_validate(body)
    return page, [parse_entry(result) for result in page.results]


def _dedupe(entries: Iterable[CatalogEntry]) -> list[CatalogEntry]:
    unique: dict[EntryId, CatalogEntry] = {}
    for entry in entries:
        unique.setdefault(entry.id, entry)
    return list(unique.values())


@dataclass(slots=True)
class HttpCatalogGateway:
    """``CatalogGateway`` over the catalog REST API.

    Calls run on a shared ``BackgroundClient``, so the worker threads of the
    parallel detach step share one connection pool and one rate limit. Pass
    the same ``http`` to every adapter talking to one catalog.
    """

    config: CatalogApiConfig = field(default_factory=get_catalog_api_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    http: BackgroundClient | None = None
    sku_batch_size: int = SKU_BATCH_SIZE
    load_concurrency: int = LOAD_CONCURRENCY
    page_size: int = PAGE_SIZE
    _http: BackgroundClient = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._http = self.http or BackgroundClient(
            self.config.resilience, client_factory=self.client_factory
        )

    def close(self) -> None:
        self._http.close()

    def find_by_skus(self, skus: Iterable[Sku]) -> list[CatalogEntry]:
        unique = list(dict.fromkeys(skus))
        if not unique:
            return []
        return self._http.run(lambda client: self._find_by_skus(client, unique))

    def find_by_slug(self, slug: Mapping[str, str]) -> list[CatalogEntry]:
        if not slug:
            return []
        return self._http.run(lambda client: self._query(client, slug_predicate(slug)))

    def fetch_by_id(self, entry_id: EntryId) -> CatalogEntry | None:
        return self._http.run(lambda client: self._fetch_by_id(client, entry_id))

    def create(self, draft: Draft) -> CatalogEntry:
        return self._http.run(lambda client: self._create(client, draft))

    def update(self, entry: CatalogEntry, actions: Sequence[UpdateAction]) -> CatalogEntry:
        return self._http.run(lambda client: self._update(client, entry, list(actions)))

    def delete(self, entry: CatalogEntry) -> None:
        self._http.run(lambda client: self._delete(client, entry))

    async def _find_by_skus(
        self, client: ResilientClient, skus: Sequence[Sku]
    ) -> list[CatalogEntry]:
        semaphore = asyncio.Semaphore(self.load_concurrency)

        async def load(batch: Sequence[Sku]) -> list[CatalogEntry]:
            async with semaphore:
                return await self._query(client, sku_predicate(batch))

        batches = await asyncio.gather(
            *(load(batch) for batch in _chunks(skus, self.sku_batch_size))
        )
        entries = _dedupe(entry for batch in batches for entry in batch)
        log.debug("Found %s entries for %s SKUs", len(entries), len(skus))
        return entries

    async def _query(self, client: ResilientClient, predicate: str) -> list[CatalogEntry]:
        entries: list[CatalogEntry] = []
        offset = 0
        while True:
            params = {"where": predicate, "limit": self.page_size, "offset": offset}
            response = await send(client, "GET", "products", params=params)
            if not response.is_success:
                raise error_from_response(response)
            page, parsed = parse_body(response, _parse_page)
            entries.extend(parsed)
            offset += page.count
            if page.count < self.page_size or (page.total is not None and offset >= page.total):
                break
        return entries

    async def _fetch_by_id(
        self, client: ResilientClient, entry_id: EntryId
    ) -> CatalogEntry | None:
        response = await send(client, "GET", f"products/{entry_id}")
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        if not response.is_success:
            raise error_from_response(response)
        return parse_body(response, parse_entry)

    async def _create(self, client: ResilientClient, draft: Draft) -> CatalogEntry:
        response = await send(client, "POST", "products", json=draft_to_payload(draft))
        if not response.is_success:
            raise error_from_response(response)
        entry = parse_body(response, parse_entry)
        log.info("Created entry %s for draft %s", entry.id, draft.identity)
        return entry

    async def _update(
        self, client: ResilientClient, entry: CatalogEntry, actions: list[UpdateAction]
    ) -> CatalogEntry:
        response = await send(
            client,
            "POST",
            f"products/{entry.id}",
            json=update_payload(entry.version, actions),
        )
        self._raise_for_entry_status(response, entry)
        return parse_body(response, parse_entry)

    async def _delete(self, client: ResilientClient, entry: CatalogEntry) -> None:
        response = await send(
            client, "DELETE", f"products/{entry.id}", params={"version": entry.version}
        )
        self._raise_for_entry_status(response, entry)

    @staticmethod
    def _raise_for_entry_status(response: httpx.Response, entry: CatalogEntry) -> None:
        if response.is_success:
            return
        if response.status_code == httpx.codes.CONFLICT:
            raise VersionConflictError(entry.id, entry.version)
        if response.status_code == httpx.codes.NOT_FOUND:
            raise EntryNotFoundError(entry.id)
        raise error_from_response(response)


if TYPE_CHECKING:
    _gateway_check: CatalogGateway = HttpCatalogGateway()
