from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor

import httpx

from skushift.adapters.http_resilience import BackgroundClient, ResilientClient
from skushift.config import RateLimit, ResilienceConfig, RetryPolicy


def _config(**overrides: object) -> ResilienceConfig:
    values: dict[str, object] = {
        "name": "test",
        "base_url": "https://catalog.test/shop/",
        "retry": RetryPolicy(total=2, backoff_factor=0.0, backoff_jitter=0.0),
    }
    values.update(overrides)
    return ResilienceConfig(**values)  # type: ignore[arg-type]


async def _get(client: ResilientClient, url: str) -> httpx.Response:
    async with client:
        return await client.request("GET", url)


def test_transient_statuses_are_retried() -> None:
    statuses = [503, 200]

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(statuses.pop(0), json={})

    client = ResilientClient(_config(), transport=httpx.MockTransport(handler))

    response = asyncio.run(_get(client, "products"))

    assert response.status_code == 200
    assert statuses == []


def test_version_conflicts_are_not_retried() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(409, json={})

    client = ResilientClient(_config(), transport=httpx.MockTransport(handler))

    response = asyncio.run(_get(client, "products/e1"))

    assert response.status_code == 409
    assert len(calls) == 1


def test_headers_hooks_and_rate_limit_are_applied() -> None:
    seen: list[int] = []

    async def hook(response: httpx.Response) -> None:
        seen.append(response.status_code)

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer token"
        assert str(request.url) == "https://catalog.test/shop/products"
        return httpx.Response(200, json={})

    client = ResilientClient(
        _config(
            default_headers={"Authorization": "Bearer token"},
            response_hooks=(hook,),
            ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
        ),
        transport=httpx.MockTransport(handler),
    )

    asyncio.run(_get(client, "products"))

    assert seen == [200]


def test_background_client_is_shared_across_threads() -> None:
    created: list[ResilientClient] = []

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"path": request.url.path})

    def factory(config: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(config, transport=httpx.MockTransport(handler))
        created.append(client)
        return client

    background = BackgroundClient(
        _config(ratelimit=RateLimit(max_calls=10, per_seconds=1.0)), client_factory=factory
    )

    async def fetch(client: ResilientClient, entry_id: int) -> int:
        response = await client.request("GET", f"products/e{entry_id}")
        return response.status_code

    try:
        with ThreadPoolExecutor(max_workers=3) as pool:
            statuses = list(
                pool.map(
                    lambda entry_id: background.run(lambda client: fetch(client, entry_id)),
                    range(6),
                )
            )
    finally:
        background.close()
    background.close()

    assert statuses == [200] * 6
    assert len(created) == 1
