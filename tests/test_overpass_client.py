import asyncio

import httpx
import pytest

from overpass_fakes import overpass_query


@pytest.mark.asyncio
async def test_execute_posts_form_encoded_query(make_client):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"elements": [{"type": "node", "id": 1}]})

    client = make_client(handler)
    elements = await client.execute('[out:json];(node["amenity"="cafe"](around:5000,1,2););out center;')
    await client.aclose()

    assert elements == [{"type": "node", "id": 1}]
    assert seen[0].method == "POST"
    assert seen[0].headers["content-type"] == "application/x-www-form-urlencoded"
    assert overpass_query(seen[0]).startswith("[out:json];")


@pytest.mark.asyncio
async def test_rate_limit_retries_with_growing_jittered_backoff_then_gives_up(make_client, sleep_recorder):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(429, text="rate limited")

    client = make_client(handler, max_retries=3, retry_base_s=1.0)
    elements = await client.execute("[out:json];();out center;")
    await client.aclose()

    assert elements == []
    assert len(calls) == 4  # first try + 3 retries
    delays = sleep_recorder.delays
    assert len(delays) == 3
    for attempt, wait in enumerate(delays):
        base = 2 ** attempt
        assert base * 0.8 <= wait <= base * 1.2
    assert delays == sorted(delays)


@pytest.mark.asyncio
async def test_server_error_uses_linear_backoff_and_recovers(make_client, sleep_recorder):
    responses = iter([
        httpx.Response(504, text="gateway timeout"),
        httpx.Response(502, text="bad gateway"),
        httpx.Response(200, json={"elements": [{"type": "way", "id": 7}]}),
    ])

    client = make_client(lambda request: next(responses), retry_base_s=2.0)
    elements = await client.execute("[out:json];();out center;")
    await client.aclose()

    assert elements == [{"type": "way", "id": 7}]
    assert sleep_recorder.delays == [2.0, 4.0]


@pytest.mark.asyncio
async def test_transport_errors_exhaust_retries_without_raising(make_client, sleep_recorder):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler, max_retries=2, retry_base_s=1.0)
    elements = await client.execute("[out:json];();out center;")
    await client.aclose()

    assert elements == []
    assert sleep_recorder.delays == [1.0, 2.0]


@pytest.mark.asyncio
async def test_malformed_json_is_treated_as_transient(make_client, sleep_recorder):
    responses = iter([
        httpx.Response(200, text="<html>runtime error</html>"),
        httpx.Response(200, json={"elements": []}),
    ])

    client = make_client(lambda request: next(responses))
    assert await client.execute("[out:json];();out center;") == []
    await client.aclose()

    assert sleep_recorder.delays == [1.0]


@pytest.mark.asyncio
async def test_run_all_keeps_order_and_bounds_concurrency(make_client):
    in_flight = 0
    peak = 0

    async def handler(request: httpx.Request) -> httpx.Response:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        idx = int(overpass_query(request).split(":")[1])
        return httpx.Response(200, json={"elements": [{"type": "node", "id": idx}]})

    client = make_client(handler, concurrency=2)
    queries = [f"q:{i}" for i in range(7)]
    results = await client.run_all(queries)
    await client.aclose()

    assert [r[0]["id"] for r in results] == list(range(7))
    assert peak == 2


@pytest.mark.asyncio
async def test_run_all_failed_query_yields_empty_slot(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        if overpass_query(request) == "bad":
            return httpx.Response(500)
        return httpx.Response(200, json={"elements": [{"type": "node", "id": 1}]})

    client = make_client(handler, max_retries=1)
    results = await client.run_all(["ok", "bad", "ok"])
    await client.aclose()

    assert results == [[{"type": "node", "id": 1}], [], [{"type": "node", "id": 1}]]


@pytest.mark.asyncio
async def test_run_all_with_no_queries(make_client):
    client = make_client(lambda request: httpx.Response(200, json={"elements": []}))
    assert await client.run_all([]) == []
    await client.aclose()


@pytest.mark.asyncio
async def test_pause_goes_through_injected_sleep(make_client, sleep_recorder):
    client = make_client(lambda request: httpx.Response(200, json={"elements": []}))
    await client.pause(1.5)
    await client.pause(0)
    await client.aclose()

    assert sleep_recorder.delays == [1.5]


@pytest.mark.asyncio
async def test_unexpected_exception_is_retried_like_a_transport_failure(make_client, sleep_recorder):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) < 3:
            raise RuntimeError("socket went sideways")
        return httpx.Response(200, json={"elements": [{"type": "node", "id": 3}]})

    client = make_client(handler, retry_base_s=1.0)
    elements = await client.execute("[out:json];();out center;")
    await client.aclose()

    assert elements == [{"type": "node", "id": 3}]
    assert sleep_recorder.delays == [1.0, 2.0]


@pytest.mark.asyncio
async def test_unexpected_exception_on_every_attempt_yields_empty(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        raise RuntimeError("always broken")

    client = make_client(handler, max_retries=1)
    results = await client.run_all(["a", "b", "c"])
    await client.aclose()

    assert results == [[], [], []]
