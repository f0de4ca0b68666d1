"""Tests for the primary PokeAPI client: normalization and retry policy."""

from __future__ import annotations

import asyncio
from fractions import Fraction

import httpx
import pytest

from poke_battle.clients import (
    ConnectionFailure,
    InvalidData,
    InvalidResponse,
    MaxRetriesReached,
    NetworkError,
    PathNotFound,
    PokeAPIClient,
    ProtocolConnectionError,
    Timeout,
)


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def detail_payload(creature_id: int = 25, name: str = "pikachu", **overrides):
    payload = {
        "id": creature_id,
        "name": name,
        "base_experience": 112,
        "height": 4,
        "weight": 60,
        "stats": [
            {"base_stat": 35, "effort": 0, "stat": {"name": "hp", "url": ""}},
            {"base_stat": 55, "effort": 0, "stat": {"name": "attack", "url": ""}},
            {"base_stat": 40, "effort": 0, "stat": {"name": "defense", "url": ""}},
            {"base_stat": 50, "effort": 0, "stat": {"name": "special-attack", "url": ""}},
            {"base_stat": 50, "effort": 0, "stat": {"name": "special-defense", "url": ""}},
            {"base_stat": 90, "effort": 2, "stat": {"name": "speed", "url": ""}},
        ],
        "types": [{"slot": 1, "type": {"name": "electric", "url": ""}}],
        "abilities": [
            {"ability": {"name": "static", "url": ""}, "is_hidden": False, "slot": 1},
            {"ability": {"name": "lightning-rod", "url": ""}, "is_hidden": True, "slot": 3},
        ],
        "moves": [
            {"move": {"name": name, "url": ""}}
            for name in ("mega-punch", "pay-day", "thunder-punch", "slam", "mega-kick", "headbutt")
        ],
    }
    payload.update(overrides)
    return payload


def list_payload(count: int):
    return {
        "count": 1302,
        "next": None,
        "previous": None,
        # Upstream urls deliberately disagree with the dense ids.
        "results": [
            {"name": f"creature-{i}", "url": f"https://pokeapi.co/api/v2/pokemon/{i + 1000}/"}
            for i in range(count)
        ],
    }


def make_client(handler, sleep=None) -> PokeAPIClient:
    return PokeAPIClient(transport=httpx.MockTransport(handler), sleep=sleep or RecordingSleep())


def run(client: PokeAPIClient, call):
    async def scenario():
        async with client:
            return await call(client)

    return asyncio.run(scenario())


def test_fetch_list_assigns_dense_sequential_ids() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json=list_payload(151))

    summaries = run(make_client(handler), lambda c: c.fetch_list())

    assert seen["params"] == {"limit": "151", "offset": "0"}
    assert len(summaries) == 151
    assert [s.id for s in summaries] == list(range(1, 152))
    assert summaries[0].name == "creature-0"


def test_fetch_list_ids_start_after_offset() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=list_payload(3))

    summaries = run(make_client(handler), lambda c: c.fetch_list(limit=3, offset=20))

    assert [s.id for s in summaries] == [21, 22, 23]
    assert summaries[0].sprite_url.endswith("/sprites/pokemon/21.png")


def test_fetch_list_rejects_negative_paging() -> None:
    client = make_client(lambda request: httpx.Response(200, json=list_payload(1)))
    with pytest.raises(ValueError):
        run(client, lambda c: c.fetch_list(limit=-1))


def test_fetch_detail_normalizes_payload() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v2/pokemon/25"
        return httpx.Response(200, json=detail_payload())

    creature = run(make_client(handler), lambda c: c.fetch_detail(25))

    assert creature.name == "pikachu"
    assert (creature.hp, creature.attack, creature.speed) == (35, 55, 90)
    assert creature.types == ("electric",)
    assert creature.abilities == ("static", "lightning-rod")
    assert creature.moves == ("mega-punch", "pay-day", "thunder-punch", "slam")
    assert creature.total_stats == 35 + 55 + 40 + 50 + 50 + 90
    assert creature.average_stats == Fraction(creature.total_stats, 6)
    assert creature.base_experience == 112
    assert creature.description == ""


def test_missing_stats_and_lists_default_to_zero_and_empty() -> None:
    payload = detail_payload(
        stats=[{"base_stat": 45, "effort": 0, "stat": {"name": "hp", "url": ""}}],
        moves=[],
    )
    del payload["abilities"]

    creature = run(
        make_client(lambda request: httpx.Response(200, json=payload)),
        lambda c: c.fetch_detail(25),
    )

    assert creature.hp == 45
    assert creature.attack == creature.defense == creature.speed == 0
    assert creature.moves == ()
    assert creature.abilities == ()
    assert creature.primary_move == "unknown"


def test_missing_hp_is_invalid_data() -> None:
    payload = detail_payload(stats=[])
    client = make_client(lambda request: httpx.Response(200, json=payload))
    with pytest.raises(InvalidData):
        run(client, lambda c: c.fetch_detail(25))


def test_undecodable_body_is_invalid_data() -> None:
    client = make_client(lambda request: httpx.Response(200, content=b"<html>oops</html>"))
    with pytest.raises(InvalidData):
        run(client, lambda c: c.fetch_detail(1))


def test_rate_limit_retries_with_linear_backoff() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        if len(calls) <= 3:
            return httpx.Response(429)
        return httpx.Response(200, json=detail_payload())

    sleep = RecordingSleep()
    creature = run(make_client(handler, sleep), lambda c: c.fetch_detail(25))

    assert creature.name == "pikachu"
    assert len(calls) == 4
    assert sleep.delays == [2.0, 4.0, 6.0]
    assert sum(sleep.delays) == pytest.approx(2.0 * 1 + 2.0 * 2 + 2.0 * 3)


def test_server_errors_exhaust_into_max_retries_reached() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(503)

    sleep = RecordingSleep()
    with pytest.raises(MaxRetriesReached):
        run(make_client(handler, sleep), lambda c: c.fetch_detail(25))

    assert len(calls) == 6
    assert sleep.delays == [2.0, 4.0, 6.0, 8.0, 10.0]


def test_retry_loop_is_not_preemptible() -> None:
    # Once started, the loop only ends on success or after the full budget.
    sleep = RecordingSleep()
    client = make_client(lambda request: httpx.Response(500), sleep)

    with pytest.raises(MaxRetriesReached):
        run(client, lambda c: c.fetch_with_retry(c.detail_url(7)))

    assert len(sleep.delays) == client.max_retries


def test_unexpected_status_is_not_retried() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(404)

    sleep = RecordingSleep()
    with pytest.raises(InvalidResponse) as excinfo:
        run(make_client(handler, sleep), lambda c: c.fetch_detail(9999))

    assert excinfo.value.status_code == 404
    assert len(calls) == 1
    assert sleep.delays == []


@pytest.mark.parametrize(
    "exc, expected",
    [
        (httpx.ConnectError("connection refused"), ConnectionFailure),
        (httpx.ConnectError("No path found to host"), PathNotFound),
        (httpx.RemoteProtocolError("peer closed connection"), ProtocolConnectionError),
        (httpx.ReadTimeout("read timed out"), Timeout),
        (httpx.ReadError("socket went away"), NetworkError),
    ],
)
def test_transport_failures_retry_then_surface_typed_error(exc, expected) -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        raise exc

    sleep = RecordingSleep()
    with pytest.raises(expected) as excinfo:
        run(make_client(handler, sleep), lambda c: c.fetch_detail(1))

    assert len(calls) == 6
    assert len(sleep.delays) == 5
    assert excinfo.value.__cause__ is exc


def test_transient_transport_failure_recovers() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) == 1:
            raise httpx.ConnectError("connection was lost")
        return httpx.Response(200, json=detail_payload())

    sleep = RecordingSleep()
    creature = run(make_client(handler, sleep), lambda c: c.fetch_detail(25))

    assert creature.id == 25
    assert sleep.delays == [2.0]


def test_detail_payloads_are_cached() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=detail_payload())

    async def fetch_twice(client: PokeAPIClient):
        first = await client.fetch_detail(25)
        second = await client.fetch_detail(25)
        return first, second

    first, second = run(make_client(handler), fetch_twice)

    assert first == second
    assert len(calls) == 1
