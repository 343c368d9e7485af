from __future__ import annotations

import asyncio
from collections.abc import Sequence

import pytest

from pycriticalmaps.exceptions import NetworkFailure
from pycriticalmaps.models._base import Coordinate
from pycriticalmaps.models.positions import PositionsResponse
from pycriticalmaps.poller import SnapshotPoller
from pycriticalmaps.preferences import InMemoryKeyValueStore, Preferences


class _FakePositionsApi:
    def __init__(self) -> None:
        self.coordinates: list[Coordinate | None] = []
        self.gates: list[asyncio.Event] = []
        self.responses: list[PositionsResponse] = []
        self.error: Exception | None = None

    async def exchange(self, coordinate: Coordinate | None, messages: Sequence[str] = ()) -> PositionsResponse:
        index = len(self.coordinates)
        self.coordinates.append(coordinate)
        if index < len(self.gates):
            await self.gates[index].wait()
        if self.error is not None:
            raise self.error
        return self.responses[index] if index < len(self.responses) else PositionsResponse()


def _poller(api: _FakePositionsApi, prefs: Preferences, delivered: list[PositionsResponse]) -> SnapshotPoller:
    return SnapshotPoller(
        api,  # type: ignore[arg-type]
        prefs,
        interval=0.01,
        own_coordinate=lambda: Coordinate(52.52, 13.405),
        on_snapshot=delivered.append,
    )


@pytest.mark.asyncio
async def test_poll_once_reports_coordinate_and_delivers() -> None:
    api = _FakePositionsApi()
    delivered: list[PositionsResponse] = []
    poller = _poller(api, Preferences(InMemoryKeyValueStore()), delivered)

    result = await poller.poll_once()

    assert api.coordinates == [Coordinate(52.52, 13.405)]
    assert delivered == [result]


@pytest.mark.asyncio
async def test_observation_mode_omits_own_coordinate() -> None:
    api = _FakePositionsApi()
    prefs = Preferences(InMemoryKeyValueStore())
    prefs.observation_mode = True
    delivered: list[PositionsResponse] = []

    await _poller(api, prefs, delivered).poll_once()

    assert api.coordinates == [None]
    assert len(delivered) == 1


@pytest.mark.asyncio
async def test_stale_response_is_dropped() -> None:
    api = _FakePositionsApi()
    slow, fast = asyncio.Event(), asyncio.Event()
    api.gates = [slow, fast]
    api.responses = [PositionsResponse.from_api({"locations": {}}), PositionsResponse.from_api({"locations": {}})]
    delivered: list[PositionsResponse] = []
    poller = _poller(api, Preferences(InMemoryKeyValueStore()), delivered)

    first = asyncio.create_task(poller.poll_once())
    second = asyncio.create_task(poller.poll_once())
    await asyncio.sleep(0)
    fast.set()
    assert await second is api.responses[1]
    slow.set()
    assert await first is None

    assert delivered == [api.responses[1]]


@pytest.mark.asyncio
async def test_failed_exchange_is_not_delivered() -> None:
    api = _FakePositionsApi()
    api.error = NetworkFailure("offline")
    delivered: list[PositionsResponse] = []

    assert await _poller(api, Preferences(InMemoryKeyValueStore()), delivered).poll_once() is None
    assert delivered == []


@pytest.mark.asyncio
async def test_start_and_stop() -> None:
    api = _FakePositionsApi()
    delivered: list[PositionsResponse] = []
    poller = _poller(api, Preferences(InMemoryKeyValueStore()), delivered)

    poller.start()
    poller.start()
    assert poller.is_running
    await asyncio.sleep(0.05)
    await poller.stop()

    assert not poller.is_running
    assert len(delivered) >= 2
