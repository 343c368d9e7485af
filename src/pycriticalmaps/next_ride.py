"""Next-ride lookup with request coalescing and a month-scoped cache.

State machine::

    IDLE -> FETCHING -> RESOLVED | FAILED -> IDLE

Only one lookup is ever in flight.  Calls made while ``FETCHING`` share
the in-flight result instead of issuing another request.  A successful
lookup is cached per coordinate bucket and calendar month; failures are
never cached.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from pycriticalmaps._api.rides import RideQueryClient
from pycriticalmaps._constants import DEFAULT_BUCKET_PRECISION, DEFAULT_NEXT_RIDE_RADIUS_KM, EARTH_RADIUS_KM
from pycriticalmaps.exceptions import NetworkFailure, NoRideFound
from pycriticalmaps.models._base import Coordinate
from pycriticalmaps.models.ride import NextRideQuery, Ride

_logger = logging.getLogger(__name__)


def _local_now() -> datetime:
    return datetime.now().astimezone()


class LocatorState(StrEnum):
    IDLE = "idle"
    FETCHING = "fetching"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class RideResult:
    """Outcome of a lookup as handed to completion callbacks."""

    ride: Ride | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.ride is not None


_CacheKey = tuple[float, float, int, int]


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle (haversine) distance in kilometres."""
    lat1, lon1, lat2, lon2 = map(math.radians, (a.latitude, a.longitude, b.latitude, b.longitude))
    h = math.sin((lat2 - lat1) / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin((lon2 - lon1) / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(h)))


def coordinate_bucket(coordinate: Coordinate, precision: int = DEFAULT_BUCKET_PRECISION) -> tuple[float, float]:
    return (round(coordinate.latitude, precision), round(coordinate.longitude, precision))


def select_next_ride(
    rides: Iterable[Ride],
    center: Coordinate,
    *,
    radius_km: float,
    now: datetime,
) -> Ride:
    """Pick the earliest upcoming ride within *radius_km* of *center*.

    Ties on start time go to the closer ride.

    Raises
    ------
    NoRideFound
        If no candidate is upcoming and in range.
    """
    candidates: list[tuple[datetime, float, Ride]] = []
    for ride in rides:
        if ride.start_time < now:
            continue
        distance = distance_km(center, ride.coordinate)
        if distance > radius_km:
            continue
        candidates.append((ride.start_time, distance, ride))
    if not candidates:
        raise NoRideFound(f"No upcoming ride within {radius_km} km")
    return min(candidates, key=lambda item: (item[0], item[1]))[2]


class NextRideLocator:
    """Finds the next ride around a coordinate.

    Must be used from a single event loop.  Lookups are issued through a
    :class:`RideQueryClient`; the query always carries the year and month
    of the moment the lookup starts.
    """

    def __init__(
        self,
        client: RideQueryClient,
        *,
        radius_km: Callable[[], int] = lambda: DEFAULT_NEXT_RIDE_RADIUS_KM,
        bucket_precision: int = DEFAULT_BUCKET_PRECISION,
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        self._client = client
        self._radius_km = radius_km
        self._bucket_precision = bucket_precision
        self._clock = clock
        self._state = LocatorState.IDLE
        self._inflight: asyncio.Task[Ride] | None = None
        self._cache: tuple[_CacheKey, Ride] | None = None

    @property
    def state(self) -> LocatorState:
        return self._state

    @property
    def next_ride(self) -> Ride | None:
        """The most recently resolved ride, if any."""
        return self._cache[1] if self._cache is not None else None

    async def locate(self, coordinate: Coordinate) -> Ride:
        """Return the next ride around *coordinate*.

        Raises
        ------
        NetworkFailure, DecodeFailure
            If the lookup request fails.
        NoRideFound
            If no upcoming ride is in range.
        """
        return await asyncio.shield(self._begin(coordinate))

    def get_next_ride(
        self,
        coordinate: Coordinate,
        completion: Callable[[RideResult], None],
    ) -> asyncio.Future[Ride]:
        """Callback flavour of :meth:`locate`.

        *completion* is invoked on the event loop with a :class:`RideResult`
        and never receives an exception.  Must be called from a running loop.
        Cancelling the returned future abandons only this caller; coalesced
        callers still receive the lookup result.
        """
        future = asyncio.shield(self._begin(coordinate))
        future.add_done_callback(lambda done: self._deliver(done, completion))
        return future

    async def cancel(self) -> None:
        """Cancel the in-flight lookup, if any, and wait for it to settle."""
        task = self._inflight
        if task is None:
            return
        task.cancel()
        await asyncio.wait([task])

    def _begin(self, coordinate: Coordinate) -> asyncio.Future[Ride]:
        loop = asyncio.get_running_loop()
        now = self._clock()
        key = (*coordinate_bucket(coordinate, self._bucket_precision), now.year, now.month)

        if self._cache is not None and self._cache[0] == key:
            _logger.debug("Next ride served from cache for bucket %s", key)
            cached: asyncio.Future[Ride] = loop.create_future()
            cached.set_result(self._cache[1])
            return cached

        if self._inflight is not None:
            _logger.debug("Next ride lookup already in flight, coalescing")
            return self._inflight

        self._transition(LocatorState.FETCHING)
        task = loop.create_task(self._fetch(coordinate, now))
        task.add_done_callback(lambda done: self._finish(done, key))
        self._inflight = task
        return task

    async def _fetch(self, coordinate: Coordinate, now: datetime) -> Ride:
        radius = self._radius_km()
        query = NextRideQuery(
            center_latitude=coordinate.latitude,
            center_longitude=coordinate.longitude,
            radius=radius,
            year=now.year,
            month=now.month,
        )
        rides = await self._client.fetch_rides(query)
        return select_next_ride(rides, coordinate, radius_km=radius, now=now)

    def _finish(self, task: asyncio.Task[Ride], key: _CacheKey) -> None:
        self._inflight = None
        if task.cancelled():
            _logger.debug("Next ride lookup cancelled")
        elif (exc := task.exception()) is not None:
            self._transition(LocatorState.FAILED)
            _logger.warning("Next ride lookup failed: %s", exc)
        else:
            self._cache = (key, task.result())
            self._transition(LocatorState.RESOLVED)
        self._transition(LocatorState.IDLE)

    def _transition(self, state: LocatorState) -> None:
        _logger.debug("Next ride locator %s -> %s", self._state, state)
        self._state = state

    @staticmethod
    def _deliver(future: asyncio.Future[Ride], completion: Callable[[RideResult], None]) -> None:
        if future.cancelled():
            result = RideResult(error=NetworkFailure("Ride lookup cancelled"))
        elif (exc := future.exception()) is not None:
            result = RideResult(error=exc)
        else:
            result = RideResult(ride=future.result())
        try:
            completion(result)
        except Exception:
            _logger.debug("next ride completion failed", exc_info=True)
