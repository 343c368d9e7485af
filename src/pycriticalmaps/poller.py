"""Periodic positions exchange.

Every cycle reports the own coordinate (unless observation mode is on)
and hands the returned snapshot to the registered callbacks.  A response
is only delivered when it belongs to a request newer than the last
delivered one, so a slow response can never overwrite a fresher snapshot.
"""

from __future__ import annotations

import asyncio
import contextlib
import itertools
import logging
from collections.abc import Callable

from pycriticalmaps._api.positions import PositionsApi
from pycriticalmaps.exceptions import CriticalMapsError
from pycriticalmaps.models._base import Coordinate
from pycriticalmaps.models.positions import PositionsResponse
from pycriticalmaps.preferences import Preferences

_logger = logging.getLogger(__name__)


class SnapshotPoller:
    """Runs the positions exchange on a fixed interval."""

    def __init__(
        self,
        api: PositionsApi,
        preferences: Preferences,
        *,
        interval: float,
        own_coordinate: Callable[[], Coordinate | None] = lambda: None,
        on_snapshot: Callable[[PositionsResponse], None] | None = None,
    ) -> None:
        self._api = api
        self._preferences = preferences
        self._interval = interval
        self._own_coordinate = own_coordinate
        self._on_snapshot = on_snapshot
        self._sequence = itertools.count(1)
        self._delivered = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def poll_once(self) -> PositionsResponse | None:
        """Run one exchange; returns the snapshot if it was delivered."""
        sequence = next(self._sequence)
        coordinate = None if self._preferences.observation_mode else self._own_coordinate()
        try:
            response = await self._api.exchange(coordinate)
        except CriticalMapsError:
            _logger.warning("Positions exchange %d failed", sequence, exc_info=True)
            return None

        if sequence <= self._delivered:
            _logger.debug("Dropping stale positions response %d (delivered %d)", sequence, self._delivered)
            return None
        self._delivered = sequence

        if self._on_snapshot is not None:
            try:
                self._on_snapshot(response)
            except Exception:
                _logger.debug("on_snapshot callback failed", exc_info=True)
        return response

    async def _run(self) -> None:
        while True:
            await self.poll_once()
            await asyncio.sleep(self._interval)
