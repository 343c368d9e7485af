"""Persisted user preferences.

The storage backend is injected as a :class:`KeyValueStore`; this module
only reads and writes named scalar fields.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import Any, Protocol

from pycriticalmaps._constants import DEFAULT_NEXT_RIDE_RADIUS_KM

_logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...


class InMemoryKeyValueStore:
    """Dictionary-backed store, mostly useful for tests and scripts."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        if value is None:
            self._data.pop(key, None)
        else:
            self._data[key] = value


_OBSERVATION_MODE = "observationMode"
_LAST_MESSAGE_READ = "lastMessageReadTimeInterval"
_THEME = "theme"
_LAST_DAY_USED = "lastDayUsed"
_DAYS_COUNTER = "daysCounter"
_USES_COUNTER = "usesCounter"
_LAST_RATED_VERSION = "lastRatedVersion"
_USERNAME = "username"
_NEXT_RIDE_RADIUS = "nextRideRadius"


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class Preferences:
    """Typed view over the persisted preference fields."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store
        self._observation_mode_observers: list[Callable[[bool], None]] = []

    @property
    def username(self) -> str | None:
        return self._store.get(_USERNAME)

    @username.setter
    def username(self, value: str | None) -> None:
        self._store.set(_USERNAME, value)

    @property
    def next_ride_radius(self) -> int:
        """Ride search radius in kilometres (20 when unset)."""
        radius = _as_int(self._store.get(_NEXT_RIDE_RADIUS, 0))
        return radius if radius > 0 else DEFAULT_NEXT_RIDE_RADIUS_KM

    @next_ride_radius.setter
    def next_ride_radius(self, value: int) -> None:
        self._store.set(_NEXT_RIDE_RADIUS, int(value))

    @property
    def observation_mode(self) -> bool:
        return bool(self._store.get(_OBSERVATION_MODE, False))

    @observation_mode.setter
    def observation_mode(self, value: bool) -> None:
        self._store.set(_OBSERVATION_MODE, bool(value))
        for observer in list(self._observation_mode_observers):
            try:
                observer(bool(value))
            except Exception:
                _logger.debug("observation mode observer failed", exc_info=True)

    def on_observation_mode_changed(self, observer: Callable[[bool], None]) -> Callable[[], None]:
        """Register *observer*; returns a callable that unregisters it."""
        self._observation_mode_observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observation_mode_observers:
                self._observation_mode_observers.remove(observer)

        return _unsubscribe

    @property
    def last_message_read_time(self) -> float:
        """Epoch seconds of the newest chat message the user has seen."""
        try:
            return float(self._store.get(_LAST_MESSAGE_READ, 0.0))
        except (TypeError, ValueError):
            return 0.0

    @last_message_read_time.setter
    def last_message_read_time(self, value: float) -> None:
        self._store.set(_LAST_MESSAGE_READ, float(value))

    @property
    def theme(self) -> str | None:
        return self._store.get(_THEME)

    @theme.setter
    def theme(self, value: str | None) -> None:
        self._store.set(_THEME, value)

    @property
    def last_day_used(self) -> date | None:
        value = self._store.get(_LAST_DAY_USED)
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                return date.fromisoformat(value)
            except ValueError:
                return None
        return None

    @last_day_used.setter
    def last_day_used(self, value: date | None) -> None:
        self._store.set(_LAST_DAY_USED, value.isoformat() if value is not None else None)

    @property
    def days_counter(self) -> int:
        return _as_int(self._store.get(_DAYS_COUNTER, 0))

    @days_counter.setter
    def days_counter(self, value: int) -> None:
        self._store.set(_DAYS_COUNTER, int(value))

    @property
    def uses_counter(self) -> int:
        return _as_int(self._store.get(_USES_COUNTER, 0))

    @uses_counter.setter
    def uses_counter(self, value: int) -> None:
        self._store.set(_USES_COUNTER, int(value))

    @property
    def last_rated_version(self) -> str | None:
        return self._store.get(_LAST_RATED_VERSION)

    @last_rated_version.setter
    def last_rated_version(self, value: str | None) -> None:
        self._store.set(_LAST_RATED_VERSION, value)

    def record_usage(self, today: date) -> None:
        """Count one app use, and one more day of use if *today* is new."""
        self.uses_counter = self.uses_counter + 1
        if self.last_day_used != today:
            self.days_counter = self.days_counter + 1
            self.last_day_used = today
