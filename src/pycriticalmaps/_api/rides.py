"""Ride lookup endpoint (criticalmass.in ``/api/ride``)."""

from __future__ import annotations

import logging
from typing import Protocol

from pydantic import TypeAdapter, ValidationError

from pycriticalmaps._transport import Transport
from pycriticalmaps.exceptions import DecodeFailure
from pycriticalmaps.models.ride import NextRideQuery, Ride

_logger = logging.getLogger(__name__)

_RIDE_LIST = TypeAdapter(list[Ride])


class RideQueryClient(Protocol):
    """Returns ride candidates for a query, or raises ``NetworkFailure``/``DecodeFailure``."""

    async def fetch_rides(self, query: NextRideQuery) -> list[Ride]: ...


def parse_rides(payload: object, *, endpoint: str = "") -> list[Ride]:
    """Decode a ride list response."""
    if not isinstance(payload, list):
        raise DecodeFailure(f"Expected a list of rides, got {type(payload).__name__}", endpoint=endpoint)
    try:
        return _RIDE_LIST.validate_python(payload)
    except ValidationError as exc:
        raise DecodeFailure(f"Malformed ride in response: {exc}", endpoint=endpoint) from exc


class RideApi:
    """HTTP implementation of :class:`RideQueryClient`."""

    def __init__(self, transport: Transport, url: str) -> None:
        self._transport = transport
        self._url = url

    async def fetch_rides(self, query: NextRideQuery) -> list[Ride]:
        payload = await self._transport.get_json(self._url, params=query.to_params())
        rides = parse_rides(payload, endpoint=self._url)
        _logger.debug("Ride lookup %d-%02d returned %d candidates", query.year, query.month, len(rides))
        return rides
