"""Positions/chat exchange endpoint.

One POST both reports the own location (unless observing) plus any
outgoing chat messages, and returns everyone else's locations together
with the current chat list.
"""

from __future__ import annotations

import hashlib
import logging
import time
from collections.abc import Sequence
from typing import Any

from pycriticalmaps._transport import Transport
from pycriticalmaps.exceptions import CriticalMapsError, DecodeFailure
from pycriticalmaps.models._base import Coordinate
from pycriticalmaps.models.positions import PositionsResponse

_logger = logging.getLogger(__name__)


def _micro_degrees(value: float) -> int:
    return int(round(value * 1_000_000))


def message_identifier(device_id: str, text: str, timestamp: int) -> str:
    """Stable identifier for an outgoing message."""
    return hashlib.md5(f"{device_id}{text}{timestamp}".encode(), usedforsecurity=False).hexdigest()


def build_exchange_payload(
    device_id: str,
    coordinate: Coordinate | None,
    messages: Sequence[str] = (),
    *,
    now: int | None = None,
) -> dict[str, Any]:
    """Build the exchange request body.

    ``coordinate`` is ``None`` in observation mode: the device still
    receives positions but does not report its own.
    """
    timestamp = int(time.time()) if now is None else now
    payload: dict[str, Any] = {"device": device_id}
    if coordinate is not None:
        payload["location"] = {
            "latitude": _micro_degrees(coordinate.latitude),
            "longitude": _micro_degrees(coordinate.longitude),
            "timestamp": timestamp,
        }
    if messages:
        payload["messages"] = [
            {
                "text": text,
                "timestamp": timestamp,
                "identifier": message_identifier(device_id, text, timestamp),
            }
            for text in messages
        ]
    return payload


class PositionsApi:
    """Performs the positions/chat exchange."""

    def __init__(self, transport: Transport, url: str, device_id: str) -> None:
        self._transport = transport
        self._url = url
        self._device_id = device_id

    async def exchange(
        self,
        coordinate: Coordinate | None,
        messages: Sequence[str] = (),
    ) -> PositionsResponse:
        payload = build_exchange_payload(self._device_id, coordinate, messages)
        body = await self._transport.post_json(self._url, payload)
        if not isinstance(body, dict):
            raise DecodeFailure(f"Expected an object, got {type(body).__name__}", endpoint=self._url)
        try:
            return PositionsResponse.from_api(body)
        except TypeError as exc:
            raise DecodeFailure(str(exc), endpoint=self._url) from exc


class HttpMessageTransport:
    """Delivers chat messages through the exchange endpoint.

    Reports success as a boolean; the error itself is logged.
    """

    def __init__(self, api: PositionsApi) -> None:
        self._api = api

    async def deliver(self, text: str) -> bool:
        try:
            await self._api.exchange(None, [text])
        except CriticalMapsError:
            _logger.warning("Chat message delivery failed", exc_info=True)
            return False
        return True
