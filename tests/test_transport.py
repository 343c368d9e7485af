from __future__ import annotations

from typing import Any

import aiohttp
import pytest

from pycriticalmaps._transport import HttpTransport
from pycriticalmaps.exceptions import DecodeFailure, NetworkFailure


class _FakeResponse:
    def __init__(self, status: int, text: str) -> None:
        self.status = status
        self._text = text

    async def text(self) -> str:
        return self._text

    async def __aenter__(self) -> _FakeResponse:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


class _FakeSession:
    def __init__(self, status: int = 200, text: str = "{}", error: Exception | None = None) -> None:
        self.status = status
        self.text = text
        self.error = error
        self.requests: list[tuple[str, str, dict[str, Any]]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> _FakeResponse:
        self.requests.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        return _FakeResponse(self.status, self.text)


def _transport(session: _FakeSession) -> HttpTransport:
    return HttpTransport(session, timeout=5)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_get_json_decodes_body() -> None:
    session = _FakeSession(text='[{"id": 1}]')

    assert await _transport(session).get_json("https://x", params={"a": "1"}) == [{"id": 1}]

    method, url, kwargs = session.requests[0]
    assert (method, url) == ("GET", "https://x")
    assert kwargs["params"] == {"a": "1"}
    assert isinstance(kwargs["timeout"], aiohttp.ClientTimeout)


@pytest.mark.asyncio
async def test_post_json_sends_compact_body() -> None:
    session = _FakeSession(text='{"ok": true}')

    await _transport(session).post_json("https://x", {"device": "d", "n": 1})

    _method, _url, kwargs = session.requests[0]
    assert kwargs["data"] == '{"device":"d","n":1}'
    assert kwargs["headers"]["content-type"].startswith("application/json")


@pytest.mark.asyncio
async def test_non_200_maps_to_network_failure() -> None:
    with pytest.raises(NetworkFailure) as exc_info:
        await _transport(_FakeSession(status=503, text="busy")).get_json("https://x")
    assert exc_info.value.status_code == 503
    assert exc_info.value.endpoint == "https://x"


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [aiohttp.ClientConnectionError("refused"), TimeoutError()])
async def test_client_errors_map_to_network_failure(error: Exception) -> None:
    with pytest.raises(NetworkFailure):
        await _transport(_FakeSession(error=error)).get_json("https://x")


@pytest.mark.asyncio
async def test_invalid_json_maps_to_decode_failure() -> None:
    with pytest.raises(DecodeFailure):
        await _transport(_FakeSession(text="<html>")).get_json("https://x")
