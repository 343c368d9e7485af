"""JSON-over-HTTP transport."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pycriticalmaps._constants import USER_AGENT
from pycriticalmaps._redact import redact_for_log
from pycriticalmaps.exceptions import DecodeFailure, NetworkFailure

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the API modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(self, url: str, params: Mapping[str, str] | None = None) -> Any: ...

    async def post_json(self, url: str, payload: Mapping[str, Any]) -> Any: ...


class HttpTransport:
    """aiohttp-backed transport mapping failures onto the library's error types."""

    def __init__(self, http_session: aiohttp.ClientSession, *, timeout: float | None = None) -> None:
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout) if timeout else None

    async def get_json(self, url: str, params: Mapping[str, str] | None = None) -> Any:
        _logger.debug("GET %s params=%s", url, redact_for_log(dict(params or {})))
        return await self._request("GET", url, params=params)

    async def post_json(self, url: str, payload: Mapping[str, Any]) -> Any:
        _logger.debug("POST %s body=%s", url, redact_for_log(dict(payload)))
        return await self._request("POST", url, data=json.dumps(payload, separators=(",", ":")))

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        data: str | None = None,
    ) -> Any:
        headers = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        if data is not None:
            headers["content-type"] = "application/json; charset=UTF-8"

        kwargs: dict[str, Any] = {"params": params, "data": data, "headers": headers}
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout

        try:
            async with self._http.request(method, url, **kwargs) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise NetworkFailure(
                        f"HTTP {resp.status} from {url}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=url,
                    )
        except NetworkFailure:
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise NetworkFailure(f"Request to {url} failed: {exc}", endpoint=url) from exc

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise DecodeFailure(f"Invalid JSON from {url}: {text[:200]}", endpoint=url) from exc
