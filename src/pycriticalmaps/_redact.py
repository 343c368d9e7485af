"""Helpers for safe debug logging.

Exchange requests carry the device identifier, the user's exact position
and chat content.  :func:`redact_for_log` hides identifiers, coarsens
coordinates and replaces message text by its length before a payload is
emitted in DEBUG logs.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pycriticalmaps.models._base import degrees

_IDENTIFYING_KEYS: frozenset[str] = frozenset(
    {"device", "deviceid", "device_id", "identifier", "username", "name", "token", "friendtoken"}
)
_COORDINATE_KEYS: frozenset[str] = frozenset(
    {"latitude", "longitude", "centerlatitude", "centerlongitude", "center_latitude", "center_longitude"}
)
_CONTENT_KEYS: frozenset[str] = frozenset({"text", "message"})

# ~11 km; enough to tell which city a request was for.
_COORDINATE_DIGITS = 1


def _coarsen(value: Any) -> Any:
    try:
        return round(degrees(value), _COORDINATE_DIGITS)
    except (TypeError, ValueError):
        return "<redacted>"


def redact_for_log(value: Any, *, max_string: int = 256, _depth: int = 0) -> Any:
    """Return a redacted copy of *value* suitable for debug logs."""
    if _depth > 20:
        return "<max-depth>"

    if value is None or isinstance(value, (bool, int, float)):
        return value

    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"

    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for k, v in value.items():
            key = str(k)
            lowered = key.lower()
            if lowered in _IDENTIFYING_KEYS:
                redacted[key] = "<redacted>"
            elif lowered in _COORDINATE_KEYS:
                redacted[key] = _coarsen(v)
            elif lowered in _CONTENT_KEYS and isinstance(v, str):
                redacted[key] = f"<text:{len(v)} chars>"
            else:
                redacted[key] = redact_for_log(v, max_string=max_string, _depth=_depth + 1)
        return redacted

    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value]

    return repr(value)
