"""Base model and shared coercions for Critical Maps payloads.

Every wire model inherits from :class:`CriticalMapsBaseModel` which
provides:

* ``alias_generator=to_camel`` so camelCase API keys map
  automatically to snake_case fields.
* A ``model_validator(mode="before")`` that strips empty sentinel
  values (``""``, NaN) so the field default is used.
* A ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Annotated, Any, NamedTuple

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from pycriticalmaps._constants import MICRO_DEGREE_THRESHOLD, MS_THRESHOLD

_SENTINELS = frozenset({"", "NaN", "nan"})


class Coordinate(NamedTuple):
    """A WGS84 position in degrees."""

    latitude: float
    longitude: float


def parse_epoch_timestamp(value: Any) -> datetime | None:
    """Convert an epoch timestamp (seconds **or** milliseconds) to a UTC datetime.

    Returns ``None`` when the value is ``None``.
    """
    if value is None:
        return value
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value
    ts = int(float(value))
    if ts >= MS_THRESHOLD:
        ts = ts // 1000
    return datetime.fromtimestamp(ts, tz=UTC)


def epoch_seconds(value: Any) -> int:
    """Normalize an epoch timestamp in seconds or milliseconds to seconds."""
    ts = int(float(value))
    if ts >= MS_THRESHOLD:
        ts //= 1000
    return ts


def degrees(value: Any) -> float:
    """Normalize a coordinate component to degrees.

    The positions API reports micro-degrees as integers; anything outside
    the valid degree range is treated as such.
    """
    result = float(value)
    if abs(result) > MICRO_DEGREE_THRESHOLD:
        result /= 1_000_000
    return result


EpochTimestamp = Annotated[datetime, BeforeValidator(parse_epoch_timestamp)]
"""Annotated type that coerces epoch ints (seconds or ms) to UTC datetimes."""

Degrees = Annotated[float, BeforeValidator(degrees)]
"""Annotated type that accepts degrees or micro-degrees."""


class CriticalMapsBaseModel(BaseModel):
    """Base for Critical Maps wire models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True, repr=False)
    """Original API payload."""

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        """Strip sentinel values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        original = dict(values)

        cleaned: dict[str, Any] = {}
        for key, value in original.items():
            if value is None:
                continue
            if isinstance(value, str) and value.strip() in _SENTINELS:
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value

        # Keep an explicitly supplied raw= (keyword construction).
        if "raw" not in values:
            cleaned["raw"] = original
        return cleaned
