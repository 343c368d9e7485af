"""Client configuration for pycriticalmaps."""

from __future__ import annotations

import dataclasses
import os
import uuid
from typing import Any

from pycriticalmaps._constants import (
    API_URL,
    DEFAULT_BUCKET_PRECISION,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    RIDES_URL,
)
from pycriticalmaps.exceptions import CriticalMapsConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class FeatureFlags:
    """Feature switches, fixed for the lifetime of a configuration.

    Flag names accepted by :meth:`is_active` follow the app's naming:
    ``friends``, ``events`` and ``errorHandler``.
    """

    friends: bool = False
    events: bool = False
    error_handler: bool = False

    _NAMES = {
        "friends": "friends",
        "events": "events",
        "errorHandler": "error_handler",
        "error_handler": "error_handler",
    }

    def is_active(self, name: str) -> bool:
        field_name = self._NAMES.get(name)
        if field_name is None:
            return False
        return bool(getattr(self, field_name))


@dataclasses.dataclass(frozen=True)
class CriticalMapsConfig:
    """Client configuration.

    Parameters
    ----------
    device_id : str
        Identifier this device reports its location under.
    api_url : str
        Positions/chat exchange endpoint.
    rides_url : str
        Ride lookup endpoint.
    poll_interval : float
        Seconds between two position exchanges.
    request_timeout : float
        Total timeout for a single HTTP request in seconds.
    ride_bucket_precision : int
        Decimal places kept when rounding a coordinate into a ride cache
        bucket.  ``2`` corresponds to roughly 1 km.
    features : FeatureFlags
        Feature switches.
    """

    device_id: str = dataclasses.field(default_factory=lambda: uuid.uuid4().hex)
    api_url: str = API_URL
    rides_url: str = RIDES_URL
    poll_interval: float = DEFAULT_POLL_INTERVAL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    ride_bucket_precision: int = DEFAULT_BUCKET_PRECISION
    features: FeatureFlags = dataclasses.field(default_factory=FeatureFlags)

    def __post_init__(self) -> None:
        if not self.device_id.strip():
            raise CriticalMapsConfigError("device_id must be non-empty")
        if self.poll_interval <= 0:
            raise CriticalMapsConfigError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.ride_bucket_precision < 0:
            raise CriticalMapsConfigError(
                f"ride_bucket_precision must not be negative, got {self.ride_bucket_precision}"
            )

    @classmethod
    def from_env(cls, **overrides: Any) -> CriticalMapsConfig:
        """Create configuration from environment variables.

        Reads ``CRITICALMAPS_*`` variables. Explicit keyword arguments
        override environment values.
        """
        env = os.environ

        feature_overrides = overrides.pop("features", None)
        if isinstance(feature_overrides, FeatureFlags):
            features = feature_overrides
        else:
            feature_kwargs: dict[str, bool] = {
                "friends": _env_bool(env.get("CRITICALMAPS_FEATURE_FRIENDS"), False),
                "events": _env_bool(env.get("CRITICALMAPS_FEATURE_EVENTS"), False),
                "error_handler": _env_bool(env.get("CRITICALMAPS_FEATURE_ERROR_HANDLER"), False),
            }
            if isinstance(feature_overrides, dict):
                feature_kwargs.update(feature_overrides)
            features = FeatureFlags(**feature_kwargs)

        _ENV_CONFIG_MAP = {
            "CRITICALMAPS_API_URL": "api_url",
            "CRITICALMAPS_RIDES_URL": "rides_url",
            "CRITICALMAPS_DEVICE_ID": "device_id",
        }
        config_kwargs: dict[str, Any] = {"features": features}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        interval_env = env.get("CRITICALMAPS_POLL_INTERVAL")
        if interval_env is not None and "poll_interval" not in overrides:
            try:
                config_kwargs["poll_interval"] = float(interval_env)
            except ValueError as exc:
                raise CriticalMapsConfigError(f"Invalid CRITICALMAPS_POLL_INTERVAL: {interval_env!r}") from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
