"""Custom exception hierarchy for pycriticalmaps."""

from __future__ import annotations


class CriticalMapsError(Exception):
    """Base exception for all pycriticalmaps errors."""


class CriticalMapsConfigError(CriticalMapsError):
    """Invalid or missing configuration."""


class NetworkFailure(CriticalMapsError):
    """Transport-level failure (connection error, timeout, non-200)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class DecodeFailure(CriticalMapsError):
    """Response could not be decoded into domain objects."""

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


class NoRideFound(CriticalMapsError):
    """Ride lookup succeeded but yielded no upcoming ride in range."""


class ValidationFailure(CriticalMapsError):
    """Caller-supplied input was rejected (e.g. empty chat text)."""
