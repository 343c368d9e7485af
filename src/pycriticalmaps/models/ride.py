"""Ride event models and the ride lookup query."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import AliasChoices, BeforeValidator, Field

from pycriticalmaps.models._base import Coordinate, CriticalMapsBaseModel, Degrees, EpochTimestamp


class Ride(CriticalMapsBaseModel):
    """An organized ride event.

    Parameters
    ----------
    id : str
        Ride identifier.
    title : str
        Human readable title, e.g. ``"Critical Mass Berlin 29.03.2024"``.
    start_time : datetime
        Scheduled start (UTC).
    latitude, longitude : float
        Meeting point in degrees.
    location : str or None
        Meeting point description.
    description : str or None
        Free text description.
    """

    id: Annotated[str, BeforeValidator(str)]
    title: str = ""
    start_time: EpochTimestamp = Field(validation_alias=AliasChoices("dateTime", "startTime", "start_time"))
    latitude: Degrees
    longitude: Degrees
    location: str | None = None
    description: str | None = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)

    @property
    def title_and_time(self) -> str:
        """Banner text: title followed by the local start time."""
        return f"{self.title} - {self.start_time.astimezone().strftime('%H:%M')}"


class NextRideQuery(CriticalMapsBaseModel):
    """Query parameters for the ride lookup endpoint.

    ``year`` and ``month`` are always those of the moment the query is
    built; callers must not reuse a query across calls.
    """

    center_latitude: float
    center_longitude: float
    radius: int
    year: int
    month: int

    def to_params(self) -> dict[str, Any]:
        """Serialize as camelCase query parameters."""
        return {key: str(value) for key, value in self.model_dump(by_alias=True).items()}
