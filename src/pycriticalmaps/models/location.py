"""Participant location snapshot."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from pycriticalmaps.models._base import Coordinate, CriticalMapsBaseModel, Degrees, epoch_seconds


class Location(CriticalMapsBaseModel):
    """A participant's reported position.

    Identity is ``id``: two locations with the same id describe the same
    participant, whatever their coordinates.

    Parameters
    ----------
    id : str
        Participant identifier (hashed device id).
    latitude : float
        Latitude in degrees.
    longitude : float
        Longitude in degrees.
    timestamp : int
        Report time in unix seconds.
    name : str or None
        Optional display name.
    color : str or None
        Optional marker colour.
    """

    id: Annotated[str, BeforeValidator(str)]
    latitude: Degrees = Field(ge=-90.0, le=90.0)
    longitude: Degrees = Field(ge=-180.0, le=180.0)
    timestamp: Annotated[int, BeforeValidator(epoch_seconds)] = 0
    name: str | None = None
    color: str | None = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)

    @classmethod
    def from_api(cls, identifier: str, payload: Mapping[str, Any]) -> Location:
        """Build a location from one entry of the positions API ``locations`` map."""
        return cls.model_validate({**payload, "id": identifier})
