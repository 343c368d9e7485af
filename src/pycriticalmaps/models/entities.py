"""Map entities: anything placed on the map with an identifier and a coordinate.

Entities are immutable value objects.  Equality is value equality over
every field, which is what the reconciler uses to decide whether an
entity already on the map needs an in-place update.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import ClassVar, Protocol, runtime_checkable

from pycriticalmaps.models._base import Coordinate
from pycriticalmaps.models.location import Location
from pycriticalmaps.models.ride import Ride


class EntityKind(StrEnum):
    PEER = "peer"
    FRIEND = "friend"
    RIDE = "ride"


@runtime_checkable
class IdentifiableEntity(Protocol):
    """Structural interface for map-placeable objects."""

    @property
    def identifier(self) -> str: ...

    @property
    def coordinate(self) -> Coordinate: ...


@dataclass(frozen=True, slots=True)
class MapEntity:
    """Common fields of every map entity."""

    kind: ClassVar[EntityKind]

    identifier: str
    latitude: float
    longitude: float
    name: str | None = None
    color: str | None = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)


@dataclass(frozen=True, slots=True)
class PeerEntity(MapEntity):
    """An anonymous rider."""

    kind: ClassVar[EntityKind] = EntityKind.PEER

    @classmethod
    def from_location(cls, location: Location) -> PeerEntity:
        return cls(
            identifier=location.id,
            latitude=location.latitude,
            longitude=location.longitude,
            name=location.name,
            color=location.color,
        )


@dataclass(frozen=True, slots=True)
class FriendEntity(MapEntity):
    """A rider whose id is in the local friend registry."""

    kind: ClassVar[EntityKind] = EntityKind.FRIEND

    @classmethod
    def from_location(cls, location: Location) -> FriendEntity:
        return cls(
            identifier=location.id,
            latitude=location.latitude,
            longitude=location.longitude,
            name=location.name,
            color=location.color,
        )


@dataclass(frozen=True, slots=True)
class RideEntity(MapEntity):
    """Marker for an upcoming organized ride."""

    kind: ClassVar[EntityKind] = EntityKind.RIDE

    start_time: datetime | None = None

    @classmethod
    def from_ride(cls, ride: Ride) -> RideEntity:
        return cls(
            identifier=ride.id,
            latitude=ride.latitude,
            longitude=ride.longitude,
            name=ride.title,
            start_time=ride.start_time,
        )
