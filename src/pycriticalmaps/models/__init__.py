"""Data models for Critical Maps payloads and map entities."""

from pycriticalmaps.models._base import (
    Coordinate,
    CriticalMapsBaseModel,
    EpochTimestamp,
    degrees,
    epoch_seconds,
    parse_epoch_timestamp,
)
from pycriticalmaps.models.chat import ChatMessage
from pycriticalmaps.models.entities import (
    EntityKind,
    FriendEntity,
    IdentifiableEntity,
    MapEntity,
    PeerEntity,
    RideEntity,
)
from pycriticalmaps.models.location import Location
from pycriticalmaps.models.positions import PositionsResponse
from pycriticalmaps.models.ride import NextRideQuery, Ride

__all__ = [
    "ChatMessage",
    "Coordinate",
    "CriticalMapsBaseModel",
    "EntityKind",
    "EpochTimestamp",
    "FriendEntity",
    "IdentifiableEntity",
    "Location",
    "MapEntity",
    "NextRideQuery",
    "PeerEntity",
    "PositionsResponse",
    "Ride",
    "RideEntity",
    "degrees",
    "epoch_seconds",
    "parse_epoch_timestamp",
]
