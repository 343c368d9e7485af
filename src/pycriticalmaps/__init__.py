"""pycriticalmaps - Async Python core for the Critical Maps ride map."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pycriticalmaps")
except PackageNotFoundError:
    __version__ = "0+local"
from pycriticalmaps.annotations import (
    AnnotationController,
    FriendAnnotationController,
    PeerAnnotationController,
    ReconcileDiff,
    RenderingSurface,
    RideAnnotationController,
    reconcile,
)
from pycriticalmaps.chat import ChatDistributor, MessageTransport, validate_chat_text
from pycriticalmaps.config import CriticalMapsConfig, FeatureFlags
from pycriticalmaps.exceptions import (
    CriticalMapsConfigError,
    CriticalMapsError,
    DecodeFailure,
    NetworkFailure,
    NoRideFound,
    ValidationFailure,
)
from pycriticalmaps.friends import FriendRegistry, FriendVerifier, InMemoryFriendRegistry
from pycriticalmaps.map_sync import MapSync
from pycriticalmaps.models import (
    ChatMessage,
    Coordinate,
    EntityKind,
    FriendEntity,
    Location,
    MapEntity,
    NextRideQuery,
    PeerEntity,
    PositionsResponse,
    Ride,
    RideEntity,
)
from pycriticalmaps.next_ride import LocatorState, NextRideLocator, RideResult
from pycriticalmaps.permissions import AccessPermission
from pycriticalmaps.preferences import InMemoryKeyValueStore, KeyValueStore, Preferences

__all__ = [
    "__version__",
    "AccessPermission",
    "AnnotationController",
    "ChatDistributor",
    "ChatMessage",
    "Coordinate",
    "CriticalMapsConfig",
    "CriticalMapsConfigError",
    "CriticalMapsError",
    "DecodeFailure",
    "EntityKind",
    "FeatureFlags",
    "FriendAnnotationController",
    "FriendEntity",
    "FriendRegistry",
    "FriendVerifier",
    "InMemoryFriendRegistry",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "Location",
    "LocatorState",
    "MapEntity",
    "MapSync",
    "MessageTransport",
    "NetworkFailure",
    "NextRideLocator",
    "NextRideQuery",
    "NoRideFound",
    "PeerAnnotationController",
    "PeerEntity",
    "PositionsResponse",
    "Preferences",
    "ReconcileDiff",
    "RenderingSurface",
    "Ride",
    "RideAnnotationController",
    "RideEntity",
    "RideResult",
    "ValidationFailure",
    "reconcile",
    "validate_chat_text",
]
