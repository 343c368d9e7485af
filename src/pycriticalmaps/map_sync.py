"""High-level coordinator wiring positions, friends, rides and chat together."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

import aiohttp

from pycriticalmaps._api.positions import HttpMessageTransport, PositionsApi
from pycriticalmaps._api.rides import RideApi, RideQueryClient
from pycriticalmaps._transport import HttpTransport
from pycriticalmaps.annotations.controller import (
    FriendAnnotationController,
    PeerAnnotationController,
    RenderingSurface,
    RideAnnotationController,
)
from pycriticalmaps.chat import ChatDistributor, MessageTransport
from pycriticalmaps.config import CriticalMapsConfig
from pycriticalmaps.exceptions import CriticalMapsError, NoRideFound
from pycriticalmaps.friends import FriendRegistry, FriendVerifier, InMemoryFriendRegistry
from pycriticalmaps.models._base import Coordinate
from pycriticalmaps.models.entities import EntityKind
from pycriticalmaps.models.positions import PositionsResponse
from pycriticalmaps.models.ride import Ride
from pycriticalmaps.next_ride import NextRideLocator, RideResult
from pycriticalmaps.permissions import AccessPermission
from pycriticalmaps.poller import SnapshotPoller
from pycriticalmaps.preferences import InMemoryKeyValueStore, Preferences

_logger = logging.getLogger(__name__)


class MapSync:
    """Keeps the map and chat in sync with the Critical Maps backend.

    Usage::

        async with MapSync(config, surfaces) as sync:
            sync.set_access_permission(AccessPermission.AUTHORIZED)
            sync.start()
            sync.handle_location_update(Coordinate(52.52, 13.405))

    *surfaces* maps every entity kind to the surface its markers are drawn
    on.  Collaborators not passed in are built on top of an aiohttp session
    when the context is entered.
    """

    def __init__(
        self,
        config: CriticalMapsConfig,
        surfaces: Mapping[EntityKind, RenderingSurface],
        *,
        preferences: Preferences | None = None,
        friend_registry: FriendRegistry | None = None,
        ride_client: RideQueryClient | None = None,
        positions_api: PositionsApi | None = None,
        message_transport: MessageTransport | None = None,
        session: aiohttp.ClientSession | None = None,
        on_next_ride: Callable[[Ride], None] | None = None,
    ) -> None:
        self._config = config
        self._preferences = preferences if preferences is not None else Preferences(InMemoryKeyValueStore())
        self._verifier = FriendVerifier(friend_registry or InMemoryFriendRegistry())
        self._ride_client = ride_client
        self._positions_api = positions_api
        self._message_transport = message_transport
        self._external_session = session is not None
        self._http_session = session
        self._on_next_ride = on_next_ride

        self._permission = AccessPermission.UNDETERMINED
        self._own_coordinate: Coordinate | None = None
        self._surfaced_ride_id: str | None = None

        self.peers = PeerAnnotationController(surfaces[EntityKind.PEER])
        self.friends = FriendAnnotationController(
            surfaces[EntityKind.FRIEND],
            self._verifier,
            friends_enabled=lambda: config.features.friends,
            access_permission=lambda: self._permission,
        )
        self.rides = RideAnnotationController(surfaces[EntityKind.RIDE])

        self._locator: NextRideLocator | None = None
        self._chat: ChatDistributor | None = None
        self._poller: SnapshotPoller | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> MapSync:
        if self._ride_client is None or self._positions_api is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            transport = HttpTransport(self._http_session, timeout=self._config.request_timeout)
            if self._ride_client is None:
                self._ride_client = RideApi(transport, self._config.rides_url)
            if self._positions_api is None:
                self._positions_api = PositionsApi(transport, self._config.api_url, self._config.device_id)
        if self._message_transport is None:
            self._message_transport = HttpMessageTransport(self._positions_api)

        self._locator = NextRideLocator(
            self._ride_client,
            radius_km=lambda: self._preferences.next_ride_radius,
            bucket_precision=self._config.ride_bucket_precision,
        )
        self._chat = ChatDistributor(
            self._message_transport,
            preferences=self._preferences,
            sender_id=self._config.device_id,
        )
        self._poller = SnapshotPoller(
            self._positions_api,
            self._preferences,
            interval=self._config.poll_interval,
            own_coordinate=lambda: self._own_coordinate,
            on_snapshot=self.handle_snapshot,
        )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._poller is not None:
            await self._poller.stop()
        if self._locator is not None:
            await self._locator.cancel()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def preferences(self) -> Preferences:
        return self._preferences

    @property
    def chat(self) -> ChatDistributor:
        if self._chat is None:
            raise CriticalMapsError("MapSync not started. Use 'async with MapSync(...) as sync:'")
        return self._chat

    @property
    def locator(self) -> NextRideLocator:
        if self._locator is None:
            raise CriticalMapsError("MapSync not started. Use 'async with MapSync(...) as sync:'")
        return self._locator

    @property
    def poller(self) -> SnapshotPoller:
        if self._poller is None:
            raise CriticalMapsError("MapSync not started. Use 'async with MapSync(...) as sync:'")
        return self._poller

    @property
    def access_permission(self) -> AccessPermission:
        return self._permission

    @property
    def gps_disabled_overlay_visible(self) -> bool:
        return self._permission is AccessPermission.DENIED

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start periodic position exchanges."""
        self.poller.start()

    def set_access_permission(self, permission: AccessPermission) -> None:
        """Record the current location permission.

        Losing authorization clears the friend markers so they are not
        left on the map with stale positions.
        """
        self._permission = permission
        if not self.friends.is_gate_open:
            self.friends.clear()

    def handle_snapshot(self, response: PositionsResponse) -> None:
        """Render a positions snapshot and merge its chat messages."""
        self.peers.display(response.locations)
        self.friends.display(response.locations)
        if self._chat is not None and response.chat_messages:
            self._chat.refresh(response.chat_messages.values())

    def handle_location_update(self, coordinate: Coordinate) -> None:
        """React to a new own position: remember it and look up the next ride."""
        self._own_coordinate = coordinate
        if not self._config.features.events:
            return
        self.locator.get_next_ride(coordinate, self._on_ride_result)

    async def send_message(self, text: str, completion: Callable[[bool], None] | None = None) -> bool:
        return await self.chat.send(text, completion)

    def _on_ride_result(self, result: RideResult) -> None:
        if result.ride is None:
            if isinstance(result.error, NoRideFound) or not self._config.features.error_handler:
                _logger.debug("No next ride to show: %s", result.error)
            else:
                _logger.warning("Next ride lookup failed: %s", result.error)
            return

        ride = result.ride
        self.rides.display([ride])
        if ride.id == self._surfaced_ride_id:
            return
        self._surfaced_ride_id = ride.id
        if self._on_next_ride is not None:
            try:
                self._on_next_ride(ride)
            except Exception:
                _logger.debug("on_next_ride callback failed", exc_info=True)
