"""Annotation controllers.

One controller per entity kind owns the set of entities currently shown
for that kind and pushes reconciliation results to a rendering surface.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Generic, Protocol, TypeVar

from pycriticalmaps.annotations.reconcile import ReconcileDiff, reconcile
from pycriticalmaps.friends import FriendVerifier
from pycriticalmaps.models.entities import EntityKind, FriendEntity, MapEntity, PeerEntity, RideEntity
from pycriticalmaps.models.location import Location
from pycriticalmaps.models.ride import Ride
from pycriticalmaps.permissions import AccessPermission

_logger = logging.getLogger(__name__)

E = TypeVar("E", bound=MapEntity)


class RenderingSurface(Protocol):
    """Where entities end up being drawn.

    Implementations are expected to tolerate duplicate-id adds (log and
    ignore).  Any exception raised by a call is treated as a rejection of
    that single operation.
    """

    def add_entities(self, entities: Sequence[MapEntity]) -> None: ...

    def remove_entities(self, identifiers: Sequence[str]) -> None: ...

    def update_entities(self, entities: Sequence[MapEntity]) -> None: ...


class AnnotationController(Generic[E]):
    """Keeps a rendering surface in sync with the latest batch of entities."""

    kind: EntityKind

    def __init__(self, surface: RenderingSurface) -> None:
        self._surface = surface
        self._entities: dict[str, E] = {}

    @property
    def entities(self) -> Mapping[str, E]:
        """Snapshot of the live set, keyed by identifier."""
        return dict(self._entities)

    def update(self, incoming: Iterable[E]) -> ReconcileDiff[E]:
        """Reconcile the live set against *incoming* and render the difference.

        Later entities in *incoming* replace earlier ones with the same
        identifier.  Removals are applied before additions, additions
        before in-place updates.
        """
        batch: dict[str, E] = {}
        for entity in incoming:
            batch[entity.identifier] = entity

        diff = reconcile(self._entities, batch)
        self._apply(diff)
        self._entities = batch
        return diff

    def clear(self) -> None:
        """Remove every entity this controller has put on the surface."""
        if not self._entities:
            return
        self.update(())

    def _apply(self, diff: ReconcileDiff[E]) -> None:
        if diff.to_remove:
            self._render("remove", self._surface.remove_entities, list(diff.to_remove))
        if diff.to_add:
            self._render("add", self._surface.add_entities, list(diff.to_add))
        if diff.to_update:
            self._render("update", self._surface.update_entities, list(diff.to_update))

    def _render(self, operation: str, call: Callable[[list], None], items: list) -> None:
        try:
            call(items)
        except Exception:
            _logger.warning(
                "Rendering surface rejected %s of %d %s entities",
                operation,
                len(items),
                self.kind,
                exc_info=True,
            )


class PeerAnnotationController(AnnotationController[PeerEntity]):
    """Anonymous riders: every participant of the latest snapshot."""

    kind = EntityKind.PEER

    def display(self, locations: Mapping[str, Location]) -> ReconcileDiff[PeerEntity]:
        return self.update(PeerEntity.from_location(location) for location in locations.values())


class FriendAnnotationController(AnnotationController[FriendEntity]):
    """Participants found in the friend registry.

    Snapshots are only displayed while the ``friends`` feature is enabled
    and location access is authorized; otherwise the live set is left as
    it is and the caller decides whether to :meth:`clear` it.
    """

    kind = EntityKind.FRIEND

    def __init__(
        self,
        surface: RenderingSurface,
        verifier: FriendVerifier,
        *,
        friends_enabled: Callable[[], bool],
        access_permission: Callable[[], AccessPermission],
    ) -> None:
        super().__init__(surface)
        self._verifier = verifier
        self._friends_enabled = friends_enabled
        self._access_permission = access_permission

    @property
    def is_gate_open(self) -> bool:
        return self._friends_enabled() and self._access_permission() is AccessPermission.AUTHORIZED

    def display(self, locations: Mapping[str, Location]) -> ReconcileDiff[FriendEntity] | None:
        """Show the friends among *locations*; returns ``None`` when gated off."""
        if not self._friends_enabled():
            return None
        permission = self._access_permission()
        if permission is not AccessPermission.AUTHORIZED:
            _logger.info("Friend annotations not displayed, location access is %s", permission)
            return None
        return self.update(
            FriendEntity.from_location(location)
            for identifier, location in locations.items()
            if self._verifier.is_friend(identifier)
        )


class RideAnnotationController(AnnotationController[RideEntity]):
    """Marker for the next ride."""

    kind = EntityKind.RIDE

    def display(self, rides: Iterable[Ride]) -> ReconcileDiff[RideEntity]:
        return self.update(RideEntity.from_ride(ride) for ride in rides)
