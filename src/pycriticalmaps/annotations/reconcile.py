"""Pure diffing between two identifier-keyed entity collections."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Generic, TypeVar

E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class ReconcileDiff(Generic[E]):
    """Operations turning a previous collection into an incoming one.

    ``to_add`` and ``to_update`` follow the incoming insertion order,
    ``to_remove`` follows the previous collection's order.
    """

    to_add: tuple[E, ...] = field(default_factory=tuple)
    to_remove: tuple[str, ...] = field(default_factory=tuple)
    to_update: tuple[E, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not (self.to_add or self.to_remove or self.to_update)


def reconcile(previous: Mapping[str, E], incoming: Mapping[str, E]) -> ReconcileDiff[E]:
    """Compute the minimal add/remove/update operations.

    Entities present in both collections are only reported for update when
    they differ by value; neither mapping is modified.
    """
    to_add: list[E] = []
    to_update: list[E] = []
    for identifier, entity in incoming.items():
        if identifier not in previous:
            to_add.append(entity)
        elif previous[identifier] != entity:
            to_update.append(entity)

    to_remove = [identifier for identifier in previous if identifier not in incoming]

    return ReconcileDiff(
        to_add=tuple(to_add),
        to_remove=tuple(to_remove),
        to_update=tuple(to_update),
    )
