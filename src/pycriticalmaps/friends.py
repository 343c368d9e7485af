"""Friend verification.

The registry of friend ids is owned elsewhere (it is where friends get
added and removed); this module only reads it.
"""

from __future__ import annotations

from collections.abc import Iterable, Set
from typing import Protocol


class FriendRegistry(Protocol):
    """Read-only view over the set of friend ids."""

    @property
    def friend_ids(self) -> Set[str]: ...


class InMemoryFriendRegistry:
    """Default registry keeping friend ids in a set."""

    def __init__(self, friend_ids: Iterable[str] = ()) -> None:
        self._ids: set[str] = set(friend_ids)

    @property
    def friend_ids(self) -> Set[str]:
        return self._ids

    def add(self, friend_id: str) -> None:
        self._ids.add(friend_id)

    def remove(self, friend_id: str) -> None:
        self._ids.discard(friend_id)


class FriendVerifier:
    """Decides whether a participant id belongs to a friend.

    ``is_friend`` is total: unknown, empty or even non-string ids yield
    ``False`` rather than an exception.  Lookups are set membership tests.
    """

    def __init__(self, registry: FriendRegistry) -> None:
        self._registry = registry

    def is_friend(self, participant_id: str) -> bool:
        try:
            return participant_id in self._registry.friend_ids
        except TypeError:
            # unhashable id
            return False
