"""Chat message model."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import AliasChoices, Field

from pycriticalmaps.models._base import CriticalMapsBaseModel, EpochTimestamp


class ChatMessage(CriticalMapsBaseModel):
    """A single chat message.

    ``identifier`` is the server-side message key.  Messages sent from
    this device carry none until the server echoes them back.
    """

    text: str = Field(validation_alias=AliasChoices("text", "message"))
    timestamp: EpochTimestamp
    sender_id: str | None = Field(default=None, validation_alias=AliasChoices("senderId", "sender_id", "device"))
    identifier: str | None = None

    @classmethod
    def from_api(cls, identifier: str, payload: Mapping[str, Any]) -> ChatMessage:
        """Build a message from one entry of the positions API ``chatMessages`` map."""
        return cls.model_validate({**payload, "identifier": identifier})

    @property
    def echo_key(self) -> tuple[str, int]:
        """Text and whole-second timestamp.

        Used to pair a locally sent message with the copy the server
        returns on a later refresh.
        """
        return (self.text, int(self.timestamp.timestamp()))
