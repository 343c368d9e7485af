"""Positions exchange response."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pycriticalmaps.models.chat import ChatMessage
from pycriticalmaps.models.location import Location

_logger = logging.getLogger(__name__)


class PositionsResponse(BaseModel):
    """Decoded positions/chat snapshot.

    ``locations`` keeps the server's insertion order; entries that fail
    validation are skipped so one malformed participant never discards
    the whole snapshot.
    """

    model_config = ConfigDict(frozen=True)

    locations: dict[str, Location] = Field(default_factory=dict)
    chat_messages: dict[str, ChatMessage] = Field(default_factory=dict)

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> PositionsResponse:
        """Decode the raw ``{"locations": {...}, "chatMessages": {...}}`` body.

        Raises
        ------
        TypeError
            If the top-level sections are not objects.
        """
        raw_locations = payload.get("locations") or {}
        raw_messages = payload.get("chatMessages") or {}
        if not isinstance(raw_locations, Mapping) or not isinstance(raw_messages, Mapping):
            raise TypeError("locations and chatMessages must be objects")

        locations: dict[str, Location] = {}
        for identifier, entry in raw_locations.items():
            try:
                locations[str(identifier)] = Location.from_api(str(identifier), entry)
            except (ValidationError, TypeError, ValueError):
                _logger.debug("Skipping malformed location %s", identifier, exc_info=True)

        messages: dict[str, ChatMessage] = {}
        for identifier, entry in raw_messages.items():
            try:
                messages[str(identifier)] = ChatMessage.from_api(str(identifier), entry)
            except (ValidationError, TypeError, ValueError):
                _logger.debug("Skipping malformed chat message %s", identifier, exc_info=True)

        return cls(locations=locations, chat_messages=messages)
