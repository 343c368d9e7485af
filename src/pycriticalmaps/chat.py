"""Chat message distribution.

Keeps the ordered, append-only message list and tells observers about
changes.  Observers always receive the full list.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, datetime
from typing import Protocol

from pycriticalmaps.exceptions import ValidationFailure
from pycriticalmaps.models.chat import ChatMessage
from pycriticalmaps.preferences import Preferences

_logger = logging.getLogger(__name__)

MessagesObserver = Callable[[Sequence[ChatMessage]], None]


class MessageTransport(Protocol):
    async def deliver(self, text: str) -> bool: ...


def is_sendable(text: str) -> bool:
    return isinstance(text, str) and bool(text.strip())


def validate_chat_text(text: str) -> str:
    """Boundary check for user input; returns the text unchanged.

    Raises
    ------
    ValidationFailure
        If *text* is empty or whitespace only.
    """
    if not is_sendable(text):
        raise ValidationFailure("Chat message must not be empty")
    return text


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ChatDistributor:
    """Sends chat messages and distributes the message list to observers."""

    def __init__(
        self,
        transport: MessageTransport,
        *,
        preferences: Preferences | None = None,
        sender_id: str | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._transport = transport
        self._preferences = preferences
        self._sender_id = sender_id
        self._clock = clock
        self._messages: list[ChatMessage] = []
        self._known_ids: set[str] = set()
        self._pending_echoes: Counter[tuple[str, int]] = Counter()
        self._observers: list[MessagesObserver] = []

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        return tuple(self._messages)

    def subscribe(self, observer: MessagesObserver) -> Callable[[], None]:
        """Register *observer*; returns a callable that unregisters it."""
        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    async def send(self, text: str, completion: Callable[[bool], None] | None = None) -> bool:
        """Deliver *text* and append it to the message list on success.

        Empty or whitespace-only text is rejected without contacting the
        transport.  The outcome is both returned and passed to *completion*.
        """
        if not is_sendable(text):
            _logger.debug("Rejected empty chat message")
            return self._complete(completion, False)

        delivered = await self._transport.deliver(text)
        if not delivered:
            _logger.info("Chat message was not delivered")
            return self._complete(completion, False)

        message = ChatMessage(text=text, timestamp=self._clock(), sender_id=self._sender_id)
        self._messages.append(message)
        self._pending_echoes[message.echo_key] += 1
        self._notify()
        return self._complete(completion, True)

    def refresh(self, messages: Iterable[ChatMessage]) -> bool:
        """Merge a server-side message list.

        Messages with an unseen identifier are appended in timestamp order;
        nothing already in the list moves.  The server copy of a message
        sent from this device is not appended again: each local send
        absorbs exactly one matching server message.  Returns whether the
        list changed.
        """
        changed = False
        for message in sorted(messages, key=lambda m: m.timestamp):
            if not self._accept(message):
                continue
            self._messages.append(message)
            changed = True
        if changed:
            self._notify()
        return changed

    @property
    def unread_count(self) -> int:
        if self._preferences is None:
            return 0
        last_read = self._preferences.last_message_read_time
        return sum(1 for message in self._messages if message.timestamp.timestamp() > last_read)

    def mark_read(self) -> None:
        """Persist the newest message's timestamp as read."""
        if self._preferences is None or not self._messages:
            return
        newest = max(message.timestamp for message in self._messages)
        self._preferences.last_message_read_time = newest.timestamp()

    def _accept(self, message: ChatMessage) -> bool:
        """Whether a server message is new to the list."""
        if message.identifier is None:
            return True
        if message.identifier in self._known_ids:
            return False
        self._known_ids.add(message.identifier)
        key = message.echo_key
        if self._pending_echoes[key] > 0:
            self._pending_echoes[key] -= 1
            _logger.debug("Matched server copy of own chat message %s", message.identifier)
            return False
        return True

    def _notify(self) -> None:
        snapshot = self.messages
        for observer in list(self._observers):
            try:
                observer(snapshot)
            except Exception:
                _logger.debug("chat observer failed", exc_info=True)

    @staticmethod
    def _complete(completion: Callable[[bool], None] | None, success: bool) -> bool:
        if completion is not None:
            try:
                completion(success)
            except Exception:
                _logger.debug("chat send completion failed", exc_info=True)
        return success
