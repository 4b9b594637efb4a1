"""
Conversation engine errors.

Every error here is raised synchronously out of RealtimeConversation.process
before any state is written for the offending event. Callers are expected to
log the error and drop the event; the engine never retries.
"""

from __future__ import annotations


class ConversationError(Exception):
    """Base class for conversation engine errors."""


class MalformedEventError(ConversationError):
    """
    Raised when an event envelope is missing its event_id or type.

    The event cannot be attributed or dispatched and must be dropped.
    """


class UnsupportedEventError(ConversationError):
    """
    Raised when no transition exists for an event type.

    Unknown events are never ignored silently: a gap here would leave the
    local conversation out of sync with the server.
    """

    def __init__(self, event_type: str) -> None:
        super().__init__(f'Missing realtime server event processor for "{event_type}"')
        self.event_type = event_type


class ItemNotFoundError(ConversationError):
    """Raised when an event references an item id the store does not hold."""

    def __init__(self, event_type: str, item_id: str) -> None:
        super().__init__(f'{event_type}: Item "{item_id}" not found')
        self.event_type = event_type
        self.item_id = item_id


class ResponseNotFoundError(ConversationError):
    """Raised when an event references a response id the store does not hold."""

    def __init__(self, event_type: str, response_id: str) -> None:
        super().__init__(f'{event_type}: Response "{response_id}" not found')
        self.event_type = event_type
        self.response_id = response_id


class MissingItemError(ConversationError):
    """Raised when an event that must carry an item payload has none."""

    def __init__(self, event_type: str) -> None:
        super().__init__(f'{event_type}: Missing "item"')
        self.event_type = event_type
