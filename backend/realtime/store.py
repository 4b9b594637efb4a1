"""
Conversation state store.

Responsibilities:
- Own items and responses in first-seen order with O(1) lookup by id
- Own pending speech / transcript fragments that arrived before their item
- Own the input audio staged for the next user message

Non-responsibilities:
- No event interpretation (see realtime.transitions)
- No copying for callers (see RealtimeConversation accessors)

Invariants:
- items/responses are insertion-ordered dicts, so the ordered view and the
  lookup are one structure and cannot diverge
- a pending fragment is handed out by consume_* at most once
"""

from __future__ import annotations

import numpy as np

from realtime.items import Item, Response, SpeechFragment


class ConversationStore:
    """
    Mutable state owned by exactly one RealtimeConversation.

    Only transitions call the mutating methods.
    """

    def __init__(self) -> None:
        self._items: dict[str, Item] = {}
        self._responses: dict[str, Response] = {}
        self._pending_speech: dict[str, SpeechFragment] = {}
        self._pending_transcripts: dict[str, str] = {}
        self._queued_input_audio: np.ndarray | None = None

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def get_item(self, item_id: str) -> Item | None:
        return self._items.get(item_id)

    def items(self) -> list[Item]:
        """Items in first-creation order (new list, shared records)."""
        return list(self._items.values())

    def add_item(self, item: Item) -> bool:
        """Insert item; return False (and change nothing) if the id is known."""
        if item.id in self._items:
            return False
        self._items[item.id] = item
        return True

    def remove_item(self, item_id: str) -> Item | None:
        return self._items.pop(item_id, None)

    # ------------------------------------------------------------------
    # Responses
    # ------------------------------------------------------------------

    def get_response(self, response_id: str) -> Response | None:
        return self._responses.get(response_id)

    def responses(self) -> list[Response]:
        return list(self._responses.values())

    def add_response(self, response: Response) -> bool:
        if response.id in self._responses:
            return False
        self._responses[response.id] = response
        return True

    # ------------------------------------------------------------------
    # Pending speech fragments
    # ------------------------------------------------------------------

    def pending_speech(self, item_id: str) -> SpeechFragment | None:
        return self._pending_speech.get(item_id)

    def put_pending_speech(self, item_id: str, fragment: SpeechFragment) -> None:
        self._pending_speech[item_id] = fragment

    def consume_pending_speech(self, item_id: str) -> SpeechFragment | None:
        """Remove and return the speech fragment for item_id, if any."""
        return self._pending_speech.pop(item_id, None)

    # ------------------------------------------------------------------
    # Pending transcripts
    # ------------------------------------------------------------------

    def put_pending_transcript(self, item_id: str, transcript: str) -> None:
        self._pending_transcripts[item_id] = transcript

    def consume_pending_transcript(self, item_id: str) -> str | None:
        """Remove and return the queued transcript for item_id, if any."""
        return self._pending_transcripts.pop(item_id, None)

    # ------------------------------------------------------------------
    # Queued input audio
    # ------------------------------------------------------------------

    def queue_input_audio(self, samples: np.ndarray) -> None:
        self._queued_input_audio = samples

    def consume_queued_input_audio(self) -> np.ndarray | None:
        samples = self._queued_input_audio
        self._queued_input_audio = None
        return samples

    # ------------------------------------------------------------------
    # Introspection / reset
    # ------------------------------------------------------------------

    def pending_counts(self) -> dict[str, int]:
        return {
            "speech": len(self._pending_speech),
            "transcripts": len(self._pending_transcripts),
            "input_audio": 0 if self._queued_input_audio is None else 1,
        }

    def clear(self) -> None:
        self._items = {}
        self._responses = {}
        self._pending_speech = {}
        self._pending_transcripts = {}
        self._queued_input_audio = None
