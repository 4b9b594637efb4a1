"""
RealtimeConversation: event dispatcher and read API over one conversation.

process(event, *side_inputs) -> (item | None, delta | None)

Rules:
- One instance models exactly one conversation.
- Calls must be serialized by the caller (one event at a time, in receipt
  order). There is no suspension, timer or background work inside.
- Every error is a ConversationError raised before any state is written.
- Everything handed out is a snapshot: mutating it never reaches the store.
"""

from __future__ import annotations

from typing import Any, Mapping

import numpy as np

from audio.pcm import freeze
from constants import PCM16_DTYPE
from realtime import transitions
from realtime.errors import MalformedEventError, UnsupportedEventError
from realtime.events import (
    EventType,
    InputAudioTranscriptionCompleted,
    ItemCreated,
    ItemDeleted,
    ItemTruncated,
    ResponseAudioDelta,
    ResponseAudioTranscriptDelta,
    ResponseContentPartAdded,
    ResponseCreated,
    ResponseFunctionCallArgumentsDelta,
    ResponseOutputItemAdded,
    ResponseOutputItemDone,
    ResponseTextDelta,
    ServerEvent,
    SpeechStarted,
    SpeechStopped,
    parse_event,
)
from realtime.items import Item, Response, snapshot_item, snapshot_response
from realtime.store import ConversationStore
from realtime.transitions import TransitionResult


class RealtimeConversation:
    """
    Conversation history rebuilt from realtime server events.

    Items and responses are kept in first-seen order. Speech windows and
    transcripts that arrive before their item are held until the item is
    created.
    """

    def __init__(self) -> None:
        self._store = ConversationStore()

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def process(
        self,
        event: ServerEvent | Mapping[str, Any],
        *side_inputs: Any,
    ) -> TransitionResult:
        """
        Apply one server event.

        event may be the decoded JSON mapping or an already parsed
        ServerEvent. The only side input is the full input-audio buffer
        for input_audio_buffer.speech_stopped; other events ignore it.

        Raises:
            MalformedEventError: envelope lacks event_id or type.
            UnsupportedEventError: no transition for the type.
            ItemNotFoundError / ResponseNotFoundError / MissingItemError:
                the event references state the conversation does not hold.
        """
        if not isinstance(event, ServerEvent):
            event = parse_event(event)
        elif not event.event_id:
            raise MalformedEventError('Missing "event_id" on event')
        elif not isinstance(event.event_type, EventType):
            raise MalformedEventError('Missing "type" on event')

        item, delta = self._dispatch(event, side_inputs)
        return (snapshot_item(item) if item is not None else None), delta

    def _dispatch(self, event: ServerEvent, side_inputs: tuple[Any, ...]) -> TransitionResult:
        store = self._store

        if isinstance(event, ItemCreated):
            return transitions.item_created(store, event)

        if isinstance(event, ItemTruncated):
            return transitions.item_truncated(store, event)

        if isinstance(event, ItemDeleted):
            return transitions.item_deleted(store, event)

        if isinstance(event, InputAudioTranscriptionCompleted):
            return transitions.input_audio_transcription_completed(store, event)

        if isinstance(event, SpeechStarted):
            return transitions.speech_started(store, event)

        if isinstance(event, SpeechStopped):
            input_audio = side_inputs[0] if side_inputs else None
            return transitions.speech_stopped(store, event, input_audio)

        if isinstance(event, ResponseCreated):
            return transitions.response_created(store, event)

        if isinstance(event, ResponseOutputItemAdded):
            return transitions.response_output_item_added(store, event)

        if isinstance(event, ResponseOutputItemDone):
            return transitions.response_output_item_done(store, event)

        if isinstance(event, ResponseContentPartAdded):
            return transitions.response_content_part_added(store, event)

        if isinstance(event, ResponseAudioTranscriptDelta):
            return transitions.response_audio_transcript_delta(store, event)

        if isinstance(event, ResponseAudioDelta):
            return transitions.response_audio_delta(store, event)

        if isinstance(event, ResponseTextDelta):
            return transitions.response_text_delta(store, event)

        if isinstance(event, ResponseFunctionCallArgumentsDelta):
            return transitions.response_function_call_arguments_delta(store, event)

        raise UnsupportedEventError(event.event_type.value)

    # ------------------------------------------------------------------
    # Caller-staged input
    # ------------------------------------------------------------------

    def queue_input_audio(self, samples: np.ndarray) -> None:
        """
        Stage input audio for the next user message item.

        Used when turn detection is off and the caller commits the input
        buffer manually; the next user item.created takes it as its audio.
        """
        self._store.queue_input_audio(freeze(np.array(samples, dtype=PCM16_DTYPE)))

    # ------------------------------------------------------------------
    # Read API
    # ------------------------------------------------------------------

    def get_item(self, item_id: str) -> Item | None:
        item = self._store.get_item(item_id)
        return snapshot_item(item) if item is not None else None

    def get_items(self) -> list[Item]:
        """All items in first-creation order, as an independent list."""
        return [snapshot_item(i) for i in self._store.items()]

    def get_response(self, response_id: str) -> Response | None:
        response = self._store.get_response(response_id)
        return snapshot_response(response) if response is not None else None

    def get_responses(self) -> list[Response]:
        return [snapshot_response(r) for r in self._store.responses()]

    def pending_counts(self) -> dict[str, int]:
        """Sizes of the pending fragment tables (observability only)."""
        return self._store.pending_counts()

    # ------------------------------------------------------------------
    # Reset
    # ------------------------------------------------------------------

    def clear(self) -> None:
        """Drop all items, responses, pending fragments and staged audio."""
        self._store.clear()
