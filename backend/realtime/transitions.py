"""
Conversation transitions, one per server event type.

(store, event[, input_audio]) -> (item | None, delta | None)

Rules:
- Synchronous: no IO, no clocks, no logging.
- Preconditions are checked before the first write, so a raised
  ConversationError leaves the store untouched.
- The returned item is the live stored record; RealtimeConversation
  snapshots it before it reaches a caller.
- delta is one of {"transcript"}, {"text"}, {"arguments"}, {"audio"} or None.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from audio.pcm import base64_to_int16, freeze, merge_int16, ms_to_sample_index
from constants import EMPTY_TRANSCRIPT_SENTINEL, PCM16_DTYPE
from realtime.enums.item import ContentPartType, ItemRole, ItemStatus, ItemType
from realtime.errors import (
    ItemNotFoundError,
    MissingItemError,
    ResponseNotFoundError,
)
from realtime.events import (
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
)
from realtime.items import (
    FormattedTool,
    Item,
    SpeechFragment,
    content_part_from_payload,
    item_from_payload,
    response_from_payload,
)
from realtime.store import ConversationStore

Delta = dict[str, Any]
TransitionResult = tuple[Item | None, Delta | None]

_TEXT_PART_TYPES = (ContentPartType.TEXT.value, ContentPartType.INPUT_TEXT.value)


# =============================================================================
# Small helpers
# =============================================================================

def _require_item(store: ConversationStore, event: ServerEvent, item_id: str) -> Item:
    item = store.get_item(item_id)
    if item is None:
        raise ItemNotFoundError(event.event_type.value, item_id)
    return item


def _formatted_transcript(transcript: str) -> str:
    # "" would read as "no transcript yet"
    return transcript or EMPTY_TRANSCRIPT_SENTINEL


# =============================================================================
# Conversation items
# =============================================================================

def item_created(store: ConversationStore, event: ItemCreated) -> TransitionResult:
    """
    Register a new item and merge anything queued for it.

    Idempotent: a known id returns the stored item unchanged.
    """
    item_id = str(event.item.get("id", ""))
    existing = store.get_item(item_id)
    if existing is not None:
        return existing, None

    item = item_from_payload(event.item)
    formatted = item.formatted

    # Speech window captured between speech_started and speech_stopped
    speech = store.consume_pending_speech(item.id)
    if speech is not None and speech.audio is not None:
        formatted.audio = speech.audio

    for part in item.content:
        if part.type in _TEXT_PART_TYPES:
            formatted.text += part.text or ""

    transcript = store.consume_pending_transcript(item.id)
    if transcript is not None:
        formatted.transcript = transcript

    if item.type == ItemType.MESSAGE.value:
        if item.role == ItemRole.USER.value:
            item.status = ItemStatus.COMPLETED.value
            queued = store.consume_queued_input_audio()
            if queued is not None:
                formatted.audio = queued
        else:
            item.status = ItemStatus.IN_PROGRESS.value
    elif item.type == ItemType.FUNCTION_CALL.value:
        formatted.tool = FormattedTool(
            name=item.name or "",
            call_id=item.call_id or "",
            arguments="",
        )
        item.status = ItemStatus.IN_PROGRESS.value
    elif item.type == ItemType.FUNCTION_CALL_OUTPUT.value:
        item.status = ItemStatus.COMPLETED.value
        formatted.output = item.output

    store.add_item(item)
    return item, None


def item_truncated(store: ConversationStore, event: ItemTruncated) -> TransitionResult:
    item = _require_item(store, event, event.item_id)

    end_index = ms_to_sample_index(event.audio_end_ms)
    item.formatted.transcript = ""
    item.formatted.audio = item.formatted.audio[:end_index]

    return item, None


def item_deleted(store: ConversationStore, event: ItemDeleted) -> TransitionResult:
    _require_item(store, event, event.item_id)
    return store.remove_item(event.item_id), None


def input_audio_transcription_completed(
    store: ConversationStore,
    event: InputAudioTranscriptionCompleted,
) -> TransitionResult:
    """
    Attach a user transcript, or queue it if the item does not exist yet.

    Transcripts can precede item.created in VAD mode when the audio was empty.
    """
    formatted_transcript = _formatted_transcript(event.transcript)

    item = store.get_item(event.item_id)
    if item is None:
        store.put_pending_transcript(event.item_id, formatted_transcript)
        return None, None

    if 0 <= event.content_index < len(item.content):
        item.content[event.content_index].transcript = event.transcript
    item.formatted.transcript = formatted_transcript

    return item, {"transcript": event.transcript}


# =============================================================================
# Input audio buffer (speech windows)
# =============================================================================

def speech_started(store: ConversationStore, event: SpeechStarted) -> TransitionResult:
    store.put_pending_speech(
        event.item_id,
        SpeechFragment(audio_start_ms=event.audio_start_ms),
    )
    return None, None


def speech_stopped(
    store: ConversationStore,
    event: SpeechStopped,
    input_audio: np.ndarray | None = None,
) -> TransitionResult:
    """
    Close the speech window for an item and cut its audio out of the
    caller's full input buffer.

    A stop without a start becomes a zero-length window at the stop time.
    """
    speech = store.pending_speech(event.item_id)
    if speech is None:
        speech = SpeechFragment(audio_start_ms=event.audio_end_ms)
        store.put_pending_speech(event.item_id, speech)

    speech.audio_end_ms = event.audio_end_ms

    if input_audio is not None:
        start_index = ms_to_sample_index(speech.audio_start_ms)
        end_index = ms_to_sample_index(speech.audio_end_ms)
        speech.audio = freeze(np.array(input_audio[start_index:end_index], dtype=PCM16_DTYPE))

    return None, None


# =============================================================================
# Responses
# =============================================================================

def response_created(store: ConversationStore, event: ResponseCreated) -> TransitionResult:
    response_id = str(event.response.get("id", ""))
    if store.get_response(response_id) is None:
        store.add_response(response_from_payload(event.response))
    return None, None


def response_output_item_added(
    store: ConversationStore,
    event: ResponseOutputItemAdded,
) -> TransitionResult:
    response = store.get_response(event.response_id)
    if response is None:
        raise ResponseNotFoundError(event.event_type.value, event.response_id)

    response.output.append(item_from_payload(event.item))
    return None, None


def response_output_item_done(
    store: ConversationStore,
    event: ResponseOutputItemDone,
) -> TransitionResult:
    if not event.item:
        raise MissingItemError(event.event_type.value)

    item = _require_item(store, event, str(event.item.get("id", "")))
    item.status = event.item.get("status")
    return item, None


def response_content_part_added(
    store: ConversationStore,
    event: ResponseContentPartAdded,
) -> TransitionResult:
    item = _require_item(store, event, event.item_id)
    item.content.append(content_part_from_payload(event.part))
    return item, None


# =============================================================================
# Streaming deltas
# =============================================================================

def response_audio_transcript_delta(
    store: ConversationStore,
    event: ResponseAudioTranscriptDelta,
) -> TransitionResult:
    item = _require_item(store, event, event.item_id)

    if 0 <= event.content_index < len(item.content):
        part = item.content[event.content_index]
        part.transcript = (part.transcript or "") + event.delta
    item.formatted.transcript += event.delta

    return item, {"transcript": event.delta}


def response_audio_delta(store: ConversationStore, event: ResponseAudioDelta) -> TransitionResult:
    item = _require_item(store, event, event.item_id)

    # content[].audio stays untouched; only the decoded buffer is kept
    append_values = base64_to_int16(event.delta)
    item.formatted.audio = merge_int16(item.formatted.audio, append_values)

    return item, {"audio": append_values}


def response_text_delta(store: ConversationStore, event: ResponseTextDelta) -> TransitionResult:
    item = _require_item(store, event, event.item_id)

    if 0 <= event.content_index < len(item.content):
        part = item.content[event.content_index]
        part.text = (part.text or "") + event.delta
    item.formatted.text += event.delta

    return item, {"text": event.delta}


def response_function_call_arguments_delta(
    store: ConversationStore,
    event: ResponseFunctionCallArgumentsDelta,
) -> TransitionResult:
    item = _require_item(store, event, event.item_id)

    item.arguments = (item.arguments or "") + event.delta
    if item.formatted.tool is not None:
        item.formatted.tool.arguments += event.delta

    return item, {"arguments": event.delta}
