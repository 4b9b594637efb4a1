"""
Server event definitions consumed by the conversation engine.

Rules:
- Events describe facts the server has reported.
- Events carry data only (no behavior).
- Every event the engine has a transition for exists here, and nothing else:
  parse_event() refuses any other type.
- Payload objects (item, part, response) are kept as read-only mappings;
  transitions build their own records from them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from realtime.errors import MalformedEventError, UnsupportedEventError


# =============================================================================
# Event Type Enumeration
# =============================================================================

class EventType(str, Enum):
    """
    Server event types the conversation engine applies.

    Values are the wire discriminators.
    """

    # ------------------------------------------------------------------
    # Conversation items
    # ------------------------------------------------------------------
    ITEM_CREATED = "conversation.item.created"
    ITEM_TRUNCATED = "conversation.item.truncated"
    ITEM_DELETED = "conversation.item.deleted"
    INPUT_AUDIO_TRANSCRIPTION_COMPLETED = (
        "conversation.item.input_audio_transcription.completed"
    )

    # ------------------------------------------------------------------
    # Input audio buffer (server VAD)
    # ------------------------------------------------------------------
    SPEECH_STARTED = "input_audio_buffer.speech_started"
    SPEECH_STOPPED = "input_audio_buffer.speech_stopped"

    # ------------------------------------------------------------------
    # Responses
    # ------------------------------------------------------------------
    RESPONSE_CREATED = "response.created"
    RESPONSE_OUTPUT_ITEM_ADDED = "response.output_item.added"
    RESPONSE_OUTPUT_ITEM_DONE = "response.output_item.done"
    RESPONSE_CONTENT_PART_ADDED = "response.content_part.added"

    # ------------------------------------------------------------------
    # Streaming deltas
    # ------------------------------------------------------------------
    RESPONSE_AUDIO_TRANSCRIPT_DELTA = "response.audio_transcript.delta"
    RESPONSE_AUDIO_DELTA = "response.audio.delta"
    RESPONSE_TEXT_DELTA = "response.text.delta"
    RESPONSE_FUNCTION_CALL_ARGUMENTS_DELTA = "response.function_call_arguments.delta"


SUPPORTED_EVENT_TYPES: frozenset[str] = frozenset(t.value for t in EventType)


# =============================================================================
# Base Event
# =============================================================================

@dataclass(frozen=True)
class ServerEvent:
    """
    Base event type.

    All events carry:
    - event_id: unique id assigned by the server
    - event_type: discriminant
    """

    event_id: str
    event_type: EventType


# =============================================================================
# Conversation item events
# =============================================================================

@dataclass(frozen=True)
class ItemCreated(ServerEvent):
    item: Mapping[str, Any]
    previous_item_id: str | None = None


@dataclass(frozen=True)
class ItemTruncated(ServerEvent):
    item_id: str
    content_index: int
    audio_end_ms: int


@dataclass(frozen=True)
class ItemDeleted(ServerEvent):
    item_id: str


@dataclass(frozen=True)
class InputAudioTranscriptionCompleted(ServerEvent):
    item_id: str
    content_index: int
    transcript: str


# =============================================================================
# Input audio buffer events
# =============================================================================

@dataclass(frozen=True)
class SpeechStarted(ServerEvent):
    item_id: str
    audio_start_ms: int


@dataclass(frozen=True)
class SpeechStopped(ServerEvent):
    item_id: str
    audio_end_ms: int


# =============================================================================
# Response events
# =============================================================================

@dataclass(frozen=True)
class ResponseCreated(ServerEvent):
    response: Mapping[str, Any]


@dataclass(frozen=True)
class ResponseOutputItemAdded(ServerEvent):
    response_id: str
    output_index: int
    item: Mapping[str, Any]


@dataclass(frozen=True)
class ResponseOutputItemDone(ServerEvent):
    response_id: str
    output_index: int
    item: Mapping[str, Any] | None


@dataclass(frozen=True)
class ResponseContentPartAdded(ServerEvent):
    response_id: str
    item_id: str
    output_index: int
    content_index: int
    part: Mapping[str, Any]


# =============================================================================
# Delta events
# =============================================================================

@dataclass(frozen=True)
class ContentDelta(ServerEvent):
    """
    Shared shape of the streaming delta events.

    delta is UTF-8 text, except for ResponseAudioDelta where it is base64
    PCM16.
    """

    response_id: str
    item_id: str
    output_index: int
    content_index: int
    delta: str


@dataclass(frozen=True)
class ResponseAudioTranscriptDelta(ContentDelta):
    pass


@dataclass(frozen=True)
class ResponseAudioDelta(ContentDelta):
    pass


@dataclass(frozen=True)
class ResponseTextDelta(ContentDelta):
    pass


@dataclass(frozen=True)
class ResponseFunctionCallArgumentsDelta(ServerEvent):
    response_id: str
    item_id: str
    output_index: int
    call_id: str
    delta: str


# =============================================================================
# Parsing
# =============================================================================

def _frozen(payload: Any) -> Mapping[str, Any]:
    return MappingProxyType(dict(payload or {}))


def _int(raw: Mapping[str, Any], key: str) -> int:
    try:
        return int(raw.get(key) or 0)
    except (TypeError, ValueError) as e:
        raise MalformedEventError(f'Invalid "{key}" on event: {raw.get(key)!r}') from e


def _str(raw: Mapping[str, Any], key: str) -> str:
    value = raw.get(key)
    return "" if value is None else str(value)


def parse_event(raw: Mapping[str, Any]) -> ServerEvent:
    """
    Validate the envelope of a decoded server event and build its typed form.

    Raises:
        MalformedEventError: event_id or type missing/empty.
        UnsupportedEventError: type has no transition.

    Only the envelope is validated; type-specific fields default to empty
    values when absent.
    """
    event_id = raw.get("event_id")
    if not event_id:
        raise MalformedEventError('Missing "event_id" on event')

    type_str = raw.get("type")
    if not type_str:
        raise MalformedEventError('Missing "type" on event')

    if type_str not in SUPPORTED_EVENT_TYPES:
        raise UnsupportedEventError(str(type_str))

    event_type = EventType(type_str)
    event_id = str(event_id)

    if event_type is EventType.ITEM_CREATED:
        return ItemCreated(
            event_id=event_id,
            event_type=event_type,
            item=_frozen(raw.get("item")),
            previous_item_id=raw.get("previous_item_id"),
        )

    if event_type is EventType.ITEM_TRUNCATED:
        return ItemTruncated(
            event_id=event_id,
            event_type=event_type,
            item_id=_str(raw, "item_id"),
            content_index=_int(raw, "content_index"),
            audio_end_ms=_int(raw, "audio_end_ms"),
        )

    if event_type is EventType.ITEM_DELETED:
        return ItemDeleted(
            event_id=event_id,
            event_type=event_type,
            item_id=_str(raw, "item_id"),
        )

    if event_type is EventType.INPUT_AUDIO_TRANSCRIPTION_COMPLETED:
        return InputAudioTranscriptionCompleted(
            event_id=event_id,
            event_type=event_type,
            item_id=_str(raw, "item_id"),
            content_index=_int(raw, "content_index"),
            transcript=_str(raw, "transcript"),
        )

    if event_type is EventType.SPEECH_STARTED:
        return SpeechStarted(
            event_id=event_id,
            event_type=event_type,
            item_id=_str(raw, "item_id"),
            audio_start_ms=_int(raw, "audio_start_ms"),
        )

    if event_type is EventType.SPEECH_STOPPED:
        return SpeechStopped(
            event_id=event_id,
            event_type=event_type,
            item_id=_str(raw, "item_id"),
            audio_end_ms=_int(raw, "audio_end_ms"),
        )

    if event_type is EventType.RESPONSE_CREATED:
        return ResponseCreated(
            event_id=event_id,
            event_type=event_type,
            response=_frozen(raw.get("response")),
        )

    if event_type is EventType.RESPONSE_OUTPUT_ITEM_ADDED:
        return ResponseOutputItemAdded(
            event_id=event_id,
            event_type=event_type,
            response_id=_str(raw, "response_id"),
            output_index=_int(raw, "output_index"),
            item=_frozen(raw.get("item")),
        )

    if event_type is EventType.RESPONSE_OUTPUT_ITEM_DONE:
        item = raw.get("item")
        return ResponseOutputItemDone(
            event_id=event_id,
            event_type=event_type,
            response_id=_str(raw, "response_id"),
            output_index=_int(raw, "output_index"),
            item=_frozen(item) if item else None,
        )

    if event_type is EventType.RESPONSE_CONTENT_PART_ADDED:
        return ResponseContentPartAdded(
            event_id=event_id,
            event_type=event_type,
            response_id=_str(raw, "response_id"),
            item_id=_str(raw, "item_id"),
            output_index=_int(raw, "output_index"),
            content_index=_int(raw, "content_index"),
            part=_frozen(raw.get("part")),
        )

    if event_type is EventType.RESPONSE_FUNCTION_CALL_ARGUMENTS_DELTA:
        return ResponseFunctionCallArgumentsDelta(
            event_id=event_id,
            event_type=event_type,
            response_id=_str(raw, "response_id"),
            item_id=_str(raw, "item_id"),
            output_index=_int(raw, "output_index"),
            call_id=_str(raw, "call_id"),
            delta=_str(raw, "delta"),
        )

    delta_cls: type[ContentDelta]
    if event_type is EventType.RESPONSE_AUDIO_TRANSCRIPT_DELTA:
        delta_cls = ResponseAudioTranscriptDelta
    elif event_type is EventType.RESPONSE_AUDIO_DELTA:
        delta_cls = ResponseAudioDelta
    elif event_type is EventType.RESPONSE_TEXT_DELTA:
        delta_cls = ResponseTextDelta
    else:
        raise UnsupportedEventError(event_type.value)

    return delta_cls(
        event_id=event_id,
        event_type=event_type,
        response_id=_str(raw, "response_id"),
        item_id=_str(raw, "item_id"),
        output_index=_int(raw, "output_index"),
        content_index=_int(raw, "content_index"),
        delta=_str(raw, "delta"),
    )
