"""
Conversation entities: items, content parts, responses.

Rules:
- Records are built by explicit value construction from wire payloads;
  nothing stored here aliases an inbound event mapping.
- Only realtime.transitions mutates stored records.
- Callers only ever see snapshots (see snapshot_item / snapshot_response).
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping

import numpy as np

from audio.pcm import empty_samples
from realtime.enums.item import ItemType
from realtime.enums.response import ResponseStatus


# =============================================================================
# Content
# =============================================================================

@dataclass
class ContentPart:
    """
    One typed piece of message content.

    audio is the base64 string as delivered; decoded audio lives on
    Formatted.audio instead.
    """
    type: str
    text: str | None = None
    audio: str | None = None
    transcript: str | None = None


# =============================================================================
# Formatted view
# =============================================================================

@dataclass
class FormattedTool:
    """Accumulated function call, ready to execute once arguments are complete."""
    name: str
    call_id: str
    arguments: str = ""
    type: str = "function"


@dataclass
class Formatted:
    """
    Denormalized, directly renderable view of an item.

    audio:
        int16 samples at 24kHz. Always a read-only array; grows by merge and
        shrinks only by prefix truncation.
    """
    audio: np.ndarray = field(default_factory=empty_samples)
    text: str = ""
    transcript: str = ""
    tool: FormattedTool | None = None
    output: str | None = None


# =============================================================================
# Item
# =============================================================================

@dataclass
class Item:
    """Single conversation turn unit (message, function call or call output)."""
    id: str
    type: str
    status: str | None = None
    role: str | None = None
    content: list[ContentPart] = field(default_factory=list)

    # function_call / function_call_output
    call_id: str | None = None
    name: str | None = None
    arguments: str | None = None
    output: str | None = None

    object: str = "realtime.item"
    formatted: Formatted = field(default_factory=Formatted)


# =============================================================================
# Response
# =============================================================================

@dataclass
class Usage:
    total_tokens: int = 0
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass
class Response:
    """Model-generated turn. status holds whatever the server last sent."""
    id: str
    status: str
    output: list[Item] = field(default_factory=list)
    status_details: dict[str, Any] | None = None
    usage: Usage | None = None
    object: str = "realtime.response"


# =============================================================================
# Pending fragments
# =============================================================================

@dataclass
class SpeechFragment:
    """
    Speech window reported before its owning item exists.

    audio is filled on speech_stopped when the caller supplies the full
    input buffer.
    """
    audio_start_ms: int
    audio_end_ms: int | None = None
    audio: np.ndarray | None = None


# =============================================================================
# Construction from wire payloads
# =============================================================================

def content_part_from_payload(payload: Mapping[str, Any]) -> ContentPart:
    return ContentPart(
        type=str(payload.get("type", "")),
        text=payload.get("text"),
        audio=payload.get("audio"),
        transcript=payload.get("transcript"),
    )


def item_from_payload(payload: Mapping[str, Any]) -> Item:
    """
    Build a new Item owning copies of everything it keeps.

    The formatted view starts empty; the created transition populates it.
    """
    return Item(
        id=str(payload.get("id", "")),
        type=str(payload.get("type", ItemType.MESSAGE.value)),
        status=payload.get("status"),
        role=payload.get("role"),
        content=[content_part_from_payload(p) for p in payload.get("content") or ()],
        call_id=payload.get("call_id"),
        name=payload.get("name"),
        arguments=payload.get("arguments"),
        output=payload.get("output"),
        object=str(payload.get("object", "realtime.item")),
    )


def response_from_payload(payload: Mapping[str, Any]) -> Response:
    usage = payload.get("usage")
    details = payload.get("status_details")
    return Response(
        id=str(payload.get("id", "")),
        status=str(payload.get("status", ResponseStatus.IN_PROGRESS.value)),
        output=[item_from_payload(i) for i in payload.get("output") or ()],
        status_details=dict(details) if details else None,
        usage=Usage(
            total_tokens=int(usage.get("total_tokens", 0)),
            input_tokens=int(usage.get("input_tokens", 0)),
            output_tokens=int(usage.get("output_tokens", 0)),
        ) if usage else None,
        object=str(payload.get("object", "realtime.response")),
    )


# =============================================================================
# Copy-on-read snapshots
# =============================================================================

def snapshot_item(item: Item) -> Item:
    """
    Copy an item so the caller cannot reach engine-owned containers.

    Strings are immutable and audio arrays are read-only, so both are
    shared; lists and nested records are rebuilt.
    """
    formatted = item.formatted
    return replace(
        item,
        content=[replace(part) for part in item.content],
        formatted=replace(
            formatted,
            tool=replace(formatted.tool) if formatted.tool is not None else None,
        ),
    )


def snapshot_response(response: Response) -> Response:
    return replace(
        response,
        output=[snapshot_item(i) for i in response.output],
        status_details=dict(response.status_details) if response.status_details else None,
        usage=replace(response.usage) if response.usage is not None else None,
    )
