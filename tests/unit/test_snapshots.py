# pylint: disable=missing-module-docstring,missing-function-docstring
from typing import Any

import numpy as np
import pytest

from audio.pcm import int16_to_base64
from realtime.conversation import RealtimeConversation
from realtime.items import ContentPart


def evt(event_id: str, event_type: str, **fields: Any) -> dict[str, Any]:
    return {"event_id": event_id, "type": event_type, **fields}


def conversation_with_audio_item() -> RealtimeConversation:
    conv = RealtimeConversation()
    conv.process(evt(
        "evt_1",
        "conversation.item.created",
        item={
            "id": "a1",
            "type": "message",
            "role": "assistant",
            "content": [{"type": "audio", "transcript": ""}],
        },
    ))
    conv.process(evt(
        "evt_2",
        "response.audio.delta",
        response_id="r1",
        item_id="a1",
        output_index=0,
        content_index=0,
        delta=int16_to_base64(np.arange(16, dtype=np.int16)),
    ))
    return conv


def test_mutating_returned_item_does_not_reach_store():
    conv = conversation_with_audio_item()

    item, _ = conv.process(evt(
        "evt_3",
        "response.audio_transcript.delta",
        response_id="r1",
        item_id="a1",
        output_index=0,
        content_index=0,
        delta="hi",
    ))
    assert item is not None

    item.status = "completed"
    item.formatted.transcript = "tampered"
    item.content[0].transcript = "tampered"
    item.content.append(ContentPart(type="text", text="extra"))

    stored = conv.get_item("a1")
    assert stored is not None
    assert stored.status == "in_progress"
    assert stored.formatted.transcript == "hi"
    assert stored.content[0].transcript == "hi"
    assert len(stored.content) == 1


def test_returned_audio_is_read_only():
    conv = conversation_with_audio_item()

    item = conv.get_item("a1")
    assert item is not None

    with pytest.raises(ValueError):
        item.formatted.audio[0] = 99

    stored = conv.get_item("a1")
    assert stored is not None
    assert stored.formatted.audio.tolist() == list(range(16))


def test_mutating_formatted_tool_does_not_reach_store():
    conv = RealtimeConversation()
    conv.process(evt(
        "evt_1",
        "conversation.item.created",
        item={"id": "fc1", "type": "function_call", "name": "f", "call_id": "c1"},
    ))

    item = conv.get_item("fc1")
    assert item is not None and item.formatted.tool is not None
    item.formatted.tool.arguments = "{bad"

    stored = conv.get_item("fc1")
    assert stored is not None and stored.formatted.tool is not None
    assert stored.formatted.tool.arguments == ""


def test_mutating_returned_response_does_not_reach_store():
    conv = RealtimeConversation()
    conv.process(evt(
        "evt_1",
        "response.created",
        response={
            "id": "r1",
            "status": "in_progress",
            "usage": {"total_tokens": 3, "input_tokens": 1, "output_tokens": 2},
        },
    ))

    response = conv.get_response("r1")
    assert response is not None and response.usage is not None
    response.status = "cancelled"
    response.usage.total_tokens = 0

    stored = conv.get_response("r1")
    assert stored is not None and stored.usage is not None
    assert stored.status == "in_progress"
    assert stored.usage.total_tokens == 3
