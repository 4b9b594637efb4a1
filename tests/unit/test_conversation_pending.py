# pylint: disable=missing-module-docstring,missing-function-docstring
from typing import Any

import numpy as np

from realtime.conversation import RealtimeConversation


_seq = iter(range(1, 1_000_000))


def evt(event_type: str, **fields: Any) -> dict[str, Any]:
    return {"event_id": f"evt_{next(_seq)}", "type": event_type, **fields}


def speech_started(item_id: str, ms: int) -> dict[str, Any]:
    return evt("input_audio_buffer.speech_started", item_id=item_id, audio_start_ms=ms)


def speech_stopped(item_id: str, ms: int) -> dict[str, Any]:
    return evt("input_audio_buffer.speech_stopped", item_id=item_id, audio_end_ms=ms)


def user_audio_item(item_id: str) -> dict[str, Any]:
    return evt(
        "conversation.item.created",
        item={
            "id": item_id,
            "type": "message",
            "role": "user",
            "content": [{"type": "input_audio", "transcript": None}],
        },
    )


def transcription_completed(item_id: str, transcript: str) -> dict[str, Any]:
    return evt(
        "conversation.item.input_audio_transcription.completed",
        item_id=item_id,
        content_index=0,
        transcript=transcript,
    )


# ---------------------------------------------------------------------
# Speech windows
# ---------------------------------------------------------------------

def test_speech_window_extracted_from_input_buffer():
    conv = RealtimeConversation()
    buffer = (np.arange(24_000) % 30_000).astype(np.int16)  # 1s

    assert conv.process(speech_started("X", 100)) == (None, None)
    assert conv.process(speech_stopped("X", 500), buffer) == (None, None)
    item, _ = conv.process(user_audio_item("X"))

    assert item is not None
    # 100ms -> 2400 samples, 500ms -> 12000 samples
    assert item.formatted.audio.size == 9_600
    assert np.array_equal(item.formatted.audio, buffer[2_400:12_000])


def test_speech_window_past_end_of_short_buffer_is_empty():
    conv = RealtimeConversation()
    buffer = np.ones(1_000, dtype=np.int16)

    conv.process(speech_started("X", 100))
    conv.process(speech_stopped("X", 500), buffer)
    item, _ = conv.process(user_audio_item("X"))

    assert item is not None
    assert np.array_equal(item.formatted.audio, buffer[2_400:12_000])
    assert item.formatted.audio.size == 0


def test_speech_fragment_is_consumed_by_item_creation():
    conv = RealtimeConversation()
    buffer = np.ones(24_000, dtype=np.int16)

    conv.process(speech_started("X", 0))
    conv.process(speech_stopped("X", 100), buffer)
    assert conv.pending_counts()["speech"] == 1

    conv.process(user_audio_item("X"))

    assert conv.pending_counts()["speech"] == 0


def test_speech_window_copy_is_independent_of_caller_buffer():
    conv = RealtimeConversation()
    buffer = np.ones(24_000, dtype=np.int16)

    conv.process(speech_started("X", 0))
    conv.process(speech_stopped("X", 100), buffer)
    buffer[:] = 7
    item, _ = conv.process(user_audio_item("X"))

    assert item is not None
    assert int(item.formatted.audio.max()) == 1


def test_speech_stopped_without_started_is_zero_length_window():
    conv = RealtimeConversation()
    buffer = np.ones(24_000, dtype=np.int16)

    conv.process(speech_stopped("X", 500), buffer)
    item, _ = conv.process(user_audio_item("X"))

    assert item is not None
    assert item.formatted.audio.size == 0


def test_speech_stopped_without_buffer_leaves_audio_empty():
    conv = RealtimeConversation()

    conv.process(speech_started("X", 0))
    conv.process(speech_stopped("X", 500))
    item, _ = conv.process(user_audio_item("X"))

    assert item is not None
    assert item.formatted.audio.size == 0
    assert conv.pending_counts()["speech"] == 0


# ---------------------------------------------------------------------
# Transcripts
# ---------------------------------------------------------------------

def test_empty_transcript_before_item_becomes_single_space():
    conv = RealtimeConversation()

    result = conv.process(transcription_completed("Y", ""))
    assert result == (None, None)
    assert conv.pending_counts()["transcripts"] == 1

    item, _ = conv.process(user_audio_item("Y"))

    assert item is not None
    assert item.formatted.transcript == " "
    assert conv.pending_counts()["transcripts"] == 0


def test_transcript_before_item_is_applied_on_creation():
    conv = RealtimeConversation()

    conv.process(transcription_completed("Y", "hello there"))
    item, _ = conv.process(user_audio_item("Y"))

    assert item is not None
    assert item.formatted.transcript == "hello there"


def test_transcript_after_item_updates_part_and_formatted():
    conv = RealtimeConversation()
    conv.process(user_audio_item("Y"))

    item, delta = conv.process(transcription_completed("Y", "hello"))

    assert delta == {"transcript": "hello"}
    assert item is not None
    assert item.content[0].transcript == "hello"
    assert item.formatted.transcript == "hello"


def test_empty_transcript_after_item_keeps_raw_delta():
    conv = RealtimeConversation()
    conv.process(user_audio_item("Y"))

    item, delta = conv.process(transcription_completed("Y", ""))

    assert delta == {"transcript": ""}
    assert item is not None
    assert item.content[0].transcript == ""
    assert item.formatted.transcript == " "


def test_transcript_with_out_of_range_content_index_only_sets_formatted():
    conv = RealtimeConversation()
    conv.process(user_audio_item("Y"))

    item, _ = conv.process(evt(
        "conversation.item.input_audio_transcription.completed",
        item_id="Y",
        content_index=3,
        transcript="hi",
    ))

    assert item is not None
    assert item.content[0].transcript is None
    assert item.formatted.transcript == "hi"


# ---------------------------------------------------------------------
# Queued input audio (manual commit)
# ---------------------------------------------------------------------

def test_queued_input_audio_goes_to_next_user_message_only():
    conv = RealtimeConversation()
    staged = np.arange(480, dtype=np.int16)
    conv.queue_input_audio(staged)

    assistant, _ = conv.process(evt(
        "conversation.item.created",
        item={"id": "a1", "type": "message", "role": "assistant", "content": []},
    ))
    user, _ = conv.process(user_audio_item("u1"))
    later, _ = conv.process(user_audio_item("u2"))

    assert assistant is not None and assistant.formatted.audio.size == 0
    assert user is not None and np.array_equal(user.formatted.audio, staged)
    assert later is not None and later.formatted.audio.size == 0


def test_queued_input_audio_wins_over_speech_window():
    conv = RealtimeConversation()
    conv.process(speech_started("u1", 0))
    conv.process(speech_stopped("u1", 10), np.ones(24_000, dtype=np.int16))
    conv.queue_input_audio(np.full(5, 9, dtype=np.int16))

    item, _ = conv.process(user_audio_item("u1"))

    assert item is not None
    assert item.formatted.audio.tolist() == [9, 9, 9, 9, 9]
