"""
Realtime session wrapper (caller of the conversation engine).

Responsibilities:
- Owns one RealtimeConversation and the local input-audio buffer
- Routes decoded server events: session records, errors, conversation events
- Supplies the full input buffer to speech_stopped
- Applies the caller-side error policy: log the ConversationError, drop the
  event, keep going
- Notifies an optional listener with each (item, delta)

Non-responsibilities:
- No transport (see adapters.realtime.websocket_transport)
- No outbound request building beyond staging committed input audio
- No conversation state logic (see realtime.transitions)
"""

from __future__ import annotations

import json
from typing import Any, Callable, Mapping
from uuid import uuid4

import numpy as np

from audio.pcm import empty_samples, merge_int16
from constants import PCM16_DTYPE
from observability.logger import log_event, now_ms
from realtime.conversation import RealtimeConversation
from realtime.errors import ConversationError
from realtime.events import SUPPORTED_EVENT_TYPES, EventType
from realtime.items import Item
from realtime.session_config import Session, session_from_payload
from realtime.transitions import Delta, TransitionResult

UpdateListener = Callable[[Item | None, Delta | None], None]

# Server events that describe the session rather than the conversation
_SESSION_EVENT_TYPES = frozenset({"session.created", "session.updated"})


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _new_session_id() -> str:
    return f"sess_{uuid4().hex[:12]}"


# ------------------------------------------------------------------
# RealtimeSession
# ------------------------------------------------------------------

class RealtimeSession:
    """
    One RealtimeSession == one realtime connection == one conversation.

    Calls are expected from a single task/thread, in receipt order.
    """

    def __init__(
        self,
        *,
        session_id: str | None = None,
        on_update: UpdateListener | None = None,
        log_event_processed: bool = False,
    ) -> None:
        self.session_id = session_id or _new_session_id()
        self.conversation = RealtimeConversation()
        self.session: Session | None = None

        self._on_update = on_update
        self._log_event_processed = log_event_processed
        self._input_audio: np.ndarray = empty_samples()

        self.dropped_events = 0

    # ------------------------------------------------------------------
    # Input audio
    # ------------------------------------------------------------------

    @property
    def input_audio(self) -> np.ndarray:
        """Full input buffer since the last commit/reset (read-only)."""
        return self._input_audio

    def append_input_audio(self, samples: np.ndarray) -> None:
        """Record user audio that was sent upstream (24kHz PCM16)."""
        self._input_audio = merge_int16(
            self._input_audio,
            np.asarray(samples, dtype=PCM16_DTYPE),
        )

    def commit_input_audio(self) -> bool:
        """
        Stage the buffered input audio for the next user item and clear it.

        Used when server turn detection is off. Returns False when there
        was nothing to commit.
        """
        if self._input_audio.size == 0:
            return False

        self.conversation.queue_input_audio(self._input_audio)
        log_event({
            "ts_ms": now_ms(),
            "session_id": self.session_id,
            "event_type": "input_audio_committed",
            "samples": int(self._input_audio.size),
        })
        self._input_audio = empty_samples()
        return True

    # ------------------------------------------------------------------
    # Inbound server traffic
    # ------------------------------------------------------------------

    def on_server_message(self, raw: str | bytes) -> TransitionResult | None:
        """Decode one text frame and route it."""
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            self._drop({}, "invalid_json", str(e))
            return None

        if not isinstance(data, dict):
            self._drop({}, "invalid_json", "top-level value is not an object")
            return None

        return self.on_server_event(data)

    def on_server_event(self, event: Mapping[str, Any]) -> TransitionResult | None:
        """
        Route one decoded server event.

        Returns the conversation result for engine events, None otherwise
        (including dropped events).
        """
        event_type = event.get("type")

        if event_type in _SESSION_EVENT_TYPES:
            self.session = session_from_payload(event.get("session") or {})
            log_event({
                "ts_ms": now_ms(),
                "session_id": self.session_id,
                "event_type": "session_configured",
                "source": event_type,
                "realtime_session_id": self.session.id,
                "config": self.session.config.to_dict(),
            })
            return None

        if event_type == "error":
            log_event({
                "ts_ms": now_ms(),
                "session_id": self.session_id,
                "event_type": "server_error",
                "server_event_id": event.get("event_id"),
                "error": event.get("error"),
            })
            return None

        # Anything with a type the engine does not model is only logged.
        # Envelope-less events still go to the engine so they fail loudly.
        if event_type and event_type not in SUPPORTED_EVENT_TYPES:
            log_event({
                "ts_ms": now_ms(),
                "session_id": self.session_id,
                "event_type": "event_ignored",
                "server_event_type": event_type,
                "server_event_id": event.get("event_id"),
            })
            return None

        side_inputs: tuple[Any, ...] = ()
        if event_type == EventType.SPEECH_STOPPED.value:
            side_inputs = (self._input_audio,)

        try:
            item, delta = self.conversation.process(event, *side_inputs)
        except ConversationError as e:
            self._drop(event, type(e).__name__, str(e))
            return None

        if self._log_event_processed:
            log_event({
                "ts_ms": now_ms(),
                "session_id": self.session_id,
                "event_type": "event_processed",
                "server_event_type": event_type,
                "server_event_id": event.get("event_id"),
                "item_id": item.id if item is not None else None,
                "delta": delta,
            })

        if self._on_update is not None:
            self._on_update(item, delta)

        return item, delta

    # ------------------------------------------------------------------
    # Reset
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Forget the conversation and input audio (new session start)."""
        self.conversation.clear()
        self.session = None
        self._input_audio = empty_samples()
        self.dropped_events = 0

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _drop(self, event: Mapping[str, Any], reason: str, message: str) -> None:
        self.dropped_events += 1
        log_event({
            "ts_ms": now_ms(),
            "session_id": self.session_id,
            "event_type": "event_dropped",
            "server_event_type": event.get("type"),
            "server_event_id": event.get("event_id"),
            "reason": reason,
            "message": message,
        })
