"""
Realtime session configuration schema.

Data only: the engine never interprets these values. They are parsed from
session.created / session.updated payloads and passed back to the transport
verbatim via to_dict().
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal, Mapping

AudioFormat = Literal["pcm16", "g711_ulaw", "g711_alaw"]
Voice = Literal["alloy", "shimmer", "echo"]

# "auto" | "none" | "required" | {"type": "function", "name": ...}
ToolChoice = str | dict[str, str]

# int in [1, 4096] or "inf"
MaxOutputTokens = int | Literal["inf"]


@dataclass(frozen=True)
class AudioTranscription:
    model: str = "whisper-1"
    enabled: bool | None = None


@dataclass(frozen=True)
class TurnDetection:
    type: str = "server_vad"
    threshold: float | None = None
    prefix_padding_ms: int | None = None
    silence_duration_ms: int | None = None


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str = ""
    parameters: dict[str, Any] = field(default_factory=dict)
    type: str = "function"


@dataclass(frozen=True)
class SessionConfig:
    """
    Options recognized by the realtime session.

    None means "not set": the field is left out of to_dict() so the server
    keeps its own default.
    """

    instructions: str | None = None
    modalities: tuple[str, ...] | None = None
    voice: str | None = None
    input_audio_format: str | None = None
    output_audio_format: str | None = None
    input_audio_transcription: AudioTranscription | None = None
    turn_detection: TurnDetection | None = None
    tools: tuple[ToolDefinition, ...] | None = None
    tool_choice: ToolChoice | None = None
    temperature: float | None = None
    max_response_output_tokens: MaxOutputTokens | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_unset(asdict(self))


def _drop_unset(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _drop_unset(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [_drop_unset(v) for v in value]
    return value


@dataclass(frozen=True)
class Session:
    """Server-side session record (session.created / session.updated)."""

    id: str
    config: SessionConfig
    object: str = "realtime.session"


def _tool_from_payload(payload: Mapping[str, Any]) -> ToolDefinition:
    return ToolDefinition(
        name=str(payload.get("name", "")),
        description=str(payload.get("description", "")),
        parameters=dict(payload.get("parameters") or {}),
        type=str(payload.get("type", "function")),
    )


def session_config_from_payload(payload: Mapping[str, Any]) -> SessionConfig:
    """
    Parse the config fields of a session payload.

    Unknown keys are ignored; missing keys stay None.
    """
    transcription = payload.get("input_audio_transcription")
    turn_detection = payload.get("turn_detection")
    tools = payload.get("tools")
    modalities = payload.get("modalities")

    return SessionConfig(
        instructions=payload.get("instructions"),
        modalities=tuple(modalities) if modalities is not None else None,
        voice=payload.get("voice"),
        input_audio_format=payload.get("input_audio_format"),
        output_audio_format=payload.get("output_audio_format"),
        input_audio_transcription=AudioTranscription(
            model=str(transcription.get("model", "whisper-1")),
            enabled=transcription.get("enabled"),
        ) if transcription else None,
        turn_detection=TurnDetection(
            type=str(turn_detection.get("type", "server_vad")),
            threshold=turn_detection.get("threshold"),
            prefix_padding_ms=turn_detection.get("prefix_padding_ms"),
            silence_duration_ms=turn_detection.get("silence_duration_ms"),
        ) if turn_detection else None,
        tools=tuple(_tool_from_payload(t) for t in tools) if tools is not None else None,
        tool_choice=payload.get("tool_choice"),
        temperature=payload.get("temperature"),
        max_response_output_tokens=payload.get("max_response_output_tokens"),
    )


def session_from_payload(payload: Mapping[str, Any]) -> Session:
    return Session(
        id=str(payload.get("id", "")),
        config=session_config_from_payload(payload),
        object=str(payload.get("object", "realtime.session")),
    )
