"""
Conversation item enumerations.

Rules:
- Values match the realtime wire protocol exactly.
- No behavior, no helper methods, no side effects.
- Status transitions are defined exclusively in realtime.transitions.
"""

from __future__ import annotations

from enum import Enum


class ItemType(str, Enum):
    """Discriminator for conversation items."""

    MESSAGE = "message"
    FUNCTION_CALL = "function_call"
    FUNCTION_CALL_OUTPUT = "function_call_output"


class ItemRole(str, Enum):
    """Author of a message item."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ItemStatus(str, Enum):
    """
    Item lifecycle status.

    in_progress -> completed for assistant messages and function calls;
    user messages and function outputs are born completed. incomplete only
    ever arrives from the server.
    """

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    INCOMPLETE = "incomplete"


class ContentPartType(str, Enum):
    """Typed content part carried by message items."""

    INPUT_TEXT = "input_text"
    INPUT_AUDIO = "input_audio"
    TEXT = "text"
    AUDIO = "audio"
