"""
PROTOCOL-AS-CONSTANTS
---------------------
Single source of truth for the fixed values of the realtime protocol.

Rules:
- If changing a value changes runtime behavior, it belongs here.
- No magic numbers elsewhere in the codebase.
- Other modules MUST import from this file.
"""

from __future__ import annotations

from typing import Final

# =============================================================================
# Audio Format (PCM16 mono @ 24kHz)
# =============================================================================

# The only PCM rate the realtime protocol defines. Used for every
# millisecond -> sample index conversion (truncation, speech windows).
REALTIME_SAMPLE_RATE_HZ: Final[int] = 24_000

# numpy dtype for raw samples: little-endian int16
PCM16_DTYPE: Final[str] = "<i2"

# =============================================================================
# Conversation formatting
# =============================================================================

# Stands in for a transcript that was confirmed empty, so that it can be told
# apart from "no transcript yet" ("").
EMPTY_TRANSCRIPT_SENTINEL: Final[str] = " "

# =============================================================================
# Transport
# =============================================================================

REALTIME_DEFAULT_URL: Final[str] = "wss://api.openai.com/v1/realtime"
REALTIME_DEFAULT_MODEL: Final[str] = "gpt-4o-realtime-preview"

# Audio deltas are base64 inside JSON; the default 1 MiB frame cap is too low.
WS_MAX_MESSAGE_BYTES: Final[int] = 2**24

EVENT_ID_PREFIX: Final[str] = "evt_"
