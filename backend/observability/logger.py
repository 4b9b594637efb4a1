"""
JSONL event logger.

- Write one JSON object per line
- Output to stdout
- No buffering, no batching
- No side effects beyond logging
"""

from __future__ import annotations

import json
import sys
import time
from typing import Any, Mapping, Callable

import numpy as np


# ------------------------------------------------------------------
# Explicit output sink (patchable in tests)
# ------------------------------------------------------------------

def _stdout_print(line: str) -> None:
    sys.stdout.write(line + "\n")
    sys.stdout.flush()

_print: Callable[[str], None] = _stdout_print

# Flipped off by callers that want a silent process (config.enable_json_logs)
_enabled: bool = True


def now_ms() -> int:
    """Wall-clock milliseconds for the ts_ms field."""
    return time.time_ns() // 1_000_000


def set_enabled(enabled: bool) -> None:
    """Enable or disable JSONL output process-wide."""
    global _enabled  # pylint: disable=global-statement
    _enabled = enabled


def _encode_default(value: Any) -> Any:
    # Audio buffers are logged by size only
    if isinstance(value, np.ndarray):
        return {"samples": int(value.size), "dtype": str(value.dtype)}
    if isinstance(value, (bytes, bytearray)):
        return {"bytes": len(value)}
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def log_event(event: Mapping[str, Any]) -> None:
    """
    Write a single JSONL event to stdout.

    The caller is responsible for:
    - Supplying a fully-formed event dict
    - Including ts_ms, session_id, event_type, etc.

    This function:
    - Serializes to JSON (numpy arrays and bytes become size summaries)
    - Writes exactly one line
    - Flushes immediately (no buffering)
    - Never raises
    """
    if not _enabled:
        return

    try:
        line = json.dumps(
            event,
            ensure_ascii=False,
            separators=(",", ":"),
            default=_encode_default,
        )
    except (TypeError, ValueError) as e:
        # Last-resort fallback: logging must never crash the caller
        fallback: dict[str, Any] = {
            "ts_ms": event.get("ts_ms"),
            "event_type": "LOGGER_SERIALIZATION_ERROR",
            "error": str(e),
            "original_event_repr": repr(event),
        }
        line = json.dumps(fallback, ensure_ascii=False, separators=(",", ":"))

    _print(line)
