"""PCM16 sample utilities for realtime audio buffers."""
from __future__ import annotations

import base64

import numpy as np

from constants import PCM16_DTYPE, REALTIME_SAMPLE_RATE_HZ


def empty_samples() -> np.ndarray:
    """Return a zero-length, read-only int16 sample buffer."""
    return freeze(np.zeros(0, dtype=PCM16_DTYPE))


def freeze(samples: np.ndarray) -> np.ndarray:
    """
    Mark a sample buffer read-only and return it.

    Conversation buffers are replaced, never written in place, so a frozen
    array can be handed to callers without copying.
    """
    samples.flags.writeable = False
    return samples


def base64_to_int16(data: str) -> np.ndarray:
    """
    Decode a base64 PCM16 little-endian mono chunk into int16 samples.

    A trailing odd byte (truncated sample) is dropped.
    """
    raw = base64.b64decode(data)
    if len(raw) % 2 != 0:
        raw = raw[: len(raw) - 1]

    # frombuffer over bytes is already read-only
    return np.frombuffer(raw, dtype=PCM16_DTYPE)


def int16_to_base64(samples: np.ndarray) -> str:
    """Encode int16 samples as base64 PCM16 little-endian."""
    return base64.b64encode(
        np.asarray(samples, dtype=PCM16_DTYPE).tobytes()
    ).decode("ascii")


def merge_int16(left: np.ndarray, right: np.ndarray) -> np.ndarray:
    """Concatenate two sample buffers into a new read-only buffer."""
    return freeze(np.concatenate((left, right)).astype(PCM16_DTYPE, copy=False))


def ms_to_sample_index(ms: int, sample_rate_hz: int = REALTIME_SAMPLE_RATE_HZ) -> int:
    """floor(ms * rate / 1000)"""
    return (int(ms) * sample_rate_hz) // 1000
