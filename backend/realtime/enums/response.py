"""
Model response status enumeration.

Rules:
- This enum names the statuses the protocol documents today.
- The store keeps whatever status string arrives; it does not coerce.
"""

from __future__ import annotations

from enum import Enum


class ResponseStatus(str, Enum):
    """Terminal and in-flight states of a model response."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    INCOMPLETE = "incomplete"
    CANCELLED = "cancelled"
    FAILED = "failed"
