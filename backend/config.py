"""
Application configuration.

Responsibilities:
- Load deployment-specific configuration
- Read environment variables
- Provide a typed, immutable config object

Non-responsibilities:
- No conversation logic
- No protocol constants
- No runtime mutation
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from constants import REALTIME_DEFAULT_MODEL, REALTIME_DEFAULT_URL


@dataclass(frozen=True)
class AppConfig:
    """
    Immutable application configuration.

    Constructed once at process startup.
    Passed downward to the session and transport.
    """

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    env: str
    log_level: str

    # ------------------------------------------------------------------
    # Realtime API
    # ------------------------------------------------------------------

    openai_api_key: str | None
    realtime_url: str
    realtime_model: str

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    enable_json_logs: bool

    # One log line per processed event (very chatty with audio deltas)
    log_event_processed: bool

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @staticmethod
    def load_from_env() -> AppConfig:
        """
        Load configuration from environment variables.

        Missing variables fall back to defaults; the API key may be None
        (offline replay does not need it).
        """
        return AppConfig(
            env=os.environ.get("ENV", "dev"),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),

            openai_api_key=os.environ.get("OPENAI_API_KEY"),
            realtime_url=os.environ.get("REALTIME_URL", REALTIME_DEFAULT_URL),
            realtime_model=os.environ.get("REALTIME_MODEL", REALTIME_DEFAULT_MODEL),

            enable_json_logs=os.environ.get("ENABLE_JSON_LOGS", "1") == "1",
            log_event_processed=os.environ.get("LOG_EVENT_PROCESSED", "0") == "1",
        )
