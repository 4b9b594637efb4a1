"""
Live realtime connection that mirrors the conversation locally.

Responsibilities:
- Load AppConfig from the environment
- Open the realtime websocket and feed every server event to a
  RealtimeSession
- Optionally push a session.update (instructions / modalities)
- Print each item once the server marks it done

No microphone or speaker handling lives here.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from adapters.realtime.websocket_transport import RealtimeWebSocketTransport
from config import AppConfig
from observability import logger
from realtime.enums.item import ItemStatus
from realtime.items import Item
from realtime.session_config import SessionConfig
from realtime.transitions import Delta
from session.realtime_session import RealtimeSession
from session.replay import describe_item


def _print_finished(item: Item | None, delta: Delta | None) -> None:
    if item is None or delta is not None:
        return
    if item.status in (ItemStatus.COMPLETED.value, ItemStatus.INCOMPLETE.value):
        print(describe_item(item), flush=True)


def build_transport(config: AppConfig, session: RealtimeSession) -> RealtimeWebSocketTransport:
    if not config.openai_api_key:
        raise RuntimeError("OPENAI_API_KEY environment variable not set")

    return RealtimeWebSocketTransport(
        on_message=session.on_server_message,
        api_key=config.openai_api_key,
        url=config.realtime_url,
        model=config.realtime_model,
        session_id=session.session_id,
    )


async def run(config: AppConfig, session_config: SessionConfig | None = None) -> RealtimeSession:
    logger.set_enabled(config.enable_json_logs)

    session = RealtimeSession(
        on_update=_print_finished,
        log_event_processed=config.log_event_processed,
    )
    transport = build_transport(config, session)

    await transport.connect()
    try:
        if session_config is not None:
            await transport.send_event({
                "type": "session.update",
                "session": session_config.to_dict(),
            })
        await transport.wait_closed()
    finally:
        await transport.close()

    return session


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Mirror a realtime conversation locally.")
    parser.add_argument("--instructions", default=None)
    parser.add_argument("--text-only", action="store_true")
    args = parser.parse_args(argv)

    session_config = None
    if args.instructions is not None or args.text_only:
        session_config = SessionConfig(
            instructions=args.instructions,
            modalities=("text",) if args.text_only else None,
        )

    try:
        asyncio.run(run(AppConfig.load_from_env(), session_config))
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
