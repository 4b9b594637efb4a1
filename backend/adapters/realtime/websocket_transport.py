"""
Realtime API websocket transport.

Core model:
- One websocket per RealtimeSession; the session owns conversation state.
- Every inbound text frame is handed to on_message synchronously, in receipt
  order, from a single receive task. This is what serializes calls into the
  conversation engine.
- Outbound events are plain mappings; the transport only stamps event_id.

Design constraints:
- Transport must not parse or interpret server events.
- Transport must not retry or reconnect on its own; callers decide.
- Connection failures are logged and re-raised from connect().
"""

from __future__ import annotations

import asyncio
import json
import urllib.parse
from typing import Any, Callable, Mapping
from uuid import uuid4

from websockets.asyncio.client import ClientConnection, connect as ws_connect
from websockets.exceptions import ConnectionClosed

from constants import EVENT_ID_PREFIX, WS_MAX_MESSAGE_BYTES
from observability.logger import log_event, now_ms


def _new_event_id() -> str:
    return f"{EVENT_ID_PREFIX}{uuid4().hex[:24]}"


class RealtimeWebSocketTransport:
    """
    Websocket client for the realtime API.

    Public interface:
    - connect(): open the socket and start the receive loop
    - send_event(event): serialize and send one client event
    - close(): stop the receive loop and close the socket
    - wait_closed(): wait until the receive loop ends
    """

    def __init__(
        self,
        *,
        on_message: Callable[[str | bytes], Any],
        api_key: str,
        url: str,
        model: str,
        session_id: str | None = None,
    ) -> None:
        self._on_message = on_message
        self._api_key = api_key
        self._url = url
        self._model = model
        self._session_id = session_id

        self._ws: ClientConnection | None = None
        self._recv_task: asyncio.Task[None] | None = None
        self._lock = asyncio.Lock()

    @property
    def connected(self) -> bool:
        return self._ws is not None

    # -------------------------------------------------------------------------
    # Connection management
    # -------------------------------------------------------------------------

    def _build_url(self) -> str:
        qs = urllib.parse.urlencode({"model": self._model})
        return f"{self._url}?{qs}"

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "OpenAI-Beta": "realtime=v1",
        }

    async def connect(self) -> None:
        async with self._lock:
            if self._ws is not None:
                return

            try:
                self._ws = await ws_connect(
                    self._build_url(),
                    additional_headers=self._headers(),
                    max_size=WS_MAX_MESSAGE_BYTES,
                )
            except Exception as e:
                log_event({
                    "ts_ms": now_ms(),
                    "session_id": self._session_id,
                    "event_type": "realtime_connect_failed",
                    "error": repr(e),
                })
                raise

            log_event({
                "ts_ms": now_ms(),
                "session_id": self._session_id,
                "event_type": "realtime_connected",
                "model": self._model,
            })

            # Start receiver loop once per connection.
            self._recv_task = asyncio.create_task(self._recv_loop(self._ws))

    async def send_event(self, event: Mapping[str, Any]) -> str:
        """
        Send one client event, adding an event_id if absent.

        Returns the event_id that was sent.
        """
        ws = self._ws
        if ws is None:
            raise RuntimeError("realtime transport is not connected")

        payload = dict(event)
        payload.setdefault("event_id", _new_event_id())
        await ws.send(json.dumps(payload, separators=(",", ":")))
        return payload["event_id"]

    async def close(self) -> None:
        async with self._lock:
            ws = self._ws
            self._ws = None

            task = self._recv_task
            self._recv_task = None

        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        if ws is not None:
            await ws.close()

    async def wait_closed(self) -> None:
        task = self._recv_task
        if task is not None:
            await task

    # -------------------------------------------------------------------------
    # Background loop
    # -------------------------------------------------------------------------

    async def _recv_loop(self, ws: ClientConnection) -> None:
        """
        Forward every text frame to on_message, one at a time.

        on_message runs to completion before the next frame is read. If it
        raises, the connection is dropped (socket closed) and the failure is
        logged.
        """
        try:
            async for raw in ws:
                self._on_message(raw)
        except asyncio.CancelledError:
            raise
        except ConnectionClosed as e:
            log_event({
                "ts_ms": now_ms(),
                "session_id": self._session_id,
                "event_type": "realtime_connection_closed",
                "code": e.rcvd.code if e.rcvd is not None else None,
            })
        except Exception as e:  # pylint: disable=broad-exception-caught
            await ws.close()
            log_event({
                "ts_ms": now_ms(),
                "session_id": self._session_id,
                "event_type": "realtime_receive_failed",
                "error": repr(e),
            })
        finally:
            if self._ws is ws:
                self._ws = None
