# pylint: disable=missing-module-docstring,missing-function-docstring

import asyncio
import json
from typing import Any

import pytest
from websockets.exceptions import ConnectionClosed
from websockets.frames import Close

import adapters.realtime.websocket_transport as transport_mod
from adapters.realtime.websocket_transport import RealtimeWebSocketTransport


class FakeConnection:
    """
    Yields the given frames, then either fails with close_code or stays
    open until close().
    """

    def __init__(self, frames: list[str], close_code: int | None = None) -> None:
        self._frames = list(frames)
        self._close_code = close_code
        self._closed_event = asyncio.Event()
        self.sent: list[str] = []
        self.closed = False

    def __aiter__(self) -> "FakeConnection":
        return self

    async def __anext__(self) -> str:
        if self._frames:
            return self._frames.pop(0)
        if self._close_code is not None:
            raise ConnectionClosed(Close(self._close_code, "bye"), None)
        await self._closed_event.wait()
        raise StopAsyncIteration

    async def send(self, message: str) -> None:
        self.sent.append(message)

    async def close(self) -> None:
        self.closed = True
        self._closed_event.set()


async def settle() -> None:
    for _ in range(10):
        await asyncio.sleep(0)


@pytest.fixture
def emitted(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, Any]]:
    payloads: list[dict[str, Any]] = []
    monkeypatch.setattr(transport_mod, "log_event", payloads.append)
    return payloads


def install_fake(
    monkeypatch: pytest.MonkeyPatch,
    conn: FakeConnection,
) -> list[tuple[str, dict[str, Any]]]:
    calls: list[tuple[str, dict[str, Any]]] = []

    async def fake_connect(url: str, **kwargs: Any) -> FakeConnection:
        calls.append((url, kwargs))
        return conn

    monkeypatch.setattr(transport_mod, "ws_connect", fake_connect)
    return calls


def make_transport(received: list[Any]) -> RealtimeWebSocketTransport:
    return RealtimeWebSocketTransport(
        on_message=received.append,
        api_key="sk-test",
        url="wss://example.test/v1/realtime",
        model="test-model",
        session_id="sess_1",
    )


def test_connect_sends_auth_and_forwards_frames_in_order(
    monkeypatch: pytest.MonkeyPatch,
    emitted: list[dict[str, Any]],
):
    conn = FakeConnection(['{"n":1}', '{"n":2}', '{"n":3}'])
    calls = install_fake(monkeypatch, conn)
    received: list[Any] = []

    async def scenario() -> None:
        transport = make_transport(received)
        await transport.connect()
        await settle()
        await transport.close()

    asyncio.run(scenario())

    ((url, kwargs),) = calls
    assert url == "wss://example.test/v1/realtime?model=test-model"
    assert kwargs["additional_headers"]["Authorization"] == "Bearer sk-test"
    assert kwargs["additional_headers"]["OpenAI-Beta"] == "realtime=v1"
    assert received == ['{"n":1}', '{"n":2}', '{"n":3}']
    assert conn.closed
    assert [e["event_type"] for e in emitted] == ["realtime_connected"]


def test_send_event_stamps_event_id(monkeypatch: pytest.MonkeyPatch, emitted: list[dict[str, Any]]):
    conn = FakeConnection([])
    install_fake(monkeypatch, conn)

    async def scenario() -> tuple[str, str]:
        transport = make_transport([])
        await transport.connect()
        await settle()
        generated = await transport.send_event({"type": "response.create"})
        explicit = await transport.send_event({"type": "response.cancel", "event_id": "evt_mine"})
        await transport.close()
        return generated, explicit

    generated, explicit = asyncio.run(scenario())

    first, second = (json.loads(m) for m in conn.sent)
    assert generated.startswith("evt_")
    assert first == {"type": "response.create", "event_id": generated}
    assert explicit == "evt_mine"
    assert second["event_id"] == "evt_mine"


def test_send_before_connect_raises():
    transport = make_transport([])

    with pytest.raises(RuntimeError):
        asyncio.run(transport.send_event({"type": "response.create"}))


def test_connection_closed_is_logged(monkeypatch: pytest.MonkeyPatch, emitted: list[dict[str, Any]]):
    conn = FakeConnection(['{"n":1}'], close_code=1011)
    install_fake(monkeypatch, conn)
    received: list[Any] = []

    async def scenario() -> bool:
        transport = make_transport(received)
        await transport.connect()
        await transport.wait_closed()
        return transport.connected

    connected = asyncio.run(scenario())

    assert received == ['{"n":1}']
    assert connected is False
    closed = [e for e in emitted if e["event_type"] == "realtime_connection_closed"]
    assert closed and closed[0]["code"] == 1011


def test_failing_handler_closes_the_socket(monkeypatch: pytest.MonkeyPatch, emitted: list[dict[str, Any]]):
    conn = FakeConnection(['{"n":1}', '{"n":2}'])
    install_fake(monkeypatch, conn)
    seen: list[Any] = []

    def on_message(raw: Any) -> None:
        seen.append(raw)
        raise ValueError("handler blew up")

    async def scenario() -> bool:
        transport = RealtimeWebSocketTransport(
            on_message=on_message,
            api_key="sk-test",
            url="wss://example.test/v1/realtime",
            model="test-model",
        )
        await transport.connect()
        await transport.wait_closed()
        await transport.close()
        return transport.connected

    connected = asyncio.run(scenario())

    assert seen == ['{"n":1}']
    assert conn.closed
    assert connected is False
    failed = [e for e in emitted if e["event_type"] == "realtime_receive_failed"]
    assert failed and "handler blew up" in failed[0]["error"]


def test_connect_failure_is_logged_and_raised(
    monkeypatch: pytest.MonkeyPatch,
    emitted: list[dict[str, Any]],
):
    async def failing_connect(url: str, **kwargs: Any) -> FakeConnection:
        raise OSError("unreachable")

    monkeypatch.setattr(transport_mod, "ws_connect", failing_connect)

    with pytest.raises(OSError):
        asyncio.run(make_transport([]).connect())

    assert emitted[0]["event_type"] == "realtime_connect_failed"
    assert "unreachable" in emitted[0]["error"]
