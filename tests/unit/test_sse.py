import asyncio
import json

from core.metrics import SSE_CONNECTIONS_OPEN
from service.sse import SSEConnection, format_event


def _disconnect_after(checks: int):
    state = {"calls": 0}

    async def is_disconnected() -> bool:
        state["calls"] += 1
        return state["calls"] > checks

    return is_disconnected


def _parse(raw: str) -> tuple[str, dict]:
    event_line, data_line = raw.strip().split("\n")
    return event_line.removeprefix("event: "), json.loads(data_line.removeprefix("data: "))


async def _collect(connection: SSEConnection) -> list[str]:
    return [event async for event in connection.events()]


def test_format_event_is_sse_framed():
    assert format_event("ping", {"type": "ping"}) == 'event: ping\ndata: {"type": "ping"}\n\n'


def test_greeting_then_heartbeats_until_disconnect():
    greeting = {"status": "connected", "capabilities": {"tools": ["search"]}}
    connection = SSEConnection(greeting, interval=0.01, is_disconnected=_disconnect_after(2))

    events = asyncio.run(_collect(connection))
    assert len(events) == 3

    name, data = _parse(events[0])
    assert name == "message"
    assert json.loads(data["content"][0]["text"]) == greeting

    for raw in events[1:]:
        name, data = _parse(raw)
        assert name == "ping"
        assert data["type"] == "ping"
        assert data["timestamp"]

    assert connection.heartbeats == 2
    assert connection.closed is True


def test_closing_stream_releases_timer_and_gauge():
    before = SSE_CONNECTIONS_OPEN._value.get()

    async def scenario() -> SSEConnection:
        connection = SSEConnection(
            {"status": "connected"}, interval=3600, is_disconnected=_disconnect_after(10)
        )
        stream = connection.events()
        await stream.__anext__()
        assert SSE_CONNECTIONS_OPEN._value.get() == before + 1

        async def next_event() -> str:
            return await stream.__anext__()

        pending = asyncio.create_task(next_event())
        await asyncio.sleep(0.01)
        pending.cancel()
        try:
            await pending
        except asyncio.CancelledError:
            pass
        return connection

    connection = asyncio.run(scenario())
    assert connection.closed is True
    assert connection.heartbeats == 0
    assert SSE_CONNECTIONS_OPEN._value.get() == before
