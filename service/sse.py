from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

from core.metrics import record_heartbeat, record_sse_close, record_sse_open
from core.models import Envelope, utc_now_iso
from core.observability import log_event

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "Access-Control-Allow-Origin": "*",
    "X-Accel-Buffering": "no",
}


def format_event(event: str, data: dict[str, Any]) -> str:
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


class SSEConnection:
    """One client's notification stream.

    Emits a greeting, then a ``ping`` every ``interval`` seconds until
    ``is_disconnected`` reports the client gone. The heartbeat timer belongs to
    the generator and is released when it finishes or is closed.
    """

    def __init__(
        self,
        greeting: dict[str, Any],
        *,
        interval: float,
        is_disconnected: Callable[[], Awaitable[bool]],
    ):
        self.greeting = greeting
        self.interval = interval
        self._is_disconnected = is_disconnected
        self.heartbeats = 0
        self.closed = False

    async def events(self) -> AsyncIterator[str]:
        record_sse_open()
        log_event("sse", "connected")
        try:
            yield format_event("message", Envelope.wrap(self.greeting).to_json())
            while True:
                await asyncio.sleep(self.interval)
                if await self._is_disconnected():
                    break
                self.heartbeats += 1
                record_heartbeat()
                yield format_event("ping", {"type": "ping", "timestamp": utc_now_iso()})
        finally:
            self.closed = True
            record_sse_close()
            log_event("sse", "disconnected", payload={"heartbeats": self.heartbeats})
