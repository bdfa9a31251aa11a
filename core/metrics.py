from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

TOOL_CALL_TOTAL = Counter(
    "tool_call_total",
    "Total tool calls by outcome.",
    ["tool", "status"],
)
TOOL_CALL_LATENCY_SECONDS = Histogram(
    "tool_call_latency_seconds",
    "Tool call latency in seconds.",
    ["tool"],
)
SSE_CONNECTIONS_OPEN = Gauge(
    "sse_connections_open",
    "Currently open SSE notification streams.",
)
SSE_HEARTBEAT_TOTAL = Counter(
    "sse_heartbeat_total",
    "Heartbeat events written to SSE clients.",
)


def record_tool_call(*, tool: str, status: str, duration_seconds: float) -> None:
    TOOL_CALL_TOTAL.labels(tool=tool, status=status).inc()
    TOOL_CALL_LATENCY_SECONDS.labels(tool=tool).observe(max(0.0, duration_seconds))


def record_sse_open() -> None:
    SSE_CONNECTIONS_OPEN.inc()


def record_sse_close() -> None:
    SSE_CONNECTIONS_OPEN.dec()


def record_heartbeat() -> None:
    SSE_HEARTBEAT_TOTAL.inc()
