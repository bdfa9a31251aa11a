from __future__ import annotations

import json

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse
from loguru import logger
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from core.config import load_config
from core.errors import InternalError, ToolError, ValidationError
from core.models import ServerConfig
from service.sse import SSE_HEADERS, SSEConnection
from tools.dispatcher import ToolDispatcher, ToolResponse, error_response


def _render(response: ToolResponse) -> JSONResponse:
    return JSONResponse(response.envelope.to_json(), status_code=response.status_code)


async def _read_params(request: Request) -> object:
    body = await request.body()
    if not body.strip():
        return {}
    try:
        return json.loads(body)
    except ValueError as exc:
        raise ValidationError("Request body is not valid JSON", details=str(exc)) from exc


def create_app(
    config: ServerConfig | None = None, *, dispatcher: ToolDispatcher | None = None
) -> FastAPI:
    cfg = config or load_config()
    tools = dispatcher or ToolDispatcher.from_config(cfg)

    app = FastAPI(title="Travel Dev Helper", version=cfg.server_version)
    app.state.config = cfg
    app.state.dispatcher = tools
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ToolError)
    async def tool_error_handler(request: Request, exc: ToolError) -> JSONResponse:
        return _render(error_response(exc))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.url.path}")
        return _render(error_response(InternalError("Internal server error")))

    @app.get("/health")
    def health() -> dict[str, str]:
        return {
            "status": "ok",
            "message": "MCP Dev Helper running",
            "root": str(cfg.project_root),
        }

    @app.get("/metrics")
    def metrics() -> PlainTextResponse:
        return PlainTextResponse(generate_latest().decode("utf-8"), media_type=CONTENT_TYPE_LATEST)

    @app.get("/tools")
    def list_tools() -> dict[str, list[dict[str, str]]]:
        return {"tools": tools.describe()}

    @app.post("/tools/{tool_name}")
    async def call_tool(tool_name: str, request: Request) -> JSONResponse:
        params = await _read_params(request)
        return _render(await tools.dispatch(tool_name, params))

    @app.get("/sse")
    async def sse(request: Request) -> StreamingResponse:
        greeting = {
            "status": "connected",
            "message": "SSE connection established",
            "name": cfg.server_name,
            "version": cfg.server_version,
            "capabilities": {"tools": tools.tool_names()},
        }
        connection = SSEConnection(
            greeting,
            interval=cfg.sse_heartbeat_seconds,
            is_disconnected=request.is_disconnected,
        )
        return StreamingResponse(
            connection.events(),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
        )

    return app


def main() -> None:
    import uvicorn

    from core.observability import configure_logger

    cfg = load_config()
    configure_logger(cfg)
    uvicorn.run(create_app(cfg), host=cfg.host, port=cfg.port, log_level=cfg.log_level.lower())


if __name__ == "__main__":
    main()
