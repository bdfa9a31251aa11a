from __future__ import annotations

import asyncio
from typing import Any

from core.config import load_config
from core.models import ServerConfig
from tools.dispatcher import ToolDispatcher, ToolResponse


def run_tool(
    name: str,
    params: dict[str, Any] | None = None,
    *,
    config: ServerConfig | None = None,
) -> ToolResponse:
    cfg = config or load_config()
    dispatcher = ToolDispatcher.from_config(cfg)
    return asyncio.run(dispatcher.dispatch(name, params or {}))


if __name__ == "__main__":
    # Useful for quick manual execution.
    response = run_tool("list_files", {"path": "."})
    print(response.envelope.model_dump_json(indent=2, by_alias=True))
