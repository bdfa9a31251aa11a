from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError as MCPToolError

from core.config import load_config
from tools.dispatcher import ToolDispatcher

app = FastMCP("travel-dev-helper")
_config = load_config()
_dispatcher = ToolDispatcher.from_config(_config)


async def _call(name: str, params: dict[str, Any]) -> str:
    response = await _dispatcher.dispatch(name, params)
    text = response.envelope.content[0].text
    if not response.ok:
        # FastMCP reports raised tool errors as isError results.
        raise MCPToolError(text)
    return text


@app.tool()
async def list_files(path: str = ".") -> str:
    return await _call("list_files", {"path": path})


@app.tool()
async def read_file(file_path: str) -> str:
    return await _call("read_file", {"file_path": file_path})


@app.tool()
async def write_file(file_path: str, content: str = "", mode: str = "create") -> str:
    return await _call(
        "write_file", {"file_path": file_path, "content": content, "mode": mode}
    )


@app.tool()
async def run_npm_script(script_name: str, cwd: str | None = None) -> str:
    return await _call("run_npm_script", {"script_name": script_name, "cwd": cwd})


@app.tool()
async def search(query: str = "", limit: int = 5) -> str:
    return await _call("search", {"query": query, "limit": limit})


@app.tool()
async def fetch(id: str | None = None, url: str | None = None) -> str:
    return await _call("fetch", {"id": id, "url": url})


def main() -> None:
    app.run(transport="stdio")


if __name__ == "__main__":
    main()
