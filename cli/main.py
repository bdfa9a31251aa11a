from __future__ import annotations

import json
import shutil

import typer
from rich.console import Console
from rich.table import Table

from core.config import load_config
from core.observability import configure_logger
from main import run_tool

app = typer.Typer(add_completion=False, help="Travel Dev Helper CLI")
console = Console()


def _overrides(host: str | None, port: int | None, root: str | None) -> dict[str, object]:
    overrides: dict[str, object] = {}
    if host:
        overrides["host"] = host
    if port:
        overrides["port"] = port
    if root:
        overrides["project_root"] = root
    return overrides


@app.command()
def serve(
    host: str | None = typer.Option(None, help="Bind address (default from HOST)."),
    port: int | None = typer.Option(None, help="Listen port (default from PORT)."),
    root: str | None = typer.Option(None, help="Project root (default from PROJECT_ROOT)."),
) -> None:
    import uvicorn

    from service.api import create_app

    cfg = load_config(_overrides(host, port, root))
    configure_logger(cfg)
    console.print(f"[bold green]Travel Dev Helper[/bold green] on http://{cfg.host}:{cfg.port}")
    console.print(f"Tools available at http://{cfg.host}:{cfg.port}/tools/*")
    uvicorn.run(create_app(cfg), host=cfg.host, port=cfg.port, log_level=cfg.log_level.lower())


@app.command()
def call(
    tool: str = typer.Argument(..., help="Tool name, e.g. read_file."),
    args: str = typer.Option("{}", "--args", help="Tool parameters as a JSON object."),
    root: str | None = typer.Option(None, help="Project root (default from PROJECT_ROOT)."),
) -> None:
    try:
        params = json.loads(args)
    except ValueError as exc:
        raise typer.BadParameter(f"--args is not valid JSON: {exc}") from exc
    response = run_tool(tool, params, config=load_config(_overrides(None, None, root)))
    console.print_json(json.dumps(response.envelope.payload()))
    if not response.ok:
        raise typer.Exit(code=1)


@app.command()
def doctor() -> None:
    cfg = load_config()
    npm_path = shutil.which(cfg.npm_bin)

    table = Table(title="Travel Dev Helper Doctor")
    table.add_column("Check")
    table.add_column("Value")
    table.add_row("Server", f"{cfg.server_name} {cfg.server_version}")
    table.add_row("Host:Port", f"{cfg.host}:{cfg.port}")
    table.add_row("Project Root", str(cfg.project_root))
    table.add_row("package.json Present", str((cfg.project_root / "package.json").is_file()))
    table.add_row("npm Binary", npm_path or f"{cfg.npm_bin} (not found)")
    table.add_row("Script Allow-list", str(cfg.enforce_script_allowlist))
    table.add_row("SSE Heartbeat (s)", str(cfg.sse_heartbeat_seconds))
    table.add_row("Logs Dir", cfg.logs_dir)
    table.add_row("Log Level", cfg.log_level)
    console.print(table)


@app.command()
def stdio() -> None:
    from tools.stdio_app import main as run_stdio

    run_stdio()


def main() -> None:
    app()
