from __future__ import annotations

import asyncio
import json
import shutil
from pathlib import Path
from typing import Any

from loguru import logger

from core.errors import ToolIOError, ValidationError
from core.models import RunScriptRequest
from tools.paths import PathResolver


def _load_package_scripts(workdir: Path) -> dict[str, str] | None:
    manifest = workdir / "package.json"
    if not manifest.is_file():
        return None
    try:
        data = json.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ToolIOError(
            "Cannot parse package.json", details=str(exc), extra={"cwd": str(workdir)}
        ) from exc
    scripts = data.get("scripts") if isinstance(data, dict) else None
    return scripts if isinstance(scripts, dict) else {}


class ScriptRunner:
    """Runs ``<npm> run <script>`` as an argv vector and buffers its output."""

    def __init__(
        self,
        resolver: PathResolver,
        npm_bin: str = "npm",
        *,
        enforce_allowlist: bool = True,
    ):
        self.resolver = resolver
        self.npm_bin = npm_bin
        self.enforce_allowlist = enforce_allowlist

    def _check_script(self, name: str, workdir: Path) -> None:
        if name.startswith("-"):
            raise ValidationError("Invalid script name", extra={"script": name})
        if not self.enforce_allowlist:
            return
        scripts = _load_package_scripts(workdir)
        if scripts is not None and name not in scripts:
            raise ValidationError(
                f"Unknown script: {name}",
                extra={"script": name, "available": sorted(scripts)},
            )

    async def run_npm_script(self, request: RunScriptRequest) -> dict[str, Any]:
        name = request.script_name
        workdir = self.resolver.resolve(request.cwd)
        if not workdir.is_dir():
            raise ToolIOError(
                "Working directory does not exist", extra={"cwd": request.cwd}
            )
        self._check_script(name, workdir)

        try:
            process = await asyncio.create_subprocess_exec(
                shutil.which(self.npm_bin) or self.npm_bin,
                "run",
                name,
                cwd=str(workdir),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            logger.warning(f"Could not spawn {self.npm_bin}: {exc}")
            return {
                "script": name,
                "exit_code": None,
                "stdout": "",
                "stderr": str(exc),
                "success": False,
            }

        stdout, stderr = await process.communicate()
        return {
            "script": name,
            "exit_code": process.returncode,
            "stdout": stdout.decode("utf-8", errors="replace"),
            "stderr": stderr.decode("utf-8", errors="replace"),
            "success": process.returncode == 0,
        }
