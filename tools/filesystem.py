from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Any

from core.errors import NotFoundError, ToolIOError
from core.models import ListFilesRequest, ReadFileRequest, WriteFileRequest
from tools.paths import PathResolver


def _detect_language(file_path: str) -> str:
    return "javascript" if file_path.endswith(".js") else "unknown"


def _entry_name(entry: Path) -> str:
    # Undecodable bytes in a name surface as lone surrogates; keep them as \xNN.
    return os.fsencode(entry.name).decode("utf-8", "backslashreplace")


def _scan_dir(target: Path) -> list[tuple[str, bool]]:
    return sorted((_entry_name(entry), entry.is_dir()) for entry in target.iterdir())


def _read_text(target: Path) -> str:
    with open(target, encoding="utf-8", newline="") as handle:
        return handle.read()


def _write_text(target: Path, content: str) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w", encoding="utf-8", newline="") as handle:
        handle.write(content)


class FilesystemTools:
    def __init__(self, resolver: PathResolver):
        self.resolver = resolver

    async def list_files(self, request: ListFilesRequest) -> dict[str, Any]:
        target = self.resolver.resolve(request.path)
        try:
            entries = await asyncio.to_thread(_scan_dir, target)
        except OSError as exc:
            raise ToolIOError(
                f"Cannot read directory: {request.path}",
                details=str(exc),
                extra={"directory": request.path},
            ) from exc

        files = [
            {
                "name": name,
                "type": "directory" if is_dir else "file",
                "isDirectory": is_dir,
                "path": self.resolver.display(request.path, name),
            }
            for name, is_dir in entries
        ]
        return {"files": files, "total_files": len(files), "directory": request.path}

    async def read_file(self, request: ReadFileRequest) -> dict[str, Any]:
        target = self.resolver.resolve(request.file_path)
        try:
            content = await asyncio.to_thread(_read_text, target)
        except FileNotFoundError as exc:
            raise NotFoundError(
                "File not found", extra={"file_path": request.file_path}
            ) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise ToolIOError(
                f"Cannot read file: {request.file_path}",
                details=str(exc),
                extra={"file_path": request.file_path},
            ) from exc

        return {
            "file_path": request.file_path,
            "content": content,
            "total_lines": len(content.split("\n")),
            "language": _detect_language(request.file_path),
        }

    async def write_file(self, request: WriteFileRequest) -> dict[str, Any]:
        target = self.resolver.resolve(request.file_path)
        try:
            await asyncio.to_thread(_write_text, target, request.content)
        except OSError as exc:
            raise ToolIOError(
                f"Cannot write file: {request.file_path}",
                details=str(exc),
                extra={"file_path": request.file_path},
            ) from exc

        return {
            "success": True,
            "file_path": request.file_path,
            "action": request.mode,
            "message": "File saved successfully",
        }
