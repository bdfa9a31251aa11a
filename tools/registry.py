from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from core.models import (
    FetchRequest,
    ListFilesRequest,
    ReadFileRequest,
    RunScriptRequest,
    SearchRequest,
    ServerConfig,
    WriteFileRequest,
)
from tools.documents import DocumentSource, DocumentTools, StaticDocumentStore
from tools.filesystem import FilesystemTools
from tools.paths import PathResolver
from tools.scripts import ScriptRunner

ToolHandler = Callable[[Any], Awaitable[dict[str, Any]]]


@dataclass(slots=True)
class ToolSpec:
    name: str
    description: str
    request_model: type[BaseModel]
    handler: ToolHandler
    error_defaults: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class Toolbox:
    filesystem: FilesystemTools
    scripts: ScriptRunner
    documents: DocumentTools

    @classmethod
    def from_config(
        cls, config: ServerConfig, *, documents: DocumentSource | None = None
    ) -> Toolbox:
        resolver = PathResolver(config.project_root)
        return cls(
            filesystem=FilesystemTools(resolver),
            scripts=ScriptRunner(
                resolver,
                config.npm_bin,
                enforce_allowlist=config.enforce_script_allowlist,
            ),
            documents=DocumentTools(documents or StaticDocumentStore()),
        )


def build_tool_registry(toolbox: Toolbox) -> dict[str, ToolSpec]:
    specs = [
        ToolSpec(
            name="list_files",
            description="List the entries of a directory under the project root.",
            request_model=ListFilesRequest,
            handler=toolbox.filesystem.list_files,
        ),
        ToolSpec(
            name="read_file",
            description="Read a text file under the project root.",
            request_model=ReadFileRequest,
            handler=toolbox.filesystem.read_file,
        ),
        ToolSpec(
            name="write_file",
            description="Write a text file, creating parent directories.",
            request_model=WriteFileRequest,
            handler=toolbox.filesystem.write_file,
        ),
        ToolSpec(
            name="run_npm_script",
            description="Run a package.json script and capture its output.",
            request_model=RunScriptRequest,
            handler=toolbox.scripts.run_npm_script,
        ),
        ToolSpec(
            name="search",
            description="Search project documents by title and text.",
            request_model=SearchRequest,
            handler=toolbox.documents.search,
            error_defaults={"results": []},
        ),
        ToolSpec(
            name="fetch",
            description="Fetch one project document by id or url.",
            request_model=FetchRequest,
            handler=toolbox.documents.fetch,
        ),
    ]
    return {spec.name: spec for spec in specs}
