from __future__ import annotations

import json
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


def utc_now_iso() -> str:
    return datetime.now(tz=UTC).isoformat()


class ServerConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = 3000
    project_root: Path = Field(default_factory=Path.cwd)
    logs_dir: str = "logs"
    log_level: str = "INFO"
    npm_bin: str = "npm"
    enforce_script_allowlist: bool = True
    sse_heartbeat_seconds: float = Field(default=25.0, gt=0)
    server_name: str = "travel-dev-helper"
    server_version: str = "1.0.0"


class PartKind(str, Enum):
    TEXT = "text"


class TextPart(BaseModel):
    type: Literal[PartKind.TEXT] = PartKind.TEXT
    text: str


# Tagged by ``type``; new part kinds join this alias as a discriminated union.
ContentPart = TextPart


class Envelope(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: list[ContentPart]
    is_error: bool = Field(default=False, alias="isError")

    @classmethod
    def wrap(cls, payload: dict[str, Any], *, is_error: bool = False) -> Envelope:
        text = json.dumps(payload, ensure_ascii=False)
        try:
            text.encode("utf-8")
        except UnicodeEncodeError:
            # Lone surrogates are only representable as \u escapes.
            text = json.dumps(payload)
        return cls(content=[TextPart(text=text)], is_error=is_error)

    def payload(self) -> dict[str, Any]:
        return json.loads(self.content[0].text)

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class Document(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    url: str
    text: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class ListFilesRequest(BaseModel):
    path: str = Field(default=".", validation_alias=AliasChoices("path", "dir"))


class ReadFileRequest(BaseModel):
    file_path: str = Field(
        min_length=1, validation_alias=AliasChoices("file_path", "filePath")
    )


class WriteFileRequest(BaseModel):
    file_path: str = Field(
        min_length=1, validation_alias=AliasChoices("file_path", "filePath")
    )
    content: str = ""
    mode: Literal["create", "overwrite"] = "create"


class RunScriptRequest(BaseModel):
    script_name: str = Field(
        min_length=1, validation_alias=AliasChoices("script_name", "script")
    )
    cwd: str | None = None


class SearchRequest(BaseModel):
    query: str = ""
    limit: int = Field(default=5, ge=1)


class FetchRequest(BaseModel):
    id: str | None = None
    url: str | None = None
