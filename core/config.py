from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from core.models import ServerConfig


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value.strip())
    except ValueError:
        return default


def _check_root(config: ServerConfig) -> None:
    if not config.project_root.is_dir():
        raise ValueError(f"Project root is not a directory: {config.project_root}")


def load_config(overrides: dict[str, Any] | None = None) -> ServerConfig:
    load_dotenv(override=False)
    data: dict[str, Any] = {
        "host": os.getenv("HOST", "127.0.0.1"),
        "port": _env_int("PORT", 3000),
        "project_root": os.getenv("PROJECT_ROOT") or os.getcwd(),
        "logs_dir": os.getenv("LOGS_DIR", "logs"),
        "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
        "npm_bin": os.getenv("NPM_BIN", "npm"),
        "enforce_script_allowlist": _env_bool("ENFORCE_SCRIPT_ALLOWLIST", True),
        "sse_heartbeat_seconds": _env_float("SSE_HEARTBEAT_SECONDS", 25.0),
        "server_name": os.getenv("SERVER_NAME", "travel-dev-helper"),
    }
    if overrides:
        data.update(overrides)
    data["project_root"] = Path(data["project_root"]).expanduser().absolute()
    config = ServerConfig(**data)
    _check_root(config)
    return config
