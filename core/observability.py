from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

from loguru import logger

from core.models import ServerConfig


def configure_logger(config: ServerConfig) -> None:
    Path(config.logs_dir).mkdir(parents=True, exist_ok=True)
    logger.remove()
    logger.add(sys.stderr, level=config.log_level)
    logger.add(
        Path(config.logs_dir) / "dev_helper.log",
        serialize=True,
        level=config.log_level,
        enqueue=True,
        backtrace=False,
        diagnose=False,
    )


def log_event(component: str, message: str, *, payload: dict[str, Any] | None = None) -> None:
    record = {
        "component": component,
        "message": message,
        "payload": payload or {},
    }
    logger.info(json.dumps(record, default=str))
