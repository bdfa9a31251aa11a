from __future__ import annotations

from typing import Any


class ToolError(Exception):
    """Base for failures a tool reports to its caller as an error envelope."""

    status_code = 500

    def __init__(
        self,
        message: str,
        *,
        details: Any = None,
        extra: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        self.extra = extra or {}

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        payload.update(self.extra)
        return payload


class ValidationError(ToolError):
    status_code = 400


class NotFoundError(ToolError):
    status_code = 404


class ToolIOError(ToolError):
    status_code = 500


class InternalError(ToolError):
    status_code = 500
