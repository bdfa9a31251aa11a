from __future__ import annotations

from dataclasses import dataclass
from time import perf_counter
from typing import Any

import pydantic
from loguru import logger

from core.errors import InternalError, NotFoundError, ToolError, ValidationError
from core.metrics import record_tool_call
from core.models import Envelope, ServerConfig
from core.observability import log_event
from tools.documents import DocumentSource
from tools.registry import Toolbox, ToolSpec, build_tool_registry


@dataclass(slots=True)
class ToolResponse:
    status_code: int
    envelope: Envelope

    @property
    def ok(self) -> bool:
        return self.status_code < 400


def _validation_details(exc: pydantic.ValidationError) -> list[dict[str, str]]:
    return [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]


def error_response(error: ToolError, defaults: dict[str, Any] | None = None) -> ToolResponse:
    payload = dict(defaults or {})
    payload.update(error.to_payload())
    return ToolResponse(error.status_code, Envelope.wrap(payload, is_error=True))


class ToolDispatcher:
    """Routes a tool name and raw parameters to a handler and shapes the envelope."""

    def __init__(self, registry: dict[str, ToolSpec]):
        self.registry = registry

    @classmethod
    def from_config(
        cls, config: ServerConfig, *, documents: DocumentSource | None = None
    ) -> ToolDispatcher:
        toolbox = Toolbox.from_config(config, documents=documents)
        return cls(build_tool_registry(toolbox))

    def tool_names(self) -> list[str]:
        return list(self.registry)

    def describe(self) -> list[dict[str, str]]:
        return [
            {"name": spec.name, "description": spec.description}
            for spec in self.registry.values()
        ]

    async def dispatch(self, name: str, params: Any) -> ToolResponse:
        spec = self.registry.get(name)
        if spec is None:
            return error_response(NotFoundError(f"Unknown tool: {name}"))

        started = perf_counter()
        try:
            result = await self._invoke(spec, params)
            response = ToolResponse(200, Envelope.wrap(result))
        except ToolError as exc:
            response = error_response(exc, spec.error_defaults)
        except Exception as exc:  # noqa: BLE001
            logger.exception(f"Tool {name} failed unexpectedly")
            response = error_response(
                InternalError("Internal server error", details=str(exc)),
                spec.error_defaults,
            )

        duration = perf_counter() - started
        status = "success" if response.ok else "error"
        record_tool_call(tool=name, status=status, duration_seconds=duration)
        log_event(
            "dispatcher",
            "tool_call",
            payload={
                "tool": name,
                "status": status,
                "status_code": response.status_code,
                "duration_ms": round(duration * 1000, 2),
            },
        )
        return response

    @staticmethod
    async def _invoke(spec: ToolSpec, params: Any) -> dict[str, Any]:
        if params is None:
            params = {}
        if not isinstance(params, dict):
            raise ValidationError("Request body must be a JSON object")
        try:
            request = spec.request_model.model_validate(params)
        except pydantic.ValidationError as exc:
            raise ValidationError(
                f"Missing or invalid parameters for {spec.name}",
                details=_validation_details(exc),
            ) from exc
        return await spec.handler(request)
