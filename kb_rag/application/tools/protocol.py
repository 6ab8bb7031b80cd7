"""MCP-style dispatch: ``tools/list`` and ``tools/call`` over a ToolRegistry."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from kb_rag.application.tools.registry import ToolRegistry
from kb_rag.domain.errors import NotFoundError, ValidationError

TOOLS_LIST = "tools/list"
TOOLS_CALL = "tools/call"


def dispatch_protocol_call(
    registry: ToolRegistry, method: str, params: Mapping[str, Any] | None = None
) -> Any:
    if method == TOOLS_LIST:
        return {"tools": registry.list()}
    if method == TOOLS_CALL:
        if not isinstance(params, Mapping):
            raise ValidationError("params must be an object with 'name' and 'arguments'")
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise ValidationError("params.name must be a non-empty string")
        return registry.invoke(name, params.get("arguments"))
    raise NotFoundError(f"unknown method '{method}'")
