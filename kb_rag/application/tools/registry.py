from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from kb_rag.application.tools.schema import check_schema, validate_arguments
from kb_rag.domain.errors import ConfigurationError, NotFoundError

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Mapping[str, Any]], Any]


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    input_schema: Mapping[str, Any]
    handler: ToolHandler

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


class ToolRegistry:
    """Name -> Tool map filled at startup and only read afterwards.

    Arguments are validated against the tool's schema before its handler
    runs; unknown names and invalid arguments never reach a handler.
    """

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        if not tool.name:
            raise ConfigurationError("tool name must not be empty")
        if tool.name in self._tools:
            raise ConfigurationError(f"tool '{tool.name}' is already registered")
        check_schema(tool.input_schema)
        self._tools[tool.name] = tool

    def list(self) -> list[dict[str, Any]]:
        return [t.describe() for t in self._tools.values()]

    def get(self, name: str) -> Tool:
        try:
            return self._tools[name]
        except KeyError:
            raise NotFoundError(f"unknown tool '{name}'") from None

    def invoke(self, name: str, args: Mapping[str, Any] | None) -> Any:
        tool = self.get(name)
        arguments = {} if args is None else args
        validate_arguments(tool.input_schema, arguments)
        logger.info("Invoking tool '%s'", name)
        return tool.handler(arguments)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
