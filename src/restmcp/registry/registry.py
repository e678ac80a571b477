"""Immutable tool table and the dispatch boundary.

`dispatch` is the only place tool failures turn into envelopes: unknown
names, argument validation errors, local I/O errors and unexpected
exceptions all come back as `{error: true, message}` dicts. It never raises.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ValidationError

from restmcp.foundation.config import get_settings
from restmcp.foundation.errors import ErrorCode, RestBridgeError
from restmcp.io.envelope import FailureEnvelope, failure
from restmcp.runtime.retry import RetryPolicy
from restmcp.runtime.transport import HttpTransport
from restmcp.tools import GraphQLTool, RestApiRequestTool

if TYPE_CHECKING:
    from restmcp.foundation.config import RestMcpSettings
    from restmcp.tools import BaseTool

logger = logging.getLogger("restmcp.dispatch")


class ToolRegistry:
    """Read-only name -> tool table, fixed at construction.

    Example:
        >>> registry = default_registry()
        >>> "rest_api_request" in registry
        True
        >>> envelope = await dispatch(registry, "rest_api_request", {"url": "https://example.com"})
    """

    __slots__ = ("_tools",)

    def __init__(self, tools: list[BaseTool[BaseModel]]) -> None:
        table: dict[str, BaseTool[BaseModel]] = {}
        for tool in tools:
            name = tool.metadata.name
            if name in table:
                raise ValueError(f"Tool '{name}' registered twice")
            table[name] = tool
        self._tools: Mapping[str, BaseTool[BaseModel]] = MappingProxyType(table)

    @property
    def tools(self) -> Mapping[str, BaseTool[BaseModel]]:
        return self._tools

    def get(self, name: str) -> BaseTool[BaseModel] | None:
        return self._tools.get(name)

    def __getitem__(self, name: str) -> BaseTool[BaseModel]:
        return self._tools[name]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[BaseTool[BaseModel]]:
        return iter(self._tools.values())

    async def aclose(self) -> None:
        """Close every distinct transport held by the registered tools."""
        seen: set[int] = set()
        for tool in self._tools.values():
            if id(tool.transport) not in seen:
                seen.add(id(tool.transport))
                await tool.transport.aclose()


def default_registry(
    settings: RestMcpSettings | None = None,
    *,
    transport: HttpTransport | None = None,
    retry_policy: RetryPolicy | None = None,
) -> ToolRegistry:
    """Registry with `rest_api_request` and `rest_api_graphql` sharing one transport."""
    settings = settings or get_settings()
    transport = transport or HttpTransport.from_settings(settings.http)
    retry_policy = retry_policy or RetryPolicy.from_settings(settings.retry)
    return ToolRegistry([
        RestApiRequestTool(transport, retry_policy),
        GraphQLTool(transport, retry_policy),
    ])


def format_validation_error(tool_name: str, exc: ValidationError) -> str:
    """One line per field problem: `loc: msg; loc: msg`."""
    problems = []
    for err in exc.errors(include_url=False):
        loc = ".".join(str(p) for p in err["loc"])
        problems.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return f"Invalid arguments for {tool_name}: " + "; ".join(problems)


async def dispatch(registry: ToolRegistry, name: str, arguments: Mapping[str, Any] | None) -> dict[str, Any]:
    """Route a tool call and return its envelope as a plain dict."""
    tool = registry.get(name)
    if tool is None:
        logger.warning(f"Unknown tool requested: {name}")
        return failure(f"Unknown tool: {name}").to_dict()

    try:
        params = tool.validate(arguments or {})
    except ValidationError as e:
        message = format_validation_error(name, e)
        logger.info(f"[{name}] {ErrorCode.INVALID_PARAMS}: {message}")
        return failure(message).to_dict()

    try:
        envelope = await tool.arun(params)
    except RestBridgeError as e:
        logger.warning(f"[{name}] {e.code}: {e.message}")
        return failure(e.message).to_dict()
    except Exception as e:
        logger.exception(f"[{name}] Unexpected failure")
        return failure(str(e) or type(e).__name__).to_dict()

    if isinstance(envelope, FailureEnvelope):
        logger.info(f"[{name}] {envelope.message}")
    return envelope.to_dict()
