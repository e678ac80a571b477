"""FastMCP adapter and command-line entry point.

Each registry tool is exposed as a `BridgedTool`. Calls go through `dispatch`,
so the MCP layer only ever sees finished envelopes rendered as JSON text;
failure envelopes are returned with `isError` set.

Example:
    >>> server = create_server()
    >>> server.run()                                   # stdio
    >>> server.run(transport="sse", host="0.0.0.0", port=8080)

    $ restmcp --transport streamable-http --port 8080 --log-level debug
"""

from __future__ import annotations

import argparse
import json
import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from fastmcp import FastMCP
from fastmcp.tools import Tool, ToolResult
from pydantic import PrivateAttr

from restmcp import __version__
from restmcp.foundation.config import get_settings
from restmcp.registry import ToolRegistry, default_registry, dispatch
from restmcp.runtime.observability import configure_logging

if TYPE_CHECKING:
    from restmcp.foundation.config import RestMcpSettings
    from restmcp.tools import BaseTool

logger = logging.getLogger("restmcp.server")


def render(envelope: dict[str, Any]) -> str:
    return json.dumps(envelope, indent=2, ensure_ascii=False, default=str)


class BridgedTool(Tool):
    """MCP tool backed by a registry entry.

    Arguments are passed through untouched; validation happens in `dispatch`
    against the tool's own pydantic schema so both camelCase and snake_case
    names are accepted.
    """

    _registry: ToolRegistry = PrivateAttr()

    def __init__(self, registry: ToolRegistry, tool: BaseTool[Any]) -> None:
        super().__init__(
            name=tool.metadata.name,
            description=tool.metadata.description,
            parameters=tool.input_schema(),
            tags={tool.metadata.category},
        )
        self._registry = registry

    async def run(self, arguments: dict[str, Any]) -> ToolResult:
        envelope = await dispatch(self._registry, self.name, arguments)
        return ToolResult(content=render(envelope), is_error=envelope.get("error") is True)


def create_server(
    registry: ToolRegistry | None = None,
    settings: RestMcpSettings | None = None,
) -> FastMCP:
    """Build the FastMCP server with one BridgedTool per registry entry.

    The registry's transports are closed when the server shuts down.
    """
    settings = settings or get_settings()
    registry = registry if registry is not None else default_registry(settings)

    @asynccontextmanager
    async def lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
        try:
            yield {}
        finally:
            await registry.aclose()

    mcp = FastMCP(settings.server.name, version=__version__, lifespan=lifespan)
    for tool in registry:
        mcp.add_tool(BridgedTool(registry, tool))
    logger.debug(f"Registered tools: {', '.join(t.metadata.name for t in registry)}")
    return mcp


def build_parser() -> argparse.ArgumentParser:
    defaults = get_settings()
    parser = argparse.ArgumentParser(
        prog="restmcp",
        description="MCP server exposing REST and GraphQL requests as tools",
    )
    parser.add_argument(
        "--transport",
        choices=["stdio", "sse", "streamable-http"],
        default=defaults.server.transport,
        help="MCP transport (default: %(default)s)",
    )
    parser.add_argument("--host", default=defaults.server.host, help="Bind host for HTTP transports")
    parser.add_argument("--port", type=int, default=defaults.server.port, help="Bind port for HTTP transports")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=defaults.logging.level,
        help="Log level (default: %(default)s)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(args.log_level, settings.logging.format)

    server = create_server(settings=settings)
    logger.info(f"Starting {settings.server.name} {__version__} over {args.transport}")
    if args.transport == "stdio":
        server.run("stdio", show_banner=False)
    else:
        server.run(args.transport, show_banner=False, host=args.host, port=args.port)
