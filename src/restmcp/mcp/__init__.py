"""MCP server integration.

Example:
    >>> from restmcp.mcp import create_server
    >>> create_server().run()
"""

from .server import BridgedTool, create_server, main

__all__ = ["BridgedTool", "create_server", "main"]
