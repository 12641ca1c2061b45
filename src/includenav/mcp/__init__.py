"""includenav MCP Server - Model Context Protocol integration.

Exposes include/import resolution, completion and broken-reference scanning
as MCP tools for MCP-compatible AI assistants.

Usage:
    # Entry point (recommended)
    includenav-mcp

    # Or as a Python module
    python -m includenav.mcp
"""

from .server import TOOLS, IncludeNavToolHandler, create_server, main, run_server

__all__ = [
    "TOOLS",
    "IncludeNavToolHandler",
    "create_server",
    "run_server",
    "main",
]
