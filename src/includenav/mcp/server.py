#!/usr/bin/env python3
"""includenav MCP Server - Exposes include/import navigation as MCP tools.

This server implements the Model Context Protocol (MCP) so AI assistants can
resolve include/import paths, list completions and find broken references
the same way an editor integration does.

Usage:
    python -m includenav.mcp.server
    includenav-mcp --workspace /my/project
"""

import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

# MCP SDK imports
try:
    from mcp.server import Server
    from mcp.server.stdio import stdio_server
    from mcp.types import TextContent, Tool

    HAS_MCP = True
except ImportError:
    HAS_MCP = False
    Server = None

from ..config import load_config
from ..documents import TextDocument, iter_source_files
from ..navigator import IncludeNavigator

logger = logging.getLogger(__name__)

# ==============================================================================
# TOOL DEFINITIONS
# ==============================================================================

_FILE_PROPERTY = {
    "type": "string",
    "description": "File containing the reference (absolute or relative to the workspace)",
}

TOOLS: List[Dict[str, Any]] = [
    {
        "name": "includenav_resolve",
        "description": """Resolve an include/import path string to the files it refers to.

USE THIS TOOL WHEN:
- You see an import/require/include and need the file behind it
- An import uses a path alias (@components/..., ~/...) from tsconfig or vite/webpack

RETURNS: Existing target files, or the list of candidates tried when nothing exists.""",
        "inputSchema": {
            "type": "object",
            "properties": {
                "file_path": _FILE_PROPERTY,
                "raw": {
                    "type": "string",
                    "description": "The path exactly as written, e.g. './utils' or '@/lib/api'",
                },
            },
            "required": ["file_path", "raw"],
        },
    },
    {
        "name": "includenav_context",
        "description": """Extract the include/import path at a position in a file.

RETURNS: The quoted path under the given line and column, or a note that there is none.""",
        "inputSchema": {
            "type": "object",
            "properties": {
                "file_path": _FILE_PROPERTY,
                "line": {"type": "integer", "description": "Line number (1-indexed)"},
                "column": {"type": "integer", "description": "Column number (1-indexed)"},
            },
            "required": ["file_path", "line", "column"],
        },
    },
    {
        "name": "includenav_complete",
        "description": """List files and directories matching a partially typed path.

RETURNS: Entries relative to the file's directory (or the project root for '/' paths), directories first.""",
        "inputSchema": {
            "type": "object",
            "properties": {
                "file_path": _FILE_PROPERTY,
                "prefix": {
                    "type": "string",
                    "description": "Typed path so far, e.g. './Bu'",
                    "default": "",
                },
            },
            "required": ["file_path"],
        },
    },
    {
        "name": "includenav_scan",
        "description": """Find include/import references that resolve to nothing.

USE THIS TOOL WHEN:
- You moved or renamed files and want to find broken imports
- You are reviewing a project for dangling includes

RETURNS: One line per unresolved reference as file:line:column and the raw path.""",
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "File or directory to scan (uses the workspace if not specified)",
                },
                "limit": {
                    "type": "integer",
                    "description": "Maximum findings to return",
                    "default": 100,
                },
            },
        },
    },
    {
        "name": "includenav_aliases",
        "description": """Show the path aliases a project declares (tsconfig/jsconfig paths, vite/webpack resolve.alias).

RETURNS: Alias prefix, target directory and the config file each came from.""",
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "Project root (uses the workspace if not specified)",
                },
            },
        },
    },
    {
        "name": "includenav_probe",
        "description": """Check whether an http(s) URL answers, using a HEAD request with a 3 second timeout.

RETURNS: The HTTP status, or 'unreachable'.""",
        "inputSchema": {
            "type": "object",
            "properties": {
                "url": {"type": "string", "description": "http or https URL"},
            },
            "required": ["url"],
        },
    },
]


# ==============================================================================
# TOOL IMPLEMENTATIONS
# ==============================================================================


class IncludeNavToolHandler:
    """Handles execution of includenav MCP tools."""

    def __init__(self, workspace_root: Optional[str] = None, navigator: Optional[IncludeNavigator] = None):
        self.workspace_root = Path(workspace_root or os.getcwd()).resolve()
        self.navigator = navigator or IncludeNavigator(
            [self.workspace_root], config=load_config(self.workspace_root)
        )

    def _path(self, value: Optional[str]) -> Path:
        if not value:
            return self.workspace_root
        path = Path(value)
        return path if path.is_absolute() else self.workspace_root / path

    def _open(self, file_path: str) -> TextDocument:
        return TextDocument.from_file(self._path(file_path))

    def _relative(self, path: Path) -> str:
        try:
            return path.relative_to(self.workspace_root).as_posix()
        except ValueError:
            return str(path)

    async def handle_resolve(self, arguments: Dict[str, Any]) -> str:
        """Handle includenav_resolve tool call."""
        document = self._open(arguments["file_path"])
        result = await self.navigator.resolve(document, arguments["raw"])

        if result.found:
            return "\n".join(self._relative(p) for p in result.targets)
        if not result.candidates:
            return f"'{result.raw}' is not a local path."
        lines = [f"Not found: {result.raw}", "Tried:"]
        lines.extend(f"  {self._relative(p)}" for p in result.candidates)
        return "\n".join(lines)

    async def handle_context(self, arguments: Dict[str, Any]) -> str:
        """Handle includenav_context tool call."""
        document = self._open(arguments["file_path"])
        line = arguments["line"] - 1
        column = arguments["column"] - 1
        context = self.navigator.extract_context(document, line, column)
        if not context.found:
            return "No include/import path at this position."
        return f"{context.text} (columns {context.start + 1}-{context.end})"

    async def handle_complete(self, arguments: Dict[str, Any]) -> str:
        """Handle includenav_complete tool call."""
        document = self._open(arguments["file_path"])
        entries = await self.navigator.list_completions(document, arguments.get("prefix", ""))
        if not entries:
            return "No matching entries."
        return "\n".join(entry.name for entry in entries)

    async def handle_scan(self, arguments: Dict[str, Any]) -> str:
        """Handle includenav_scan tool call."""
        target = self._path(arguments.get("path"))
        limit = arguments.get("limit", 100)
        files = list(iter_source_files(target)) if target.is_dir() else [target]

        lines = []
        for file_path in files:
            try:
                document = TextDocument.from_file(file_path)
            except OSError as e:
                logger.debug("Skipping %s: %s", file_path, e)
                continue
            for finding in await self.navigator.scan_document(document):
                lines.append(
                    f"{self._relative(document.path)}:{finding.line + 1}:{finding.start + 1} "
                    f"{finding.message}"
                )

        if not lines:
            return f"No unresolved references in {len(files)} files."
        shown = lines[:limit]
        if len(lines) > limit:
            shown.append(f"... and {len(lines) - limit} more")
        return "\n".join(shown)

    async def handle_aliases(self, arguments: Dict[str, Any]) -> str:
        """Handle includenav_aliases tool call."""
        root = self._path(arguments.get("path"))
        entries = await self.navigator.alias_entries(root)
        if not entries:
            return "No aliases configured."
        return "\n".join(
            f"{e.prefix} -> {self._relative(e.target)} ({e.source})" for e in entries
        )

    async def handle_probe(self, arguments: Dict[str, Any]) -> str:
        """Handle includenav_probe tool call."""
        result = await self.navigator.probe_url(arguments["url"])
        return f"{result.url}: {result.status_line}"

    async def dispatch(self, name: str, arguments: Dict[str, Any]) -> str:
        """Run a tool by name."""
        handlers = {
            "includenav_resolve": self.handle_resolve,
            "includenav_context": self.handle_context,
            "includenav_complete": self.handle_complete,
            "includenav_scan": self.handle_scan,
            "includenav_aliases": self.handle_aliases,
            "includenav_probe": self.handle_probe,
        }
        handler = handlers.get(name)
        if handler is None:
            return f"Unknown tool: {name}"
        return await handler(arguments)


# ==============================================================================
# SERVER SETUP
# ==============================================================================


def create_server(workspace_root: Optional[str] = None) -> "Server":
    """Create and configure the MCP server."""
    if not HAS_MCP:
        raise ImportError("MCP SDK not installed. Install with: pip install mcp")

    server = Server("includenav")
    handler = IncludeNavToolHandler(workspace_root)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """List available tools."""
        return [
            Tool(
                name=tool["name"],
                description=tool["description"],
                inputSchema=tool["inputSchema"],
            )
            for tool in TOOLS
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: Dict[str, Any]) -> Sequence[TextContent]:
        """Execute a tool and return the result."""
        try:
            result = await handler.dispatch(name, arguments)
            return [TextContent(type="text", text=result)]
        except (OSError, KeyError, ValueError) as e:
            logger.exception("Error executing tool %s", name)
            return [TextContent(type="text", text=f"Error: {e}")]

    return server


async def run_server(workspace_root: Optional[str] = None):
    """Run the MCP server using stdio transport."""
    server = create_server(workspace_root)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main():
    """Entry point for the MCP server."""
    import argparse

    parser = argparse.ArgumentParser(description="includenav MCP Server")
    parser.add_argument(
        "--workspace",
        "-w",
        default=os.getcwd(),
        help="Workspace root directory",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args()

    # stdout carries the protocol, so logs go to stderr
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO, stream=sys.stderr)

    if not HAS_MCP:
        print("Error: MCP SDK not installed. Install with: pip install mcp", file=sys.stderr)
        sys.exit(1)

    asyncio.run(run_server(args.workspace))


if __name__ == "__main__":
    main()
