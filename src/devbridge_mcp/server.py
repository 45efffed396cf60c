"""Dev Bridge MCP Server - project file and git tools exposed over MCP."""

import argparse
import asyncio
import logging

from fastmcp import FastMCP

from devbridge_mcp import __version__
from devbridge_mcp.bridge import close_bridge_client
from devbridge_mcp.tools import files, git

mcp = FastMCP(
    "Dev Bridge MCP Server",
    instructions=(
        "Project workspace MCP server. "
        "Reads, writes, lists, creates and deletes project files and runs "
        "git status/diff/commit/push through a devbridge WebSocket service "
        "running in the project directory. Commits stage every change in the "
        "working tree."
    ),
)

logger = logging.getLogger("devbridge-mcp.server")

# Register file tools
files.register(mcp)

# Register git tools
git.register(mcp)


def main():
    """Entry point for the dev bridge MCP server."""
    parser = argparse.ArgumentParser(
        prog="devbridge-mcp",
        description="Dev Bridge MCP Server - project file and git tools exposed over MCP",
    )
    parser.add_argument("--version", "-v", action="version", version=f"devbridge-mcp {__version__}")
    parser.add_argument(
        "--transport",
        choices=["stdio", "http", "sse"],
        default="stdio",
        help="Transport protocol (default: stdio)",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind when using http/sse transport (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to bind when using http/sse transport (default: 8000)",
    )
    args = parser.parse_args()

    run_kwargs: dict = {"transport": args.transport, "show_banner": False}
    if args.transport in ("http", "sse"):
        run_kwargs["host"] = args.host
        run_kwargs["port"] = args.port

    # Suppress noisy uvicorn shutdown messages (e.g. "Cancel N running task(s)")
    logging.getLogger("uvicorn.error").setLevel(logging.CRITICAL)

    try:
        mcp.run(**run_kwargs)
    except KeyboardInterrupt:
        pass
    finally:
        try:
            asyncio.run(close_bridge_client())
        except Exception as exc:
            logger.debug("Bridge client cleanup skipped: %s", exc)
