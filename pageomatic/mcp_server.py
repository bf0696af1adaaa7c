"""MCP (Model Context Protocol) server for Page-O-Matic.

This server exposes read-only queries over the published catalog to AI agents.
It uses the standardized mcp library for JSON-RPC 2.0 communication over stdio.
"""

import asyncio
import logging

from mcp import McpError
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server
from mcp.types import ErrorData, TextContent, Tool

from pageomatic import __version__
from pageomatic.config import configure_logging, get_settings
from pageomatic.mcp.tool_handlers import call_tool_handler
from pageomatic.mcp.tool_schemas import get_tool_schemas
from pageomatic.storage.database import get_db

logger = logging.getLogger(__name__)

# Initialize MCP server
app = Server("page-o-matic")


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List all available MCP tools."""
    return [Tool(**schema) for schema in get_tool_schemas().values()]


@app.call_tool()
async def call_tool(name: str, arguments: dict | None) -> list[TextContent]:
    """Handle tool calls."""
    if arguments is None:
        arguments = {}

    db = get_db()

    try:
        return await call_tool_handler(name, arguments, db)
    except McpError:
        raise
    except Exception as e:
        logger.exception("Unexpected error handling tool %s", name)
        raise McpError(
            ErrorData(
                code=-32603,  # Internal error
                message=f"Internal error: {str(e)}",
            )
        ) from e


async def main() -> None:
    """Main entry point for MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await app.run(
            read_stream,
            write_stream,
            InitializationOptions(
                server_name="page-o-matic",
                server_version=__version__,
                capabilities=app.get_capabilities(
                    notification_options=NotificationOptions(),
                    experimental_capabilities={},
                ),
            ),
        )


if __name__ == "__main__":
    configure_logging(get_settings())
    asyncio.run(main())
