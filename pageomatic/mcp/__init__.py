"""MCP module with tool schemas and handlers."""

from pageomatic.mcp.tool_handlers import TOOL_HANDLERS, call_tool_handler
from pageomatic.mcp.tool_schemas import get_tool_schemas

__all__ = [
    "call_tool_handler",
    "TOOL_HANDLERS",
    "get_tool_schemas",
]
