"""MCP tool handlers for reading the published catalog."""

import json
from typing import Any

from mcp import McpError
from mcp.types import ErrorData, TextContent

from pageomatic.exceptions import DatabaseError, DocumentNotFound
from pageomatic.serializers import serialize_document
from pageomatic.services.catalog_service import CatalogService
from pageomatic.services.link.reporting import IssueReporter


def _text(result: Any) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps(result, indent=2))]


def _paging(arguments: dict[str, Any]) -> tuple[int, int]:
    try:
        return int(arguments.get("limit", 100)), int(arguments.get("offset", 0))
    except (TypeError, ValueError) as e:
        raise ValueError("limit and offset must be integers") from e


async def handle_list_documents(arguments: dict[str, Any], db: Any) -> list[TextContent]:
    """Handle list_documents tool."""
    limit, offset = _paging(arguments)
    include_body = bool(arguments.get("include_body", False))
    with db.session() as session:
        records = CatalogService(session).list_documents(limit=limit, offset=offset)
        return _text([serialize_document(r, include_body=include_body) for r in records])


async def handle_get_document(arguments: dict[str, Any], db: Any) -> list[TextContent]:
    """Handle get_document tool."""
    with db.session() as session:
        record = CatalogService(session).get_document(arguments["document_id"])
        return _text(serialize_document(record))


async def handle_get_documents_by_tag(arguments: dict[str, Any], db: Any) -> list[TextContent]:
    """Handle get_documents_by_tag tool."""
    limit, offset = _paging(arguments)
    with db.session() as session:
        records = CatalogService(session).documents_by_tag(
            arguments["tag"], limit=limit, offset=offset
        )
        return _text([serialize_document(r, include_body=False) for r in records])


async def handle_list_tags(arguments: dict[str, Any], db: Any) -> list[TextContent]:
    """Handle list_tags tool."""
    with db.session() as session:
        return _text(CatalogService(session).list_tags())


async def handle_get_resolution_issues(arguments: dict[str, Any], db: Any) -> list[TextContent]:
    """Handle get_resolution_issues tool."""
    kind = arguments.get("kind")
    if kind is not None and kind not in ("diagram", "link"):
        raise ValueError("kind must be 'diagram' or 'link'")
    with db.session() as session:
        issues = [
            record.to_issue()
            for record in CatalogService(session).list_issues(
                document_id=arguments.get("document_id"), kind=kind
            )
        ]
        return _text(
            {
                "issues": [issue.to_dict() for issue in issues],
                "report": IssueReporter().generate_issue_report(issues),
            }
        )


# Tool handler registry
TOOL_HANDLERS = {
    "list_documents": handle_list_documents,
    "get_document": handle_get_document,
    "get_documents_by_tag": handle_get_documents_by_tag,
    "list_tags": handle_list_tags,
    "get_resolution_issues": handle_get_resolution_issues,
}


async def call_tool_handler(tool_name: str, arguments: dict[str, Any], db: Any) -> list[TextContent]:
    """
    Call the appropriate tool handler.

    Args:
        tool_name: Name of the tool to call
        arguments: Tool arguments
        db: Database instance

    Returns:
        List of TextContent with tool execution result

    Raises:
        McpError: If tool name is unknown or handler raises an error
    """
    if tool_name not in TOOL_HANDLERS:
        raise McpError(
            ErrorData(
                code=-32601,  # Method not found
                message=f"Unknown tool: {tool_name}",
            )
        )

    handler = TOOL_HANDLERS[tool_name]

    try:
        return await handler(arguments, db)
    except McpError:
        raise
    except (KeyError, ValueError) as e:
        raise McpError(
            ErrorData(
                code=-32602,  # Invalid params
                message=f"Invalid arguments: {str(e)}",
            )
        )
    except DocumentNotFound as e:
        raise McpError(
            ErrorData(
                code=-32001,  # Custom error: not found
                message=str(e),
            )
        )
    except DatabaseError as e:
        raise McpError(
            ErrorData(
                code=-32603,  # Internal error
                message=f"Database error: {str(e)}",
            )
        )
