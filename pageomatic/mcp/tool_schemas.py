"""MCP tool schema definitions."""

from typing import Any

_PAGING = {
    "limit": {
        "type": "integer",
        "description": "Maximum number of documents to return (default: 100)",
    },
    "offset": {
        "type": "integer",
        "description": "Number of documents to skip (default: 0)",
    },
}


def get_tool_schemas() -> dict[str, dict[str, Any]]:
    """Get all MCP tool schemas."""
    return {
        "list_documents": {
            "name": "list_documents",
            "description": "List published documents, newest first",
            "inputSchema": {
                "type": "object",
                "properties": {
                    **_PAGING,
                    "include_body": {
                        "type": "boolean",
                        "description": "Include Markdown bodies (default: false)",
                    },
                },
            },
        },
        "get_document": {
            "name": "get_document",
            "description": "Retrieve a published document by ID, including its body",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "document_id": {
                        "type": "string",
                        "description": "Document ID (source path without extension)",
                    },
                },
                "required": ["document_id"],
            },
        },
        "get_documents_by_tag": {
            "name": "get_documents_by_tag",
            "description": "List published documents carrying a tag, newest first",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "tag": {"type": "string", "description": "Tag name"},
                    **_PAGING,
                },
                "required": ["tag"],
            },
        },
        "list_tags": {
            "name": "list_tags",
            "description": "List tags with the number of documents using each",
            "inputSchema": {"type": "object", "properties": {}},
        },
        "get_resolution_issues": {
            "name": "get_resolution_issues",
            "description": "List unresolved diagram and link references with a summary",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "document_id": {
                        "type": "string",
                        "description": "Optional document ID to filter by",
                    },
                    "kind": {
                        "type": "string",
                        "enum": ["diagram", "link"],
                        "description": "Optional issue kind to filter by",
                    },
                },
            },
        },
    }
