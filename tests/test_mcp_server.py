"""Tests for the MCP tool handlers."""

import asyncio
import json

import pytest

pytestmark = pytest.mark.integration

from mcp import McpError

from pageomatic.mcp import TOOL_HANDLERS, call_tool_handler, get_tool_schemas
from pageomatic.services.export_service import CatalogExporter


@pytest.fixture
def catalog(temp_db, build_service, article_sources):
    result = build_service.run(article_sources, assets=set())
    CatalogExporter(temp_db).publish(result.collection, result.report)
    return temp_db


def call(name, arguments, db):
    contents = asyncio.run(call_tool_handler(name, arguments, db))
    assert len(contents) == 1
    assert contents[0].type == "text"
    return json.loads(contents[0].text)


class TestToolSchemas:
    """Tests for tool registration."""

    def test_every_schema_has_a_handler(self):
        schemas = get_tool_schemas()
        assert set(schemas) == set(TOOL_HANDLERS)
        for name, schema in schemas.items():
            assert schema["name"] == name
            assert schema["inputSchema"]["type"] == "object"


class TestToolHandlers:
    """Tests for calling tools against a published catalog."""

    def test_list_documents(self, catalog):
        documents = call("list_documents", {}, catalog)
        assert [d["id"] for d in documents] == [
            "posts/domain-driven-design",
            "posts/clean-architecture",
            "posts/global-error-handling",
        ]
        assert "body" not in documents[0]

    def test_list_documents_with_body(self, catalog):
        documents = call("list_documents", {"limit": 1, "include_body": True}, catalog)
        assert len(documents) == 1
        assert "mermaid" in documents[0]["body"]

    def test_get_document(self, catalog):
        document = call("get_document", {"document_id": "posts/global-error-handling"}, catalog)
        assert document["title"] == "Global Error Handling"
        assert document["tags"] == ["errors"]

    def test_get_documents_by_tag(self, catalog):
        documents = call("get_documents_by_tag", {"tag": "ddd"}, catalog)
        assert [d["id"] for d in documents] == ["posts/domain-driven-design"]

    def test_list_tags(self, catalog):
        assert call("list_tags", {}, catalog)["architecture"] == 2

    def test_get_resolution_issues(self, catalog):
        result = call("get_resolution_issues", {"kind": "diagram"}, catalog)
        assert len(result["issues"]) == 1
        assert result["issues"][0]["raw_target"] == "diagrams/layers.mmd"
        assert result["report"]["total_issues"] == 1


class TestToolErrors:
    """Tests for mapping failures to MCP errors."""

    def test_unknown_tool(self, catalog):
        with pytest.raises(McpError) as exc_info:
            asyncio.run(call_tool_handler("rebuild_site", {}, catalog))
        assert exc_info.value.error.code == -32601

    def test_missing_argument(self, catalog):
        with pytest.raises(McpError) as exc_info:
            asyncio.run(call_tool_handler("get_document", {}, catalog))
        assert exc_info.value.error.code == -32602

    def test_invalid_paging(self, catalog):
        with pytest.raises(McpError) as exc_info:
            asyncio.run(call_tool_handler("list_documents", {"limit": "many"}, catalog))
        assert exc_info.value.error.code == -32602

    def test_invalid_kind(self, catalog):
        with pytest.raises(McpError) as exc_info:
            asyncio.run(call_tool_handler("get_resolution_issues", {"kind": "image"}, catalog))
        assert exc_info.value.error.code == -32602

    def test_document_not_found(self, catalog):
        with pytest.raises(McpError) as exc_info:
            asyncio.run(call_tool_handler("get_document", {"document_id": "nope"}, catalog))
        assert exc_info.value.error.code == -32001
        assert "nope" in exc_info.value.error.message
