"""Tests for publishing to and reading from the SQL catalog."""

import pytest

pytestmark = pytest.mark.unit

from pageomatic.exceptions import DocumentNotFound, IndexNotSealed
from pageomatic.serializers import serialize_document
from pageomatic.services.catalog_service import CatalogService
from pageomatic.services.collection_service import Collection
from pageomatic.services.export_service import CatalogExporter


@pytest.fixture
def build(build_service, article_sources):
    """A build with one unresolved diagram reference."""
    return build_service.run(article_sources, assets=set())


@pytest.fixture
def published(temp_db, build):
    CatalogExporter(temp_db).publish(build.collection, build.report)
    return temp_db


class TestCatalogExporter:
    """Tests for writing collections into the catalog."""

    def test_publish_counts(self, temp_db, build):
        result = CatalogExporter(temp_db).publish(build.collection, build.report)
        assert result == {
            "status": "success",
            "documents": 3,
            "tags": 5,
            "issues": 1,
            "replaced": 0,
        }

    def test_republish_replaces_contents(self, temp_db, build, build_service, article_sources):
        exporter = CatalogExporter(temp_db)
        exporter.publish(build.collection, build.report)

        smaller = build_service.run(article_sources[:1], assets={"posts/diagrams/layers.mmd"})
        result = exporter.publish(smaller.collection, smaller.report)

        assert result["replaced"] == 3
        with temp_db.session() as session:
            service = CatalogService(session)
            assert service.count() == 1
            assert service.list_issues() == []
            assert service.list_tags() == {"architecture": 1, "clean-architecture": 1}

    def test_publish_without_report(self, temp_db, build):
        result = CatalogExporter(temp_db).publish(build.collection)
        assert result["issues"] == 0

    def test_unsealed_collection_rejected(self, temp_db):
        with pytest.raises(IndexNotSealed):
            CatalogExporter(temp_db).publish(Collection())

    def test_publish_does_not_mutate_collection(self, temp_db, build):
        before = build.collection.all()
        CatalogExporter(temp_db).publish(build.collection, build.report)
        assert build.collection.all() == before


class TestCatalogService:
    """Tests for reading the published catalog."""

    def test_list_documents_newest_first(self, published):
        with published.session() as session:
            records = CatalogService(session).list_documents()
            assert [r.id for r in records] == [
                "posts/domain-driven-design",
                "posts/clean-architecture",
                "posts/global-error-handling",
            ]

    def test_list_documents_paging(self, published):
        with published.session() as session:
            records = CatalogService(session).list_documents(limit=1, offset=1)
            assert [r.id for r in records] == ["posts/clean-architecture"]

    def test_get_document(self, published):
        with published.session() as session:
            record = CatalogService(session).get_document("posts/clean-architecture")
            data = serialize_document(record)
        assert data["title"] == "Clean Architecture"
        assert data["tags"] == ["architecture", "clean-architecture"]
        assert data["has_issues"] is True
        assert data["published_at"].startswith("2024-10-28T00:00:00")
        assert "layers.mmd" in data["body"]
        assert data["metadata"]["title"] == "Clean Architecture"

    def test_get_missing_document(self, published):
        with published.session() as session:
            with pytest.raises(DocumentNotFound):
                CatalogService(session).get_document("nope")

    def test_documents_by_tag(self, published):
        with published.session() as session:
            records = CatalogService(session).documents_by_tag("architecture")
            assert [r.id for r in records] == [
                "posts/domain-driven-design",
                "posts/clean-architecture",
            ]

    def test_list_tags(self, published):
        with published.session() as session:
            assert CatalogService(session).list_tags() == {
                "architecture": 2,
                "clean-architecture": 1,
                "ddd": 1,
                "errors": 1,
            }

    def test_list_issues(self, published):
        with published.session() as session:
            service = CatalogService(session)
            issues = [record.to_issue() for record in service.list_issues()]
            assert len(issues) == 1
            assert issues[0].document_id == "posts/clean-architecture"
            assert issues[0].target == "posts/diagrams/layers.mmd"
            assert service.list_issues(kind="link") == []

    def test_stats(self, published):
        with published.session() as session:
            assert CatalogService(session).stats() == {"documents": 3, "tags": 4, "issues": 1}

    def test_limit_clamped(self, published):
        with published.session() as session:
            assert len(CatalogService(session).list_documents(limit=0)) == 1
