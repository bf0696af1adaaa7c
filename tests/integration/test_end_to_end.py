"""End-to-end tests: content tree to CLI build to catalog to HTTP API."""

import json
import logging

import pytest
from fastapi.testclient import TestClient
from typer.testing import CliRunner

pytestmark = pytest.mark.integration

from pageomatic.cli import EXIT_DUPLICATE, EXIT_EXCLUDED, app as cli_app
from pageomatic.http_api import app as http_app, get_database
from pageomatic.services.catalog_service import CatalogService
from pageomatic.storage.database import Database
from tests.conftest import make_source, write_tree

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    """The CLI installs its own root handler; put the previous ones back."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def content_tree(tmp_path, article_sources):
    files = {source.path: source.text for source in article_sources}
    files["posts/diagrams/layers.mmd"] = "graph TD\n  Domain-->Application\n"
    return write_tree(tmp_path / "content", files)


@pytest.fixture
def cli_env(monkeypatch, tmp_path):
    """Quiet logging and a throwaway catalog for CLI runs."""
    db_url = f"sqlite:///{tmp_path / 'catalog.db'}"
    monkeypatch.setenv("PAGEOMATIC_LOG_LEVEL", "ERROR")
    monkeypatch.setenv("PAGEOMATIC_DATABASE_URL", db_url)
    return db_url


@pytest.fixture
def client():
    with TestClient(http_app) as test_client:
        yield test_client
    http_app.dependency_overrides.clear()


def build_json(*args):
    result = runner.invoke(cli_app, ["build", *args, "--json"])
    return result, json.loads(result.stdout) if result.exit_code == 0 else None


class TestCliBuild:
    """Tests for the build command."""

    def test_build_reports_clean_tree(self, cli_env, content_tree):
        result, report = build_json(str(content_tree))
        assert result.exit_code == 0
        assert report["summary"] == {
            "included": 3,
            "excluded": 0,
            "warnings": 0,
            "flagged_documents": 0,
        }
        assert report["included"] == [
            "posts/domain-driven-design",
            "posts/clean-architecture",
            "posts/global-error-handling",
        ]
        assert "published" not in report

    def test_missing_diagram_is_a_warning(self, cli_env, content_tree):
        (content_tree / "posts" / "diagrams" / "layers.mmd").unlink()
        result, report = build_json(str(content_tree))
        assert result.exit_code == 0
        assert report["summary"]["warnings"] == 1
        assert report["warnings"][0]["document_id"] == "posts/clean-architecture"

    def test_excluded_documents_reported(self, cli_env, content_tree):
        write_tree(content_tree, {"drafts/broken.md": "No front matter.\n"})
        result, report = build_json(str(content_tree))
        assert result.exit_code == 0
        assert report["excluded"][0]["source_path"] == "drafts/broken.md"
        assert report["excluded"][0]["reason"] == "malformed_front_matter"

    def test_strict_fails_on_exclusions(self, cli_env, content_tree):
        write_tree(content_tree, {"drafts/broken.md": "No front matter.\n"})
        result = runner.invoke(cli_app, ["build", str(content_tree), "--strict", "--publish", "catalog"])
        assert result.exit_code == EXIT_EXCLUDED

        db = Database(cli_env)
        try:
            db.create_tables()
            with db.session() as session:
                assert CatalogService(session).count() == 0
        finally:
            db.dispose()

    def test_duplicate_id_aborts(self, cli_env, content_tree):
        source = make_source("POSTS/Clean-Architecture.markdown", title="Copy")
        write_tree(content_tree, {source.path: source.text})
        result = runner.invoke(cli_app, ["build", str(content_tree), "--publish", "catalog"])
        assert result.exit_code == EXIT_DUPLICATE

    def test_missing_content_dir(self, cli_env, tmp_path):
        result = runner.invoke(cli_app, ["build", str(tmp_path / "missing")])
        assert result.exit_code == EXIT_EXCLUDED

    def test_drafts_flag(self, cli_env, content_tree):
        source = make_source("posts/wip.md", title="WIP", extra="draft: true")
        write_tree(content_tree, {source.path: source.text})

        _, report = build_json(str(content_tree))
        assert "posts/wip" not in report["included"]

        _, report = build_json(str(content_tree), "--include-drafts", "--workers", "2")
        assert "posts/wip" in report["included"]

    def test_github_publish_requires_credentials(self, cli_env, content_tree, monkeypatch):
        monkeypatch.delenv("PAGEOMATIC_GITHUB_TOKEN", raising=False)
        monkeypatch.delenv("PAGEOMATIC_GITHUB_REPOSITORY", raising=False)
        result = runner.invoke(cli_app, ["build", str(content_tree), "--publish", "github"])
        assert result.exit_code == EXIT_EXCLUDED


class TestPublishAndBrowse:
    """Tests for publishing a build and browsing it over HTTP."""

    @pytest.fixture
    def published_db(self, cli_env, content_tree):
        (content_tree / "posts" / "diagrams" / "layers.mmd").unlink()
        result, report = build_json(str(content_tree), "--publish", "catalog")
        assert result.exit_code == 0
        assert report["published"]["documents"] == 3

        db = Database(cli_env)
        http_app.dependency_overrides[get_database] = lambda: db
        yield db
        db.dispose()

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "page-o-matic"}

    def test_list_documents(self, published_db, client):
        response = client.get("/documents")
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert [d["id"] for d in data["documents"]] == [
            "posts/domain-driven-design",
            "posts/clean-architecture",
            "posts/global-error-handling",
        ]
        assert "body" not in data["documents"][0]

    def test_get_document_by_path_id(self, published_db, client):
        response = client.get("/documents/posts/clean-architecture")
        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Clean Architecture"
        assert data["has_issues"] is True
        assert "body" in data

    def test_get_missing_document(self, published_db, client):
        response = client.get("/documents/posts/nope")
        assert response.status_code == 404
        assert "posts/nope" in response.json()["detail"]

    def test_tags(self, published_db, client):
        assert client.get("/tags").json() == {
            "architecture": 2,
            "clean-architecture": 1,
            "ddd": 1,
            "errors": 1,
        }
        documents = client.get("/tags/architecture/documents").json()
        assert [d["id"] for d in documents] == [
            "posts/domain-driven-design",
            "posts/clean-architecture",
        ]

    def test_issues(self, published_db, client):
        data = client.get("/issues", params={"kind": "diagram"}).json()
        assert data["report"]["total_issues"] == 1
        assert data["issues"][0]["target"] == "posts/diagrams/layers.mmd"

    def test_issues_kind_validated(self, published_db, client):
        assert client.get("/issues", params={"kind": "image"}).status_code == 422

    def test_paging_validated(self, published_db, client):
        assert client.get("/documents", params={"limit": 0}).status_code == 422
