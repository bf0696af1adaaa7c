"""Renderer adapters that hand a sealed collection to the outside world."""

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import frontmatter
from github import Github, GithubException
from sqlalchemy.exc import SQLAlchemyError

from pageomatic.exceptions import (
    DatabaseError,
    ExportError,
    GitHubAPIError,
    GitHubAuthenticationError,
    IndexNotSealed,
)
from pageomatic.models.document import Document
from pageomatic.serializers import jsonable
from pageomatic.services.build_service import BuildReport
from pageomatic.services.collection_service import Collection
from pageomatic.storage.database import Database
from pageomatic.storage.records import DocumentRecord, IssueRecord, TagRecord
from pageomatic.storage.repositories import DocumentRepository

logger = logging.getLogger(__name__)


class RendererAdapter(Protocol):
    """Consumes a sealed collection; never mutates it."""

    def publish(
        self, collection: Collection, report: Optional[BuildReport] = None
    ) -> dict[str, Any]:
        ...


def _require_sealed(collection: Collection) -> None:
    if not collection.sealed:
        raise IndexNotSealed("publish collection")


class CatalogExporter:
    """Writes a sealed collection into the SQL catalog read by the site generator."""

    def __init__(self, db: Database):
        """
        Initialize catalog exporter.

        Args:
            db: Catalog database
        """
        self.db = db

    def publish(
        self, collection: Collection, report: Optional[BuildReport] = None
    ) -> dict[str, Any]:
        """
        Replace the catalog contents with the collection in one transaction.

        Args:
            collection: Sealed collection
            report: Optional build report whose warnings are stored as issues

        Returns:
            Dictionary with export counts

        Raises:
            IndexNotSealed: If the collection is still building
            DatabaseError: If the catalog cannot be written
        """
        _require_sealed(collection)
        warnings = report.warnings if report is not None else []

        try:
            with self.db.session() as session:
                repo = DocumentRepository(session)
                removed = repo.delete_all()

                tag_count = 0
                issue_count = 0
                for position, document in enumerate(collection.all()):
                    record = self._to_record(document, position)
                    record.issues = [
                        IssueRecord(
                            kind=issue.kind.value,
                            raw_target=issue.raw_target,
                            target=issue.target,
                            reason=issue.reason,
                            line=issue.line,
                        )
                        for issue in warnings
                        if issue.document_id == document.id
                    ]
                    tag_count += len(record.tags)
                    issue_count += len(record.issues)
                    repo.create(record)

        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to publish collection: {str(e)}", e) from e

        logger.info(
            "Published %d document(s) to catalog (replaced %d)", len(collection), removed
        )
        return {
            "status": "success",
            "documents": len(collection),
            "tags": tag_count,
            "issues": issue_count,
            "replaced": removed,
        }

    @staticmethod
    def _to_record(document: Document, position: int) -> DocumentRecord:
        return DocumentRecord(
            id=document.id,
            source_path=document.source_path,
            title=document.title,
            published_at=document.published_at,
            draft=document.draft,
            has_issues=document.has_issues,
            body=document.body,
            position=position,
            meta=jsonable(document.meta),
            tags=[TagRecord(tag=tag) for tag in sorted(document.tags)],
        )


@dataclass
class GitHubPagesConfig:
    """Configuration for publishing to a GitHub Pages repository."""

    repository: str  # owner/name
    base_path: str = "content"
    branch: Optional[str] = None  # Optional branch name (creates if doesn't exist)
    commit_prefix: str = "Publish"
    # Delete Markdown files under base_path that no longer belong to the collection
    prune: bool = True
    content_extensions: tuple[str, ...] = (".md", ".markdown")


class GitHubPagesExporter:
    """Commits every published document as a Markdown file for a Pages build."""

    MAX_RETRIES = 3
    RETRY_DELAY = 1.0  # seconds

    def __init__(self, github_token: str, config: GitHubPagesConfig):
        """
        Initialize GitHub Pages exporter.

        Args:
            github_token: GitHub personal access token or OAuth token
            config: Target repository configuration
        """
        if not github_token:
            raise ExportError("GitHub token is required for publishing")
        if not config.repository or config.repository.count("/") != 1:
            raise ExportError("Repository must be given as owner/name")
        self.github = Github(github_token)
        self.config = config

    def publish(
        self, collection: Collection, report: Optional[BuildReport] = None
    ) -> dict[str, Any]:
        """
        Create or update one file per document in the target repository.

        With ``prune`` enabled and a non-empty ``base_path``, Markdown files
        under ``base_path`` that no published document maps to are deleted,
        so the repository mirrors the collection. Other files are left alone.

        Args:
            collection: Sealed collection
            report: Unused; accepted for adapter compatibility

        Returns:
            Dictionary with export results:
            - status: "success"
            - files_created: Paths of new files
            - files_updated: Paths of changed files
            - files_unchanged: Paths whose content already matched
            - files_deleted: Stale paths removed by pruning
            - commit_sha: Last commit SHA (if any commit was made)

        Raises:
            IndexNotSealed: If the collection is still building
            GitHubAuthenticationError: If GitHub authentication fails
            GitHubAPIError: If GitHub API operations fail
        """
        _require_sealed(collection)
        repo = self._get_repository(self.config.repository)
        if self.config.branch:
            self._ensure_branch(repo, self.config.branch)

        result: dict[str, Any] = {
            "status": "success",
            "files_created": [],
            "files_updated": [],
            "files_unchanged": [],
            "files_deleted": [],
            "commit_sha": None,
        }
        published: set[str] = set()
        for document in collection.all():
            file_path = self.file_path(document)
            published.add(file_path)
            content = self.render(document)
            message = f"{self.config.commit_prefix}: {document.title}"
            outcome, sha = self._create_or_update_file(repo, file_path, content, message)
            result[f"files_{outcome}"].append(file_path)
            if sha:
                result["commit_sha"] = sha

        base = self.config.base_path.strip("/")
        if self.config.prune and base:
            for stale in self._stale_files(repo, base, published):
                message = f"{self.config.commit_prefix}: remove {stale.path}"
                sha = self._delete_file(repo, stale.path, stale.sha, message)
                result["files_deleted"].append(stale.path)
                result["commit_sha"] = sha

        logger.info(
            "Published to %s: %d created, %d updated, %d unchanged, %d deleted",
            self.config.repository,
            len(result["files_created"]),
            len(result["files_updated"]),
            len(result["files_unchanged"]),
            len(result["files_deleted"]),
        )
        return result

    def file_path(self, document: Document) -> str:
        """Repository path of a document, mirroring its source layout."""
        base = self.config.base_path.strip("/")
        return f"{base}/{document.source_path}" if base else document.source_path

    @staticmethod
    def render(document: Document) -> str:
        """Render a document back to Markdown with normalized front matter."""
        metadata = jsonable(document.meta)
        metadata["title"] = document.title
        metadata["date"] = jsonable(document.published_at)
        metadata["tags"] = sorted(document.tags)
        post = frontmatter.Post(document.body)
        post.metadata.update(metadata)
        return frontmatter.dumps(post, sort_keys=False).rstrip("\n") + "\n"

    def _get_repository(self, full_name: str) -> Any:
        """Get GitHub repository with retry logic."""
        for attempt in range(self.MAX_RETRIES):
            try:
                return self.github.get_repo(full_name)
            except GithubException as e:
                if e.status == 401:
                    raise GitHubAuthenticationError(
                        "GitHub authentication failed. Check your token."
                    ) from e
                if e.status == 404:
                    raise GitHubAPIError(f"Repository '{full_name}' not found") from e
                if attempt < self.MAX_RETRIES - 1:
                    time.sleep(self.RETRY_DELAY * (attempt + 1))
                    continue
                raise GitHubAPIError(f"Failed to get repository: {str(e)}") from e
        raise GitHubAPIError("Failed to get repository after retries")

    def _ensure_branch(self, repo: Any, branch_name: str) -> None:
        """Ensure branch exists, create if it doesn't."""
        try:
            repo.get_branch(branch_name)
        except GithubException as e:
            if e.status != 404:
                raise GitHubAPIError(
                    f"Failed to check branch '{branch_name}': {str(e)}"
                ) from e
            try:
                source_sha = repo.get_branch(repo.default_branch).commit.sha
                repo.create_git_ref(ref=f"refs/heads/{branch_name}", sha=source_sha)
            except GithubException as create_error:
                raise GitHubAPIError(
                    f"Failed to create branch '{branch_name}': {str(create_error)}"
                ) from create_error

    def _stale_files(self, repo: Any, base: str, published: set[str]) -> list[Any]:
        """List Markdown files under base that are not in the published set."""
        extensions = tuple(ext.lower() for ext in self.config.content_extensions)
        return [
            item
            for item in self._list_files(repo, base)
            if item.path not in published and item.path.lower().endswith(extensions)
        ]

    def _list_files(self, repo: Any, directory: str) -> list[Any]:
        """Recursively list repository files under a directory; missing means empty."""
        branch = self.config.branch
        ref_kwargs = {"ref": branch} if branch else {}
        try:
            contents = repo.get_contents(directory, **ref_kwargs)
        except GithubException as e:
            if e.status == 404:
                return []
            if e.status == 401:
                raise GitHubAuthenticationError(
                    "GitHub authentication failed. Check your token."
                ) from e
            raise GitHubAPIError(f"Failed to list '{directory}': {str(e)}") from e

        if not isinstance(contents, list):
            contents = [contents]
        files = []
        for item in contents:
            if item.type == "dir":
                files.extend(self._list_files(repo, item.path))
            else:
                files.append(item)
        return files

    def _delete_file(self, repo: Any, file_path: str, blob_sha: str, commit_message: str) -> str:
        """Delete a file with retry logic; returns the commit sha."""
        branch = self.config.branch
        branch_kwargs = {"branch": branch} if branch else {}

        for attempt in range(self.MAX_RETRIES):
            try:
                deleted = repo.delete_file(file_path, commit_message, blob_sha, **branch_kwargs)
                return deleted["commit"].sha
            except GithubException as e:
                if e.status == 401:
                    raise GitHubAuthenticationError(
                        "GitHub authentication failed. Check your token."
                    ) from e
                if e.status == 403:
                    raise GitHubAPIError(
                        "GitHub API permission denied. Check repository permissions."
                    ) from e
                if attempt < self.MAX_RETRIES - 1:
                    time.sleep(self.RETRY_DELAY * (attempt + 1))
                    continue
                raise GitHubAPIError(f"Failed to delete file '{file_path}': {str(e)}") from e

        raise GitHubAPIError("Failed to delete file after retries")

    def _create_or_update_file(
        self, repo: Any, file_path: str, content: str, commit_message: str
    ) -> tuple[str, Optional[str]]:
        """Create or update a file with retry logic; returns (outcome, commit sha)."""
        branch = self.config.branch
        ref_kwargs = {"ref": branch} if branch else {}
        branch_kwargs = {"branch": branch} if branch else {}

        for attempt in range(self.MAX_RETRIES):
            try:
                try:
                    existing = repo.get_contents(file_path, **ref_kwargs)
                except GithubException as e:
                    if e.status != 404:
                        raise
                    created = repo.create_file(
                        file_path, commit_message, content, **branch_kwargs
                    )
                    return "created", created["commit"].sha

                if existing.decoded_content == content.encode("utf-8"):
                    return "unchanged", None
                updated = repo.update_file(
                    file_path, commit_message, content, existing.sha, **branch_kwargs
                )
                return "updated", updated["commit"].sha

            except GithubException as e:
                if e.status == 401:
                    raise GitHubAuthenticationError(
                        "GitHub authentication failed. Check your token."
                    ) from e
                if e.status == 403:
                    raise GitHubAPIError(
                        "GitHub API permission denied. Check repository permissions."
                    ) from e
                if attempt < self.MAX_RETRIES - 1:
                    time.sleep(self.RETRY_DELAY * (attempt + 1))
                    continue
                raise GitHubAPIError(
                    f"Failed to create/update file '{file_path}': {str(e)}"
                ) from e

        raise GitHubAPIError("Failed to create/update file after retries")
