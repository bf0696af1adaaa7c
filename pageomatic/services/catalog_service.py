"""Read-only queries over the published catalog."""

from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pageomatic.exceptions import DatabaseError, DocumentNotFound
from pageomatic.storage.records import DocumentRecord, IssueRecord
from pageomatic.storage.repositories import (
    DocumentRepository,
    IssueRepository,
    TagRepository,
)


class CatalogService:
    """Service layer for reading published documents, tags and issues."""

    MAX_LIMIT = 1000

    def __init__(self, session: Session):
        """
        Initialize catalog service with database session.

        Args:
            session: SQLAlchemy database session
        """
        self.session = session
        self.document_repo = DocumentRepository(session)
        self.tag_repo = TagRepository(session)
        self.issue_repo = IssueRepository(session)

    def get_document(self, document_id: str) -> DocumentRecord:
        """
        Get a published document by ID.

        Raises:
            DocumentNotFound: If the document is not in the catalog
            DatabaseError: If database operation fails
        """
        try:
            record = self.document_repo.get_by_id(document_id)
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to get document: {str(e)}", e) from e
        if record is None:
            raise DocumentNotFound(document_id)
        return record

    def list_documents(self, limit: int = 100, offset: int = 0) -> list[DocumentRecord]:
        """List published documents newest first."""
        try:
            return self.document_repo.list(limit=self._clamp(limit), offset=max(offset, 0))
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to list documents: {str(e)}", e) from e

    def documents_by_tag(
        self, tag: str, limit: int = 100, offset: int = 0
    ) -> list[DocumentRecord]:
        """List published documents carrying ``tag`` newest first."""
        try:
            return self.document_repo.get_by_tag(
                tag, limit=self._clamp(limit), offset=max(offset, 0)
            )
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to get documents by tag: {str(e)}", e) from e

    def list_tags(self) -> dict[str, int]:
        """Return tag usage counts."""
        try:
            return self.tag_repo.counts()
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to list tags: {str(e)}", e) from e

    def list_issues(
        self, document_id: str | None = None, kind: str | None = None
    ) -> list[IssueRecord]:
        """List stored resolution issues."""
        try:
            return self.issue_repo.list(document_id=document_id, kind=kind)
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to list issues: {str(e)}", e) from e

    def count(self) -> int:
        """Count published documents."""
        try:
            return self.document_repo.count()
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to count documents: {str(e)}", e) from e

    def stats(self) -> dict[str, Any]:
        """Return catalog totals."""
        tags = self.list_tags()
        return {
            "documents": self.count(),
            "tags": len(tags),
            "issues": len(self.list_issues()),
        }

    def _clamp(self, limit: int) -> int:
        return max(1, min(limit, self.MAX_LIMIT))
