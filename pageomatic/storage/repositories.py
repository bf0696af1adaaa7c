"""Repository pattern implementation for catalog reads and writes."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session, selectinload

from pageomatic.storage.records import DocumentRecord, IssueRecord, TagRecord


class DocumentRepository:
    """Repository for published document records."""

    def __init__(self, session: Session):
        """Initialize repository with a database session."""
        self.session = session

    def create(self, record: DocumentRecord) -> DocumentRecord:
        """Add a document record."""
        self.session.add(record)
        self.session.flush()
        return record

    def get_by_id(self, document_id: str) -> Optional[DocumentRecord]:
        """Get document record by ID with tags loaded."""
        stmt = (
            select(DocumentRecord)
            .where(DocumentRecord.id == document_id)
            .options(selectinload(DocumentRecord.tags))
        )
        return self.session.scalar(stmt)

    def list(self, limit: int = 100, offset: int = 0) -> list[DocumentRecord]:
        """List documents in collection order (newest first)."""
        stmt = (
            select(DocumentRecord)
            .options(selectinload(DocumentRecord.tags))
            .order_by(DocumentRecord.position)
            .limit(limit)
            .offset(offset)
        )
        return list(self.session.scalars(stmt))

    def get_by_tag(self, tag: str, limit: int = 100, offset: int = 0) -> list[DocumentRecord]:
        """List documents carrying a tag in collection order."""
        stmt = (
            select(DocumentRecord)
            .join(TagRecord, TagRecord.document_id == DocumentRecord.id)
            .where(TagRecord.tag == tag)
            .options(selectinload(DocumentRecord.tags))
            .order_by(DocumentRecord.position)
            .limit(limit)
            .offset(offset)
        )
        return list(self.session.scalars(stmt))

    def count(self) -> int:
        """Count published documents."""
        return self.session.scalar(select(func.count(DocumentRecord.id))) or 0

    def delete_all(self) -> int:
        """Delete every document record along with its tags and issues."""
        self.session.execute(delete(IssueRecord))
        self.session.execute(delete(TagRecord))
        result = self.session.execute(delete(DocumentRecord))
        self.session.flush()
        return result.rowcount or 0


class TagRepository:
    """Repository for tag usage queries."""

    def __init__(self, session: Session):
        """Initialize repository with a database session."""
        self.session = session

    def counts(self) -> dict[str, int]:
        """Return tag usage counts sorted by tag name."""
        stmt = (
            select(TagRecord.tag, func.count(TagRecord.document_id))
            .group_by(TagRecord.tag)
            .order_by(TagRecord.tag)
        )
        return {tag: count for tag, count in self.session.execute(stmt)}


class IssueRepository:
    """Repository for resolution issue records."""

    def __init__(self, session: Session):
        """Initialize repository with a database session."""
        self.session = session

    def list(
        self, document_id: str | None = None, kind: str | None = None
    ) -> list[IssueRecord]:
        """List issues, optionally filtered by document and kind."""
        stmt = select(IssueRecord).order_by(IssueRecord.document_id, IssueRecord.id)
        if document_id is not None:
            stmt = stmt.where(IssueRecord.document_id == document_id)
        if kind is not None:
            stmt = stmt.where(IssueRecord.kind == kind)
        return list(self.session.scalars(stmt))
