"""Catalog tables for published collections."""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from pageomatic.models.reference import IssueKind, ResolutionIssue


class Base(DeclarativeBase):
    """Declarative base for catalog tables."""

    pass


class DocumentRecord(Base):
    """A published document as stored in the catalog."""

    __tablename__ = "documents"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    source_path: Mapped[str] = mapped_column(String(1024), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    published_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    draft: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    has_issues: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # Newest-first position in the sealed collection
    position: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    # 'metadata' is reserved by SQLAlchemy; the column keeps the public name
    meta: Mapped[Optional[dict[str, Any]]] = mapped_column(
        "metadata", JSON, nullable=True, default=dict
    )
    exported_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    tags: Mapped[list["TagRecord"]] = relationship(
        "TagRecord", back_populates="document", cascade="all, delete-orphan"
    )
    issues: Mapped[list["IssueRecord"]] = relationship(
        "IssueRecord", back_populates="document", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<DocumentRecord(id={self.id!r}, title={self.title!r})>"


class TagRecord(Base):
    """A tag attached to a published document."""

    __tablename__ = "document_tags"
    __table_args__ = (UniqueConstraint("document_id", "tag"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tag: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    document: Mapped["DocumentRecord"] = relationship("DocumentRecord", back_populates="tags")

    def __repr__(self) -> str:
        return f"<TagRecord(document_id={self.document_id!r}, tag={self.tag!r})>"


class IssueRecord(Base):
    """An unresolved reference reported for a published document."""

    __tablename__ = "resolution_issues"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    kind: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    raw_target: Mapped[str] = mapped_column(String(1024), nullable=False)
    target: Mapped[str] = mapped_column(String(1024), nullable=False)
    reason: Mapped[str] = mapped_column(String(255), nullable=False)
    line: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    document: Mapped["DocumentRecord"] = relationship("DocumentRecord", back_populates="issues")

    def to_issue(self) -> ResolutionIssue:
        return ResolutionIssue(
            document_id=self.document_id,
            kind=IssueKind(self.kind),
            raw_target=self.raw_target,
            target=self.target,
            reason=self.reason,
            line=self.line,
        )

    def __repr__(self) -> str:
        return f"<IssueRecord(document_id={self.document_id!r}, target={self.target!r})>"
