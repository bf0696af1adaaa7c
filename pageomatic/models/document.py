"""Document records produced by the parser."""

import posixpath
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class SourceUnit:
    """Raw content unit: a path relative to the content root and its text."""

    path: str
    text: str
    # Set when the file could not be decoded; text is then empty
    read_error: Optional[str] = None

    @property
    def document_id(self) -> str:
        return document_id_from_path(self.path)


def document_id_from_path(path: str) -> str:
    """Derive a stable document ID from a source path.

    ``posts/Clean-Architecture.md`` becomes ``posts/clean-architecture``.
    """
    normalized = posixpath.normpath(path.replace("\\", "/")).lstrip("/")
    stem, _ = posixpath.splitext(normalized)
    return stem.lower()


@dataclass(frozen=True)
class Document:
    """A parsed content unit with typed front matter fields."""

    id: str
    source_path: str
    title: Optional[str]
    published_at: Optional[datetime]
    body: str
    draft: bool = False
    tags: frozenset[str] = frozenset()
    # Full decoded front matter, including keys without a typed field
    meta: dict[str, Any] = field(default_factory=dict, compare=False)
    has_issues: bool = False

    @property
    def directory(self) -> str:
        """Directory of the source file, relative to the content root."""
        return posixpath.dirname(self.source_path)

    def flagged(self) -> "Document":
        """Return a copy marked as having resolution issues."""
        return replace(self, has_issues=True)

    def __repr__(self) -> str:
        return f"<Document(id={self.id!r}, title={self.title!r})>"
