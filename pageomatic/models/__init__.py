"""Content records for Page-O-Matic."""

from pageomatic.models.document import Document, SourceUnit
from pageomatic.models.reference import (
    DiagramKind,
    DiagramReference,
    IssueKind,
    LinkReference,
    ResolutionIssue,
)

__all__ = [
    "Document",
    "SourceUnit",
    "DiagramKind",
    "DiagramReference",
    "LinkReference",
    "IssueKind",
    "ResolutionIssue",
]
