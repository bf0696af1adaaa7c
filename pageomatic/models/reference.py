"""Diagram and link references found in document bodies."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class DiagramKind(str, Enum):
    """How a diagram is embedded in a document."""

    INLINE = "inline"
    FILE_REF = "file_ref"


class IssueKind(str, Enum):
    """What kind of reference could not be resolved."""

    DIAGRAM = "diagram"
    LINK = "link"


@dataclass(frozen=True)
class DiagramReference:
    """An inline diagram definition or a reference to a diagram file."""

    kind: DiagramKind
    source: str
    line: Optional[int] = None
    language: str = "mermaid"


@dataclass(frozen=True)
class LinkReference:
    """A relative link or image embed that must point at a known file."""

    target: str
    line: Optional[int] = None
    is_image: bool = False


@dataclass(frozen=True)
class ResolutionIssue:
    """A reference that does not resolve to a known asset or document."""

    document_id: str
    kind: IssueKind
    raw_target: str
    target: str
    reason: str
    line: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "document_id": self.document_id,
            "kind": self.kind.value,
            "raw_target": self.raw_target,
            "target": self.target,
            "reason": self.reason,
            "line": self.line,
        }

    def __str__(self) -> str:
        location = f":{self.line}" if self.line else ""
        return f"{self.document_id}{location}: {self.kind.value} '{self.raw_target}' {self.reason}"
