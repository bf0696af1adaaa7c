"""Link and diagram resolution against known assets and documents."""

import logging
import posixpath
from typing import Iterable, Iterator

from pageomatic.models.document import Document
from pageomatic.models.reference import (
    DiagramKind,
    DiagramReference,
    IssueKind,
    LinkReference,
    ResolutionIssue,
)
from pageomatic.services.link.scanning import (
    DEFAULT_DIAGRAM_EXTENSIONS,
    DEFAULT_DIAGRAM_LANGUAGES,
    Reference,
    ReferenceScanner,
)

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_EXTENSIONS = (".md", ".markdown")


def normalize_target(document: Document, target: str) -> str:
    """
    Resolve a reference target to a path relative to the content root.

    Targets starting with ``/`` are rooted at the content root; all other
    targets are relative to the referencing document's directory.
    """
    if target.startswith("/"):
        joined = target.lstrip("/")
    else:
        joined = posixpath.join(document.directory, target)
    return posixpath.normpath(joined) if joined else "."


class LinkResolver:
    """Resolves a document's diagram and link references.

    Resolution never fails a build: every unresolved reference becomes a
    ``ResolutionIssue`` and the document is flagged instead of excluded.
    """

    def __init__(
        self,
        assets: Iterable[str],
        documents: Iterable[str] = (),
        content_extensions: Iterable[str] = DEFAULT_CONTENT_EXTENSIONS,
        diagram_languages: Iterable[str] = DEFAULT_DIAGRAM_LANGUAGES,
        diagram_extensions: Iterable[str] = DEFAULT_DIAGRAM_EXTENSIONS,
    ):
        """
        Initialize resolver with the known asset and document paths.

        Args:
            assets: Asset paths relative to the content root
            documents: Source paths of documents in this build
            content_extensions: Extensions identifying Markdown documents
            diagram_languages: Fence languages treated as inline diagrams
            diagram_extensions: File extensions treated as diagram files
        """
        self.assets = frozenset(posixpath.normpath(a) for a in assets)
        self.documents = frozenset(posixpath.normpath(d) for d in documents)
        self.content_extensions = tuple(ext.lower() for ext in content_extensions)
        self.scanner = ReferenceScanner(diagram_languages, diagram_extensions)

    def references(self, document: Document) -> Iterator[Reference]:
        """Yield every diagram and link reference in a document body."""
        return self.scanner.scan(document.body)

    def iter_issues(self, document: Document) -> Iterator[ResolutionIssue]:
        """
        Lazily yield one issue per unresolved reference.

        Each call rescans the body, so the sequence can be restarted.

        Args:
            document: Document whose body is scanned

        Yields:
            ResolutionIssue for every reference that does not resolve
        """
        for reference in self.references(document):
            if isinstance(reference, DiagramReference):
                if reference.kind is DiagramKind.INLINE:
                    continue
                issue = self._check(document, reference.source, IssueKind.DIAGRAM, reference.line)
            else:
                issue = self._check_link(document, reference)
            if issue is not None:
                yield issue

    def resolve(self, document: Document) -> tuple[Document, list[ResolutionIssue]]:
        """
        Resolve all references and flag the document if any are missing.

        Args:
            document: Document to resolve

        Returns:
            Tuple of (document, possibly flagged with has_issues, issues)
        """
        issues = list(self.iter_issues(document))
        if issues:
            logger.info(
                "Document %s has %d unresolved reference(s)", document.id, len(issues)
            )
            return document.flagged(), issues
        return document, issues

    def _check_link(self, document: Document, reference: LinkReference) -> ResolutionIssue | None:
        extension = posixpath.splitext(reference.target)[1].lower()
        if reference.is_image or (extension and extension not in self.content_extensions):
            return self._check(document, reference.target, IssueKind.LINK, reference.line)

        target = normalize_target(document, reference.target)
        candidates = [target]
        if not extension:
            # Extensionless links may point at a page or a section index
            for ext in self.content_extensions:
                candidates.append(f"{target}{ext}")
                candidates.append(posixpath.join(target, f"index{ext}"))
        if any(candidate in self.documents for candidate in candidates):
            return None
        if not extension and target in self.assets:
            return None
        return self._issue(document, reference.target, target, IssueKind.LINK, reference.line)

    def _check(
        self, document: Document, raw_target: str, kind: IssueKind, line: int | None
    ) -> ResolutionIssue | None:
        target = normalize_target(document, raw_target)
        if target in self.assets:
            return None
        return self._issue(document, raw_target, target, kind, line)

    def _issue(
        self,
        document: Document,
        raw_target: str,
        target: str,
        kind: IssueKind,
        line: int | None,
    ) -> ResolutionIssue:
        if target == ".." or target.startswith("../"):
            reason = "points outside the content root"
        elif kind is IssueKind.DIAGRAM:
            reason = "does not match a known diagram asset"
        else:
            reason = "does not match a known asset or document"
        return ResolutionIssue(
            document_id=document.id,
            kind=kind,
            raw_target=raw_target,
            target=target,
            reason=reason,
            line=line,
        )
