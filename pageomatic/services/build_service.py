"""Build service: parse, validate, resolve and index a content tree."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Iterable, Union

from pageomatic.config import Settings
from pageomatic.exceptions import (
    DuplicateDocumentId,
    FieldViolation,
    MalformedFrontMatter,
    UnreadableSource,
    ValidationError,
)
from pageomatic.models.document import Document, SourceUnit
from pageomatic.models.reference import ResolutionIssue
from pageomatic.services.collection_service import Collection
from pageomatic.services.document.parsing import DocumentParser
from pageomatic.services.document.validation import FrontMatterValidator
from pageomatic.services.link.reporting import IssueReporter
from pageomatic.services.link_service import LinkResolver
from pageomatic.storage.content import AssetCatalog, SourceLoader

logger = logging.getLogger(__name__)

REASON_UNREADABLE = "unreadable_source"
REASON_MALFORMED = "malformed_front_matter"
REASON_INVALID = "invalid_front_matter"
REASON_DRAFT = "draft"


@dataclass(frozen=True)
class Exclusion:
    """A source unit left out of the collection, with the reason why."""

    document_id: str
    source_path: str
    reason: str
    message: str
    violations: tuple[FieldViolation, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "document_id": self.document_id,
            "source_path": self.source_path,
            "reason": self.reason,
            "message": self.message,
            "violations": [
                {"field": v.field, "reason": v.reason} for v in self.violations
            ],
        }


@dataclass
class BuildReport:
    """Inclusions, exclusions and warnings of a single build."""

    included: list[str] = field(default_factory=list)
    excluded: list[Exclusion] = field(default_factory=list)
    warnings: list[ResolutionIssue] = field(default_factory=list)

    @property
    def has_exclusions(self) -> bool:
        return bool(self.excluded)

    def summary(self) -> dict[str, int]:
        """Return counts of included, excluded and flagged documents."""
        return {
            "included": len(self.included),
            "excluded": len(self.excluded),
            "warnings": len(self.warnings),
            "flagged_documents": len({issue.document_id for issue in self.warnings}),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary(),
            "included": list(self.included),
            "excluded": [exclusion.to_dict() for exclusion in self.excluded],
            "warnings": [issue.to_dict() for issue in self.warnings],
            "issue_report": IssueReporter().generate_issue_report(self.warnings),
        }


@dataclass(frozen=True)
class BuildResult:
    """Sealed collection plus the report of the run that built it."""

    collection: Collection
    report: BuildReport


Outcome = Union[Document, Exclusion]


class BuildService:
    """Runs the single-pass content pipeline for one build."""

    def __init__(self, settings: Settings):
        """
        Initialize build service with pipeline settings.

        Args:
            settings: Settings passed to the parser, validator and resolver
        """
        self.settings = settings
        self.parser = DocumentParser(settings)
        self.validator = FrontMatterValidator(settings)

    def prepare(self, source: SourceUnit) -> Document:
        """
        Parse and validate a single source unit.

        Raises:
            UnreadableSource: If the source file could not be decoded
            MalformedFrontMatter: If the front matter block is structurally invalid
            ValidationError: If any front matter field is invalid
        """
        return self.validator.validate(self.parser.parse(source))

    def run(self, sources: Iterable[SourceUnit], assets: Iterable[str]) -> BuildResult:
        """
        Build a sealed collection from source units.

        Per-document failures are collected into the report. A duplicate
        document ID aborts the whole run and nothing is returned.

        Args:
            sources: Source units to ingest
            assets: Known asset paths relative to the content root

        Returns:
            BuildResult with the sealed collection and the run report

        Raises:
            DuplicateDocumentId: If two source units map to the same ID
        """
        sources = list(sources)
        self._check_unique_ids(sources)

        report = BuildReport()
        accepted: list[Document] = []
        for outcome in self._prepare_all(sources):
            if isinstance(outcome, Exclusion):
                logger.warning(
                    "Excluded %s (%s): %s",
                    outcome.source_path,
                    outcome.reason,
                    outcome.message,
                )
                report.excluded.append(outcome)
            elif outcome.draft and not self.settings.include_drafts:
                logger.info("Skipped draft %s", outcome.source_path)
                report.excluded.append(
                    Exclusion(
                        document_id=outcome.id,
                        source_path=outcome.source_path,
                        reason=REASON_DRAFT,
                        message="document is marked as draft",
                    )
                )
            else:
                accepted.append(outcome)

        resolver = LinkResolver(
            assets=assets,
            documents=[document.source_path for document in accepted],
            content_extensions=self.settings.content_extensions,
            diagram_languages=self.settings.diagram_languages,
            diagram_extensions=self.settings.diagram_extensions,
        )

        collection = Collection()
        for document in accepted:
            resolved, issues = resolver.resolve(document)
            for issue in issues:
                logger.warning("Unresolved reference in %s", issue)
            report.warnings.extend(issues)
            collection.add(resolved)
            report.included.append(resolved.id)

        collection.seal()
        logger.info("Build finished: %s", report.summary())
        return BuildResult(collection=collection, report=report)

    def run_directory(self) -> BuildResult:
        """Build from the configured content and asset directories."""
        loader = SourceLoader(self.settings.content_dir, self.settings.content_extensions)
        assets = AssetCatalog.from_directory(
            self.settings.get_assets_dir(),
            content_dir=self.settings.content_dir,
            exclude_extensions=self.settings.content_extensions,
        )
        return self.run(loader.iter_sources(), assets)

    def _prepare_all(self, sources: list[SourceUnit]) -> list[Outcome]:
        # Parsing and validation are pure; results keep input order
        if self.settings.workers > 1 and len(sources) > 1:
            with ThreadPoolExecutor(max_workers=self.settings.workers) as executor:
                return list(executor.map(self._prepare_outcome, sources))
        return [self._prepare_outcome(source) for source in sources]

    def _prepare_outcome(self, source: SourceUnit) -> Outcome:
        try:
            return self.prepare(source)
        except UnreadableSource as e:
            return Exclusion(
                document_id=source.document_id,
                source_path=source.path,
                reason=REASON_UNREADABLE,
                message=e.reason,
            )
        except MalformedFrontMatter as e:
            return Exclusion(
                document_id=source.document_id,
                source_path=source.path,
                reason=REASON_MALFORMED,
                message=e.reason,
            )
        except ValidationError as e:
            return Exclusion(
                document_id=source.document_id,
                source_path=source.path,
                reason=REASON_INVALID,
                message=str(e),
                violations=tuple(e.violations),
            )

    @staticmethod
    def _check_unique_ids(sources: list[SourceUnit]) -> None:
        seen: dict[str, str] = {}
        for source in sources:
            document_id = source.document_id
            if document_id in seen:
                raise DuplicateDocumentId(document_id, seen[document_id], source.path)
            seen[document_id] = source.path
