"""Resolution issue reporting logic."""

from typing import Any, Iterable

from pageomatic.models.reference import ResolutionIssue


class IssueReporter:
    """Generates resolution issue reports and statistics."""

    TOP_TARGETS = 10

    def generate_issue_report(
        self,
        issues: Iterable[ResolutionIssue],
        document_id: str | None = None,
        kind: str | None = None,
    ) -> dict[str, Any]:
        """
        Generate a summary report of unresolved references.

        Args:
            issues: Resolution issues collected during a build
            document_id: Optional document ID to filter by
            kind: Optional issue kind ('diagram' or 'link') to filter by

        Returns:
            Dictionary containing issue statistics and breakdown
        """
        selected = [
            issue
            for issue in issues
            if (document_id is None or issue.document_id == document_id)
            and (kind is None or issue.kind.value == kind)
        ]

        by_kind: dict[str, int] = {}
        by_document: dict[str, int] = {}
        by_target: dict[str, int] = {}

        for issue in selected:
            by_kind[issue.kind.value] = by_kind.get(issue.kind.value, 0) + 1
            by_document[issue.document_id] = by_document.get(issue.document_id, 0) + 1
            by_target[issue.target] = by_target.get(issue.target, 0) + 1

        # Most referenced missing targets first, ties by path
        top_targets = sorted(by_target.items(), key=lambda x: (-x[1], x[0]))[
            : self.TOP_TARGETS
        ]

        return {
            "total_issues": len(selected),
            "by_kind": by_kind,
            "by_document": by_document,
            "documents_affected": len(by_document),
            "top_targets": [
                {"target": target, "count": count} for target, count in top_targets
            ],
        }
