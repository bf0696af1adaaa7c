"""Custom exceptions for content pipeline operations."""

from dataclasses import dataclass


class PageOMaticError(Exception):
    """Base exception for Page-O-Matic errors."""

    pass


class MalformedFrontMatter(PageOMaticError):
    """Raised when a source unit has no usable front matter block."""

    def __init__(self, source_path: str, message: str):
        super().__init__(f"{source_path}: {message}")
        self.source_path = source_path
        self.reason = message


class UnreadableSource(PageOMaticError):
    """Raised when a source file cannot be decoded as text."""

    def __init__(self, source_path: str, message: str):
        super().__init__(f"{source_path}: {message}")
        self.source_path = source_path
        self.reason = message


@dataclass(frozen=True)
class FieldViolation:
    """A single front matter field that failed validation."""

    field: str
    reason: str

    def __str__(self) -> str:
        return f"{self.field}: {self.reason}"


class ValidationError(PageOMaticError):
    """Raised when one or more front matter fields are invalid.

    Carries every violation found for the document, not just the first.
    """

    def __init__(self, document_id: str, violations: list[FieldViolation]):
        details = "; ".join(str(v) for v in violations)
        super().__init__(f"Document '{document_id}' is invalid: {details}")
        self.document_id = document_id
        self.violations = list(violations)

    @property
    def fields(self) -> list[str]:
        return [v.field for v in self.violations]


class DuplicateDocumentId(PageOMaticError):
    """Raised when two source units map to the same document ID."""

    def __init__(
        self,
        document_id: str,
        first_path: str | None = None,
        second_path: str | None = None,
    ):
        message = f"Document with id '{document_id}' already exists"
        if first_path and second_path:
            message += f" ({first_path} and {second_path})"
        super().__init__(message)
        self.document_id = document_id
        self.first_path = first_path
        self.second_path = second_path


class CollectionStateError(PageOMaticError):
    """Base exception for collection lifecycle misuse."""

    pass


class IndexSealed(CollectionStateError):
    """Raised when mutating a collection that has been sealed."""

    def __init__(self, operation: str):
        super().__init__(f"Cannot {operation}: collection is sealed")
        self.operation = operation


class IndexNotSealed(CollectionStateError):
    """Raised when querying a collection that is still being built."""

    def __init__(self, operation: str):
        super().__init__(f"Cannot {operation}: collection is not sealed yet")
        self.operation = operation


class DocumentNotFound(PageOMaticError):
    """Raised when a document is not found."""

    def __init__(self, document_id: str):
        super().__init__(f"Document with ID '{document_id}' not found")
        self.document_id = document_id


class DatabaseError(PageOMaticError):
    """Raised when a catalog database operation fails."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class ExportError(PageOMaticError):
    """Base exception for renderer adapter errors."""

    pass


class GitHubAuthenticationError(ExportError):
    """Raised when GitHub authentication fails."""

    pass


class GitHubAPIError(ExportError):
    """Raised when GitHub API operations fail."""

    pass
