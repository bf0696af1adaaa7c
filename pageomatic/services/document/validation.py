"""Front matter validation logic."""

from datetime import datetime
from typing import Any

from pageomatic.config import Settings
from pageomatic.exceptions import FieldViolation, ValidationError
from pageomatic.models.document import Document
from pageomatic.services.document.parsing import (
    DRAFT_FIELD,
    TAGS_FIELD,
    TITLE_FIELD,
    coerce_tags,
)


class FrontMatterValidator:
    """Validates parsed documents against required front matter rules."""

    # Validation constants
    TITLE_MAX_LENGTH = 500
    TAG_MAX_LENGTH = 100

    def __init__(self, settings: Settings):
        """
        Initialize validator with pipeline settings.

        Args:
            settings: Settings supplying date keys and extra required fields
        """
        self.settings = settings

    def validate(self, document: Document) -> Document:
        """
        Validate a parsed document.

        Every violated field is collected before raising, so one run surfaces
        all problems of a document at once.

        Args:
            document: Parsed document

        Returns:
            The same document, unchanged

        Raises:
            ValidationError: If any field is missing or has the wrong type
        """
        violations = self.collect_violations(document)
        if violations:
            raise ValidationError(document.id, violations)
        return document

    def collect_violations(self, document: Document) -> list[FieldViolation]:
        """Return every front matter violation for a document."""
        meta = document.meta
        violations: list[FieldViolation] = []

        violations.extend(self._check_title(meta))
        violations.extend(self._check_date(document))
        violations.extend(self._check_tags(meta))
        violations.extend(self._check_draft(meta))

        for field in self.settings.extra_required_fields:
            value = meta.get(field)
            if value is None or (isinstance(value, str) and not value.strip()):
                violations.append(FieldViolation(field, "is required"))

        return violations

    def _check_title(self, meta: dict[str, Any]) -> list[FieldViolation]:
        if TITLE_FIELD not in meta or meta[TITLE_FIELD] is None:
            return [FieldViolation(TITLE_FIELD, "is required")]
        title = meta[TITLE_FIELD]
        if not isinstance(title, str):
            return [FieldViolation(TITLE_FIELD, f"must be a string, got {type(title).__name__}")]
        if not title.strip():
            return [FieldViolation(TITLE_FIELD, "cannot be empty")]
        if len(title) > self.TITLE_MAX_LENGTH:
            return [
                FieldViolation(
                    TITLE_FIELD, f"must be at most {self.TITLE_MAX_LENGTH} characters"
                )
            ]
        return []

    def _check_date(self, document: Document) -> list[FieldViolation]:
        date_fields = self.settings.date_fields
        present = [key for key in date_fields if key in document.meta]
        if not present:
            return [FieldViolation(date_fields[0], "is required")]
        if not isinstance(document.published_at, datetime):
            value = document.meta[present[0]]
            return [FieldViolation(present[0], f"{value!r} is not a valid timestamp")]
        return []

    def _check_tags(self, meta: dict[str, Any]) -> list[FieldViolation]:
        if TAGS_FIELD not in meta:
            return []
        tags = coerce_tags(meta[TAGS_FIELD])
        if tags is None:
            return [FieldViolation(TAGS_FIELD, "must be a list of non-empty strings")]
        if any(len(tag) > self.TAG_MAX_LENGTH for tag in tags):
            return [
                FieldViolation(
                    TAGS_FIELD, f"tags must be at most {self.TAG_MAX_LENGTH} characters"
                )
            ]
        return []

    def _check_draft(self, meta: dict[str, Any]) -> list[FieldViolation]:
        if DRAFT_FIELD in meta and not isinstance(meta[DRAFT_FIELD], bool):
            return [FieldViolation(DRAFT_FIELD, "must be a boolean")]
        return []
