"""Serialization of content records for JSON surfaces."""

from datetime import date, datetime, timezone
from typing import Any

from pageomatic.models.document import Document


def jsonable(value: Any) -> Any:
    """
    Convert front matter values into JSON-compatible structures.

    Args:
        value: Decoded YAML value

    Returns:
        Value with dates rendered as ISO-8601 strings and sets as sorted lists
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(key): jsonable(item) for key, item in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted(jsonable(item) for item in value)
    if isinstance(value, (list, tuple)):
        return [jsonable(item) for item in value]
    return value


def serialize_document(document: Any, include_body: bool = True) -> dict[str, Any]:
    """
    Serialize a Document or catalog record to a dictionary.

    Args:
        document: Document dataclass or catalog DocumentRecord
        include_body: If True, include the Markdown body

    Returns:
        Dictionary representation of the document
    """
    if isinstance(document, Document):
        tags = document.tags
    else:
        tags = [tag.tag for tag in document.tags]

    result = {
        "id": document.id,
        "title": document.title,
        "published_at": jsonable(document.published_at),
        "draft": document.draft,
        "tags": sorted(tags),
        "source_path": document.source_path,
        "has_issues": document.has_issues,
        "metadata": jsonable(document.meta or {}),
    }
    if include_body:
        result["body"] = document.body
    return result
