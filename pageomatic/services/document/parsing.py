"""Front matter parsing into Document records."""

import logging
from datetime import date, datetime, time, timezone
from typing import Any, Optional
from zoneinfo import ZoneInfo

import yaml
from dateutil import parser as date_parser
from frontmatter.default_handlers import YAMLHandler

from pageomatic.config import Settings
from pageomatic.exceptions import MalformedFrontMatter, UnreadableSource
from pageomatic.models.document import Document, SourceUnit, document_id_from_path

logger = logging.getLogger(__name__)

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class FrontMatterLoader(yaml.SafeLoader):
    """Safe YAML loader that keeps unquoted dates as strings.

    Calendar-invalid values such as ``2024-02-30`` then reach
    ``coerce_timestamp`` instead of failing inside the YAML constructor.
    """


FrontMatterLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

# Keys decoded into typed Document fields; defaults never apply to these
TITLE_FIELD = "title"
DRAFT_FIELD = "draft"
TAGS_FIELD = "tags"


def coerce_timestamp(value: Any, tz: ZoneInfo) -> Optional[datetime]:
    """
    Decode a front matter date value into an aware UTC datetime.

    Args:
        value: YAML date, datetime, or date string
        tz: Timezone applied to naive values

    Returns:
        Aware datetime in UTC, or None if the value is not a timestamp
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str) and value.strip():
        try:
            parsed = date_parser.parse(value.strip())
        except (ValueError, OverflowError):
            return None
    else:
        return None

    try:
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=tz)
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        # Shifting to UTC can leave the supported year range
        return None


def coerce_tags(value: Any) -> Optional[frozenset[str]]:
    """Decode tags from a list of strings or a comma separated string."""
    if value is None:
        return frozenset()
    if isinstance(value, str):
        return frozenset(tag.strip() for tag in value.split(",") if tag.strip())
    if isinstance(value, (list, tuple, set, frozenset)):
        if not all(isinstance(tag, str) and tag.strip() for tag in value):
            return None
        return frozenset(tag.strip() for tag in value)
    return None


class DocumentParser:
    """Splits source text into front matter and body and decodes typed fields."""

    def __init__(self, settings: Settings):
        """
        Initialize parser with pipeline settings.

        Args:
            settings: Settings supplying date keys, defaults and timezone
        """
        self.settings = settings
        self.handler = YAMLHandler()
        self.timezone = ZoneInfo(settings.default_timezone)

    def split(self, source: SourceUnit) -> tuple[dict[str, Any], str]:
        """
        Split raw text into decoded front matter and body.

        Args:
            source: Source unit to split

        Returns:
            Tuple of (front matter mapping, body text)

        Raises:
            UnreadableSource: If the source file could not be decoded
            MalformedFrontMatter: If delimiters are missing or YAML cannot be decoded
        """
        if source.read_error is not None:
            raise UnreadableSource(source.path, source.read_error)
        text = source.text.lstrip("\ufeff")
        if not self.handler.detect(text):
            raise MalformedFrontMatter(
                source.path, "missing opening '---' front matter delimiter"
            )

        try:
            raw_front_matter, body = self.handler.split(text)
        except ValueError as e:
            raise MalformedFrontMatter(
                source.path, "missing closing '---' front matter delimiter"
            ) from e

        try:
            # Duplicate keys: PyYAML keeps the last occurrence
            metadata = self.handler.load(raw_front_matter, Loader=FrontMatterLoader)
        except (yaml.YAMLError, ValueError) as e:
            # ValueError comes from explicit tags such as !!timestamp 2024-02-30
            raise MalformedFrontMatter(source.path, f"invalid YAML: {e}") from e

        if metadata is None:
            metadata = {}
        if not isinstance(metadata, dict):
            raise MalformedFrontMatter(
                source.path,
                f"front matter must be a mapping, got {type(metadata).__name__}",
            )

        return metadata, body.lstrip("\r\n")

    def parse(self, source: SourceUnit) -> Document:
        """
        Parse a source unit into a Document.

        Values that do not decode into their field type are left unset and
        kept raw in ``Document.meta`` for the validator to report.

        Args:
            source: Source unit with path and raw text

        Returns:
            Parsed document

        Raises:
            UnreadableSource: If the source file could not be decoded
            MalformedFrontMatter: If the front matter block is structurally invalid
        """
        metadata, body = self.split(source)
        meta = self._apply_defaults(metadata)

        title = meta.get(TITLE_FIELD)
        if not isinstance(title, str):
            title = None
        else:
            title = title.strip()

        date_key = self.date_key(meta)
        published_at = (
            coerce_timestamp(meta[date_key], self.timezone) if date_key else None
        )

        draft = meta.get(DRAFT_FIELD, False)
        tags = coerce_tags(meta.get(TAGS_FIELD))

        document = Document(
            id=document_id_from_path(source.path),
            source_path=source.path,
            title=title,
            published_at=published_at,
            body=body,
            draft=draft if isinstance(draft, bool) else False,
            tags=tags if tags is not None else frozenset(),
            meta=meta,
        )
        logger.debug("Parsed %s as %r", source.path, document)
        return document

    def date_key(self, meta: dict[str, Any]) -> Optional[str]:
        """Return the first configured date key present in the front matter."""
        for key in self.settings.date_fields:
            if key in meta:
                return key
        return None

    def _apply_defaults(self, metadata: dict[str, Any]) -> dict[str, Any]:
        protected = {TITLE_FIELD, *self.settings.date_fields}
        merged = {
            key: value
            for key, value in self.settings.front_matter_defaults.items()
            if key not in protected
        }
        merged.update(metadata)
        return merged
