"""In-memory document collection built once per run."""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Iterator

from pageomatic.exceptions import (
    DocumentNotFound,
    DuplicateDocumentId,
    IndexNotSealed,
    IndexSealed,
)
from pageomatic.models.document import Document

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class CollectionState(str, Enum):
    """Lifecycle of a collection."""

    BUILDING = "building"
    SEALED = "sealed"


def date_order_key(document: Document) -> tuple[float, str]:
    """Sort key for newest-first ordering with ties broken by ascending ID."""
    published = document.published_at or _EPOCH
    return (-published.timestamp(), document.id)


class Collection:
    """Ordered, queryable set of documents for a single build.

    A collection starts in the ``BUILDING`` state and accepts documents from a
    single merging thread. ``seal()`` builds the tag and date indices and moves
    it to ``SEALED``, after which it is read-only. Sealing is terminal.
    """

    def __init__(self, documents: Iterable[Document] = ()):
        self._documents: dict[str, Document] = {}
        self._state = CollectionState.BUILDING
        self._ordered: tuple[Document, ...] = ()
        self._tag_index: dict[str, frozenset[str]] = {}
        self.extend(documents)

    @property
    def state(self) -> CollectionState:
        return self._state

    @property
    def sealed(self) -> bool:
        return self._state is CollectionState.SEALED

    def add(self, document: Document) -> None:
        """
        Add a document while building.

        Args:
            document: Validated document

        Raises:
            IndexSealed: If the collection is sealed
            DuplicateDocumentId: If a document with the same ID was already added
        """
        if self.sealed:
            raise IndexSealed("add document")
        existing = self._documents.get(document.id)
        if existing is not None:
            raise DuplicateDocumentId(
                document.id, existing.source_path, document.source_path
            )
        self._documents[document.id] = document

    def extend(self, documents: Iterable[Document]) -> None:
        """Add several documents in order."""
        for document in documents:
            self.add(document)

    def seal(self) -> "Collection":
        """
        Build the derived indices and make the collection read-only.

        Returns:
            The collection itself, for chaining

        Raises:
            IndexSealed: If the collection was already sealed
        """
        if self.sealed:
            raise IndexSealed("seal")

        self._ordered = tuple(sorted(self._documents.values(), key=date_order_key))

        tag_index: dict[str, set[str]] = {}
        for document in self._ordered:
            for tag in document.tags:
                tag_index.setdefault(tag, set()).add(document.id)
        self._tag_index = {tag: frozenset(ids) for tag, ids in tag_index.items()}

        self._state = CollectionState.SEALED
        logger.info(
            "Sealed collection with %d document(s) and %d tag(s)",
            len(self._ordered),
            len(self._tag_index),
        )
        return self

    def all(self) -> tuple[Document, ...]:
        """Return every document, newest first."""
        self._require_sealed("list documents")
        return self._ordered

    def by_tag(self, tag: str) -> tuple[Document, ...]:
        """Return documents carrying ``tag``, newest first."""
        self._require_sealed("query by tag")
        ids = self._tag_index.get(tag, frozenset())
        return tuple(document for document in self._ordered if document.id in ids)

    def by_id(self, document_id: str) -> Document:
        """
        Get a document by ID.

        Raises:
            IndexNotSealed: If the collection is still building
            DocumentNotFound: If no document has this ID
        """
        self._require_sealed("query by id")
        document = self._documents.get(document_id)
        if document is None:
            raise DocumentNotFound(document_id)
        return document

    def tag_ids(self, tag: str) -> frozenset[str]:
        """Return the IDs of documents carrying ``tag``."""
        self._require_sealed("query tag index")
        return self._tag_index.get(tag, frozenset())

    def tags(self) -> dict[str, int]:
        """Return tag usage counts, sorted by tag name."""
        self._require_sealed("list tags")
        return {tag: len(self._tag_index[tag]) for tag in sorted(self._tag_index)}

    def _require_sealed(self, operation: str) -> None:
        if not self.sealed:
            raise IndexNotSealed(operation)

    def __len__(self) -> int:
        return len(self._documents)

    def __contains__(self, document_id: object) -> bool:
        return document_id in self._documents

    def __iter__(self) -> Iterator[Document]:
        return iter(self.all())

    def __repr__(self) -> str:
        return f"<Collection(state={self._state.value!r}, documents={len(self._documents)})>"
