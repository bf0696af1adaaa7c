"""Storage layer for Page-O-Matic."""

from pageomatic.storage.content import AssetCatalog, SourceLoader
from pageomatic.storage.database import Database, get_db
from pageomatic.storage.repositories import (
    DocumentRepository,
    IssueRepository,
    TagRepository,
)

__all__ = [
    "AssetCatalog",
    "SourceLoader",
    "Database",
    "get_db",
    "DocumentRepository",
    "TagRepository",
    "IssueRepository",
]
