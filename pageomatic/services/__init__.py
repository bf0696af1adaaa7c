"""Service layer for the content pipeline."""

from pageomatic.services.build_service import BuildReport, BuildResult, BuildService
from pageomatic.services.catalog_service import CatalogService
from pageomatic.services.collection_service import Collection
from pageomatic.services.export_service import CatalogExporter, GitHubPagesExporter
from pageomatic.services.link_service import LinkResolver

__all__ = [
    "BuildService",
    "BuildReport",
    "BuildResult",
    "CatalogService",
    "Collection",
    "CatalogExporter",
    "GitHubPagesExporter",
    "LinkResolver",
]
