"""HTTP API for browsing the published Page-O-Matic catalog."""

import logging
from typing import Any, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse

from pageomatic import __version__
from pageomatic.exceptions import DatabaseError, DocumentNotFound
from pageomatic.serializers import serialize_document
from pageomatic.services.catalog_service import CatalogService
from pageomatic.services.link.reporting import IssueReporter
from pageomatic.storage.database import Database, get_db

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Page-O-Matic Catalog",
    description="Read-only access to published articles, tags and reference issues",
    version=__version__,
)


def get_database() -> Database:
    """Dependency returning the catalog database."""
    return get_db()


@app.exception_handler(DocumentNotFound)
async def document_not_found_handler(request: Request, exc: DocumentNotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(DatabaseError)
async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    logger.error("Catalog error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Catalog unavailable"})


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": "page-o-matic"}


@app.get("/documents")
def list_documents(
    limit: int = Query(100, ge=1, le=CatalogService.MAX_LIMIT),
    offset: int = Query(0, ge=0),
    include_body: bool = False,
    db: Database = Depends(get_database),
) -> dict[str, Any]:
    """List published documents, newest first."""
    with db.session() as session:
        service = CatalogService(session)
        records = service.list_documents(limit=limit, offset=offset)
        return {
            "total": service.count(),
            "documents": [serialize_document(r, include_body=include_body) for r in records],
        }


@app.get("/documents/{document_id:path}")
def get_document(document_id: str, db: Database = Depends(get_database)) -> dict[str, Any]:
    """Get a single published document with its body."""
    with db.session() as session:
        return serialize_document(CatalogService(session).get_document(document_id))


@app.get("/tags")
def list_tags(db: Database = Depends(get_database)) -> dict[str, int]:
    """List tags with their document counts."""
    with db.session() as session:
        return CatalogService(session).list_tags()


@app.get("/tags/{tag}/documents")
def documents_by_tag(
    tag: str,
    limit: int = Query(100, ge=1, le=CatalogService.MAX_LIMIT),
    offset: int = Query(0, ge=0),
    db: Database = Depends(get_database),
) -> list[dict[str, Any]]:
    """List published documents carrying a tag, newest first."""
    with db.session() as session:
        records = CatalogService(session).documents_by_tag(tag, limit=limit, offset=offset)
        return [serialize_document(r, include_body=False) for r in records]


@app.get("/issues")
def list_issues(
    document_id: Optional[str] = None,
    kind: Optional[str] = Query(None, pattern="^(diagram|link)$"),
    db: Database = Depends(get_database),
) -> dict[str, Any]:
    """List unresolved references with a summary report."""
    with db.session() as session:
        issues = [
            record.to_issue()
            for record in CatalogService(session).list_issues(document_id=document_id, kind=kind)
        ]
        return {
            "issues": [issue.to_dict() for issue in issues],
            "report": IssueReporter().generate_issue_report(issues),
        }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8005)
