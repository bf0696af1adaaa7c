"""Command line interface for Page-O-Matic."""

import asyncio
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Annotated, Optional

import typer

from pageomatic.config import Settings, configure_logging, get_settings
from pageomatic.exceptions import DuplicateDocumentId, ExportError, PageOMaticError
from pageomatic.services.build_service import BuildReport, BuildService
from pageomatic.services.export_service import (
    CatalogExporter,
    GitHubPagesConfig,
    GitHubPagesExporter,
    RendererAdapter,
)
from pageomatic.storage.database import Database

logger = logging.getLogger(__name__)

EXIT_EXCLUDED = 1
EXIT_DUPLICATE = 2

app = typer.Typer(
    name="pageomatic",
    help="Validate, index and publish Markdown articles and their diagrams",
    add_completion=False,
)


class PublishTarget(str, Enum):
    NONE = "none"
    CATALOG = "catalog"
    GITHUB = "github"


def _adapter_for(target: PublishTarget, settings: Settings) -> Optional[RendererAdapter]:
    if target is PublishTarget.CATALOG:
        db = Database(settings.database_url, settings=settings)
        db.create_tables()
        return CatalogExporter(db)
    if target is PublishTarget.GITHUB:
        if not settings.github_token or not settings.github_repository:
            raise ExportError(
                "PAGEOMATIC_GITHUB_TOKEN and PAGEOMATIC_GITHUB_REPOSITORY must be set"
            )
        return GitHubPagesExporter(
            settings.github_token,
            GitHubPagesConfig(
                repository=settings.github_repository,
                base_path=settings.github_base_path,
                branch=settings.github_branch,
                prune=settings.github_prune,
                content_extensions=tuple(settings.content_extensions),
            ),
        )
    return None


def _echo_report(report: BuildReport) -> None:
    summary = report.summary()
    typer.echo(
        f"Included {summary['included']}, excluded {summary['excluded']}, "
        f"{summary['warnings']} unresolved reference(s) "
        f"in {summary['flagged_documents']} document(s)"
    )
    for exclusion in report.excluded:
        typer.echo(f"  excluded {exclusion.source_path}: {exclusion.message}")
    for issue in report.warnings:
        typer.echo(f"  warning {issue}")


@app.command()
def build(
    content_dir: Annotated[
        Optional[Path], typer.Argument(help="Content root (default: PAGEOMATIC_CONTENT_DIR)")
    ] = None,
    assets: Annotated[
        Optional[Path], typer.Option("--assets", help="Asset root (default: content root)")
    ] = None,
    include_drafts: Annotated[
        bool, typer.Option("--include-drafts", help="Publish documents marked draft")
    ] = False,
    workers: Annotated[
        Optional[int], typer.Option("--workers", min=1, help="Parser worker threads")
    ] = None,
    publish: Annotated[
        PublishTarget, typer.Option("--publish", help="Renderer adapter to hand off to")
    ] = PublishTarget.NONE,
    as_json: Annotated[bool, typer.Option("--json", help="Print the report as JSON")] = False,
    strict: Annotated[
        bool, typer.Option("--strict", help="Fail when any document is excluded")
    ] = False,
) -> None:
    """Build the collection from a content tree and optionally publish it."""
    overrides = {}
    if content_dir is not None:
        overrides["content_dir"] = str(content_dir)
    if assets is not None:
        overrides["assets_dir"] = str(assets)
    if include_drafts:
        overrides["include_drafts"] = True
    if workers is not None:
        overrides["workers"] = workers
    settings = get_settings().model_copy(update=overrides)
    configure_logging(settings)

    try:
        result = BuildService(settings).run_directory()
    except DuplicateDocumentId as e:
        typer.echo(f"Build aborted: {e}", err=True)
        raise typer.Exit(code=EXIT_DUPLICATE) from e
    except FileNotFoundError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=EXIT_EXCLUDED) from e

    if strict and result.report.has_exclusions:
        # Strict builds publish nothing when any document was excluded
        _emit(result.report, as_json, None)
        raise typer.Exit(code=EXIT_EXCLUDED)

    published = None
    try:
        adapter = _adapter_for(publish, settings)
        if adapter is not None:
            published = adapter.publish(result.collection, result.report)
    except PageOMaticError as e:
        typer.echo(f"Publish failed: {e}", err=True)
        raise typer.Exit(code=EXIT_EXCLUDED) from e

    _emit(result.report, as_json, published)


def _emit(report: BuildReport, as_json: bool, published: Optional[dict]) -> None:
    if as_json:
        payload = report.to_dict()
        if published is not None:
            payload["published"] = published
        typer.echo(json.dumps(payload, indent=2))
        return
    _echo_report(report)
    if published is not None:
        typer.echo(f"Published: {json.dumps(published)}")


@app.command()
def serve(
    host: Annotated[str, typer.Option(help="Bind address")] = "127.0.0.1",
    port: Annotated[int, typer.Option(help="Bind port")] = 8005,
) -> None:
    """Serve the published catalog over HTTP."""
    import uvicorn

    configure_logging(get_settings())
    uvicorn.run("pageomatic.http_api:app", host=host, port=port)


@app.command()
def mcp() -> None:
    """Run the MCP server on stdio."""
    from pageomatic.mcp_server import main as mcp_main

    configure_logging(get_settings())
    asyncio.run(mcp_main())


def main() -> None:
    app()


if __name__ == "__main__":
    main()
