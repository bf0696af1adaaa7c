"""Shared pytest fixtures and test utilities for Page-O-Matic tests."""

import os
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from pageomatic.config import Settings, get_settings
from pageomatic.models.document import SourceUnit
from pageomatic.services.build_service import BuildService
from pageomatic.services.document.parsing import DocumentParser
from pageomatic.services.document.validation import FrontMatterValidator
from pageomatic.storage.database import Database, reset_db


def make_source(
    path: str,
    title: str | None = "Untitled",
    date: str | None = "2024-10-28",
    tags: list[str] | None = None,
    body: str = "Body text.\n",
    extra: str = "",
) -> SourceUnit:
    """Build a source unit with YAML front matter."""
    lines = ["---"]
    if title is not None:
        lines.append(f'title: "{title}"')
    if date is not None:
        lines.append(f"date: {date}")
    if tags is not None:
        lines.append(f"tags: [{', '.join(tags)}]")
    if extra:
        lines.append(extra.rstrip("\n"))
    lines.append("---")
    return SourceUnit(path=path, text="\n".join(lines) + "\n" + body)


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Write a mapping of relative paths to file contents under root."""
    for relative, content in files.items():
        target = root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return root


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Keep cached settings from leaking between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Default settings independent of the environment."""
    return Settings(_env_file=None)


@pytest.fixture
def parser(settings) -> DocumentParser:
    return DocumentParser(settings)


@pytest.fixture
def validator(settings) -> FrontMatterValidator:
    return FrontMatterValidator(settings)


@pytest.fixture
def build_service(settings) -> BuildService:
    return BuildService(settings)


@pytest.fixture
def article_sources() -> list[SourceUnit]:
    """Three published articles on architecture topics."""
    return [
        make_source(
            "posts/clean-architecture.md",
            title="Clean Architecture",
            date="2024-10-28",
            tags=["architecture", "clean-architecture"],
            body="See the ![layers](diagrams/layers.mmd) diagram.\n",
        ),
        make_source(
            "posts/domain-driven-design.md",
            title="Domain-Driven Design",
            date="2024-11-01",
            tags=["architecture", "ddd"],
            body="```mermaid\ngraph TD\n  A-->B\n```\n",
        ),
        make_source(
            "posts/global-error-handling.md",
            title="Global Error Handling",
            date="2024-09-30",
            tags=["errors"],
            body="Read [Clean Architecture](clean-architecture.md) first.\n",
        ),
    ]


@pytest.fixture
def article_assets() -> set[str]:
    return {"posts/diagrams/layers.mmd"}


@pytest.fixture(scope="function")
def temp_db(settings) -> Generator[Database, None, None]:
    """
    Create a temporary SQLite catalog for testing.

    Yields:
        Database instance with tables created
    """
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    reset_db()

    database = Database(f"sqlite:///{db_path}", settings=settings)
    database.create_tables()

    yield database

    database.drop_tables()
    database.dispose()
    reset_db()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def db_session(temp_db):
    """Get a database session from temp_db."""
    with temp_db.session() as session:
        yield session
