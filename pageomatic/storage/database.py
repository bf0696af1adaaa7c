"""Catalog database engine and session handling."""

from contextlib import contextmanager
from typing import Any, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from pageomatic.config import Settings, get_settings
from pageomatic.storage.records import Base


def _engine_options(database_url: str, settings: Settings) -> dict[str, Any]:
    options: dict[str, Any] = {"pool_pre_ping": True, "echo": settings.sql_echo}
    if database_url.startswith("sqlite"):
        # SQLite uses a per-thread pool without size limits
        options["connect_args"] = {"check_same_thread": False}
    else:
        options["pool_size"] = settings.db_pool_size
        options["max_overflow"] = settings.db_max_overflow
        options["pool_timeout"] = settings.db_pool_timeout
    return options


def _enable_sqlite_foreign_keys(dbapi_conn, connection_record) -> None:
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Owns the engine and session factory for one catalog database."""

    def __init__(self, database_url: str | None = None, settings: Settings | None = None):
        """
        Open a catalog database.

        Args:
            database_url: SQLAlchemy URL; defaults to ``settings.database_url``.
                         SQLite and PostgreSQL are supported.
            settings: Pool and echo configuration; defaults to ``get_settings()``
        """
        settings = settings or get_settings()
        self.database_url = database_url or settings.database_url

        self.engine = create_engine(
            self.database_url, **_engine_options(self.database_url, settings)
        )
        if self.database_url.startswith("sqlite"):
            # Tag and issue rows cascade with their document
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine
        )

    def create_tables(self) -> None:
        """Create the catalog tables if they do not exist."""
        Base.metadata.create_all(bind=self.engine)

    def drop_tables(self) -> None:
        """Drop the catalog tables."""
        Base.metadata.drop_all(bind=self.engine)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        Yield a session that commits on success and rolls back on error.

        A publish and every read surface request each use one session, so a
        publish is applied as a single transaction.
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        """Close all pooled connections."""
        self.engine.dispose()


# Process-wide catalog used by the HTTP API and MCP server
_db: Database | None = None


def get_db(database_url: str | None = None) -> Database:
    """
    Return the shared catalog database, opening it on first use.

    Args:
        database_url: Catalog URL, only honoured by the first call
    """
    global _db
    if _db is None:
        _db = Database(database_url)
    return _db


def reset_db() -> None:
    """Dispose and forget the shared catalog database."""
    global _db
    if _db is not None:
        _db.dispose()
    _db = None
