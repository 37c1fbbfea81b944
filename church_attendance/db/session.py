"""Database session management.

The application holds exactly one :class:`Database` handle, created in the
FastAPI lifespan and stored on ``app.state.database``. Nothing at import time
opens a connection, so the app starts (and answers 503) without a database.
"""
from contextlib import contextmanager
from typing import Generator, Optional

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from church_attendance.core.config import Settings
from church_attendance.core.exceptions import ServiceUnavailable
from church_attendance.core.logging_config import get_logger

logger = get_logger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless asked per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Process-wide store handle: one engine, one session factory."""

    def __init__(self, url: str, engine: Optional[Engine] = None, **engine_kwargs):
        self.url = url
        self.engine = engine if engine is not None else create_engine(url, **engine_kwargs)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["Database"]:
        """Build the handle from configuration, or None when no URL is configured."""
        url = settings.get_database_url()
        if not url:
            return None

        kwargs = {"pool_pre_ping": True, "echo": False}
        if not url.startswith("sqlite"):
            kwargs.update(
                pool_size=settings.DB_POOL_SIZE,
                max_overflow=settings.DB_MAX_OVERFLOW,
            )
        return cls(url, **kwargs)

    def session(self) -> Session:
        return self.SessionLocal()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """Session for scripts outside a request; commits on success, rolls back on error."""
        db = self.SessionLocal()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()


def init_database(settings: Settings) -> Optional[Database]:
    """Create the store handle at startup."""
    database = Database.from_settings(settings)
    if database is None:
        logger.warning("database_not_configured")
    else:
        logger.info("database_initialized", dialect=database.engine.dialect.name)
    return database


def close_database(database: Optional[Database]) -> None:
    """Dispose the store handle at shutdown."""
    if database is not None:
        database.dispose()
        logger.info("database_closed")


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency for FastAPI to get database session."""
    database: Optional[Database] = getattr(request.app.state, "database", None)
    if database is None:
        raise ServiceUnavailable("Database not configured")

    db = database.session()
    try:
        yield db
    finally:
        db.close()
