"""Engine and unit-of-work management for the job board store.

One engine and one session factory live for the whole process. Repository
work is wrapped in ``get_session()``; the API runs those blocks in worker
threads, so SQLite connections are opened with ``check_same_thread=False``.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from jobboard.logging import get_logger

from .exceptions import DatabaseConnectionError

_engine: Engine | None = None
_session_factory: sessionmaker | None = None

logger = get_logger(__name__, component="database")


def _is_memory(url: URL) -> bool:
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def _engine_options(url: URL) -> Dict[str, Any]:
    options: Dict[str, Any] = {"pool_pre_ping": True}
    if url.get_backend_name() == "sqlite":
        options["connect_args"] = {"check_same_thread": False, "timeout": 30}
        if _is_memory(url):
            # A single connection, or each worker thread would get its own empty database
            options["poolclass"] = StaticPool
    return options


def _ensure_sqlite_directory(url: URL) -> None:
    if url.get_backend_name() != "sqlite" or _is_memory(url):
        return
    directory = Path(url.database).expanduser().parent
    if not directory.exists():
        logger.info(
            f"Creating directory for SQLite database: {directory}",
            extra={"event": "database.directory.created"},
        )
        directory.mkdir(parents=True, exist_ok=True)


def _install_sqlite_pragmas(engine: Engine, journal_wal: bool) -> None:
    @event.listens_for(engine, "connect")
    def on_connect(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
            if journal_wal:
                cursor.execute("PRAGMA journal_mode=WAL")
        finally:
            cursor.close()


def init_database(database_url: str) -> None:
    """Open the engine and create any missing tables.

    Safe to call again after ``close_database()``; schema creation only adds
    tables that don't exist yet.

    Args:
        database_url: SQLAlchemy URL, e.g. "sqlite:///./data/job_board.db"

    Raises:
        DatabaseConnectionError: If the URL is unusable or the database can't be reached
    """
    global _engine, _session_factory

    if not isinstance(database_url, str) or not database_url.strip():
        raise DatabaseConnectionError("Database URL must be a non-empty string")

    try:
        url = make_url(database_url)
    except ArgumentError as e:
        raise DatabaseConnectionError(f"Malformed database URL: {e}") from e

    safe_url = url.render_as_string(hide_password=True)
    logger.info("Opening database", extra={"event": "database.opening", "database_url": safe_url})

    try:
        _ensure_sqlite_directory(url)
        engine = create_engine(url, **_engine_options(url))
        if url.get_backend_name() == "sqlite":
            _install_sqlite_pragmas(engine, journal_wal=not _is_memory(url))

        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))

        from .schema import create_schema

        create_schema(engine)
    except (SQLAlchemyError, OSError) as e:
        logger.error(
            f"Could not open database: {e}",
            exc_info=True,
            extra={"event": "database.open_failed", "database_url": safe_url},
        )
        raise DatabaseConnectionError(f"Could not open database {safe_url}: {e}") from e

    _engine = engine
    _session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    logger.info("Database ready", extra={"event": "database.ready", "database_url": safe_url})


def _redact_url(url: str) -> str:
    """The URL with its password masked, for log output."""
    try:
        return make_url(url).render_as_string(hide_password=True)
    except ArgumentError:
        return url


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """One unit of work: commit on success, roll back on error, always close.

    Raises:
        DatabaseConnectionError: If ``init_database()`` hasn't run
    """
    if _session_factory is None:
        raise DatabaseConnectionError("Database is not open; call init_database() first")

    session = _session_factory()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.debug(
            f"Unit of work rolled back: {type(e).__name__}",
            extra={"event": "database.session.rolled_back"},
        )
        raise
    finally:
        session.close()


def get_engine() -> Engine:
    if _engine is None:
        raise DatabaseConnectionError("Database is not open; call init_database() first")
    return _engine


def close_database() -> None:
    """Dispose of the engine. A no-op when nothing is open."""
    global _engine, _session_factory

    if _engine is None:
        return
    logger.info("Closing database", extra={"event": "database.closing"})
    _engine.dispose()
    _engine = None
    _session_factory = None
