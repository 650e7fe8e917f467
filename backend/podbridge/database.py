"""
Database Connection Management

This module provides database connection and session management for the application.
Components never reach for a global client themselves: they receive a Session
(or a session factory) from their caller, which obtains it here.
"""
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from podbridge.config import DATABASE_PATH, DATABASE_ECHO
from podbridge.models.base import Base


# SQLite busy timeout (ms). Poll workers write concurrently from a thread pool.
SQLITE_BUSY_TIMEOUT_MS = 30000


def _set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable WAL mode, busy_timeout and foreign keys for SQLite (reduces 'database is locked' errors)."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute(f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT_MS}")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# Global variables for engine and session factory
_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def create_sqlite_engine(database_path: str, echo: bool = False) -> Engine:
    """
    Create a SQLite engine configured for multi-threaded access.

    Args:
        database_path: Path of the database file
        echo: Log SQL statements

    Returns:
        Engine: SQLAlchemy engine
    """
    engine = create_engine(
        f"sqlite:///{database_path}",
        echo=echo,
        connect_args={
            "check_same_thread": False,
            "timeout": SQLITE_BUSY_TIMEOUT_MS / 1000,
        },
    )
    event.listen(engine, "connect", _set_sqlite_pragma)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory bound to the given engine."""
    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


def init_database() -> None:
    """
    Initialize the database connection.

    Creates the database engine and session factory.
    The database file is created automatically if it doesn't exist.
    """
    global _engine, _session_factory

    # Ensure the database directory exists
    db_path = Path(DATABASE_PATH)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    _engine = create_sqlite_engine(DATABASE_PATH, echo=DATABASE_ECHO)
    _session_factory = create_session_factory(_engine)


def get_session_factory() -> sessionmaker:
    """
    Get the session factory.

    Handed to components that open one session per unit of work
    (e.g. the PollOrchestrator, one session per feed URL).
    """
    if _session_factory is None:
        init_database()
    return _session_factory


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """
    Get a database session (context manager).

    Automatically handles session lifecycle:
    - Opens session on entry
    - Commits on success, rolls back on error
    - Closes session on exit

    Yields:
        Session: SQLAlchemy session object

    Example:
        with get_session() as session:
            show = session.query(ShowIdentity).first()
    """
    session = get_session_factory()()
    try:
        yield session
        # Only commit if no exception occurred and session is active
        if session.is_active:
            session.commit()
    except Exception:
        # Rollback on error
        session.rollback()
        raise
    finally:
        # Always close the session
        session.close()


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency yielding a request-scoped session.

    Usage:
        def endpoint(db: Session = Depends(get_db)): ...
    """
    with get_session() as session:
        yield session


def create_tables() -> None:
    """
    Create all database tables.

    This function creates all tables defined in the models.
    It uses `create_all()` which is idempotent - existing tables
    are not modified.
    """
    Base.metadata.create_all(get_engine())


def get_engine() -> Engine:
    """
    Get the database engine.

    Returns:
        Engine: SQLAlchemy engine instance
    """
    if _engine is None:
        init_database()
    return _engine
