"""
Engine and session lifecycle for the relational store.

One engine per process, built from DATABASE_URL on first use; one session
per request through the get_db_session FastAPI dependency.

    @router.get("/api/profiles")
    def list_profiles(db: Session = Depends(get_db_session)): ...

SQLite engines are configured to open every transaction with
BEGIN IMMEDIATE, so writers serialize on the database lock (waiting up to
the busy timeout) instead of failing on lock upgrade.
"""

import logging
from typing import Generator, Optional

from fastapi import HTTPException, status
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool, StaticPool

from matchledger.config.settings import (
    get_database_url,
    get_max_overflow,
    get_pool_size,
    get_sqlite_busy_timeout,
    get_statement_timeout_ms,
)

logger = logging.getLogger(__name__)

# Module-level engine singleton
_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def _configure_sqlite(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Let SQLAlchemy, not pysqlite, decide when transactions begin
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_engine_for_url(database_url: str, echo: bool = False) -> Engine:
    """
    Build an engine for database_url.

    - sqlite in-memory: single shared connection (StaticPool)
    - sqlite file: default pool, busy timeout, BEGIN IMMEDIATE
    - other dialects: QueuePool with pre-ping and optional statement timeout
    """
    if database_url.startswith("sqlite"):
        connect_args = {
            "check_same_thread": False,
            "timeout": get_sqlite_busy_timeout(),
        }
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
            engine = create_engine(
                database_url,
                echo=echo,
                connect_args=connect_args,
                poolclass=StaticPool,
            )
        else:
            engine = create_engine(database_url, echo=echo, connect_args=connect_args)
        _configure_sqlite(engine)
        return engine

    connect_args = {}
    statement_timeout = get_statement_timeout_ms()
    if statement_timeout and database_url.startswith("postgresql"):
        connect_args["options"] = f"-c statement_timeout={statement_timeout}"

    return create_engine(
        database_url,
        echo=echo,
        poolclass=QueuePool,
        pool_size=get_pool_size(),
        max_overflow=get_max_overflow(),
        pool_pre_ping=True,  # Verify connection health
        pool_recycle=1800,   # Recycle connections after 30 minutes
        connect_args=connect_args,
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    """Session factory matching production settings (no autoflush)."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_engine() -> Engine:
    """Get or create the database engine singleton."""
    global _engine
    if _engine is None:
        try:
            _engine = create_engine_for_url(get_database_url())
            logger.info(
                "Database engine created",
                extra={"dialect": _engine.dialect.name},
            )
        except ValueError as e:
            logger.error("Failed to create database engine", extra={"error": str(e)})
            raise
    return _engine


def get_session_factory() -> sessionmaker:
    """Get or create the session factory singleton."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = make_session_factory(get_engine())
    return _SessionLocal


def reset_engine() -> None:
    """Dispose the engine singleton (tests, process shutdown)."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None


def get_db_session() -> Generator[Session, None, None]:
    """
    FastAPI dependency for database sessions.

    Creates a new session for each request and ensures proper cleanup.
    Raises HTTP 503 if database is not configured.
    """
    try:
        SessionLocal = get_session_factory()
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not configured"
        )

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
