# pyright: reportMissingTypeStubs=false
"""
Database configuration and session management.

This module sets up the SQLAlchemy engine and session factory used by the
SQL-backed scheduling collaborators. The engine itself never touches the
database directly; it goes through the repository adapters.
"""

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from clinic_scheduler.core.config import DATABASE_URL
from clinic_scheduler.core.constants import DB_POOL_RECYCLE_SECONDS

logger = logging.getLogger(__name__)


def build_engine(database_url: Optional[str] = None) -> Engine:
    """
    Create a SQLAlchemy engine for the given URL (defaults to DATABASE_URL).

    SQLite URLs get ``check_same_thread=False`` so a session can be used from
    the event loop thread that awaits the repository coroutines.
    """
    url = database_url or DATABASE_URL
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(
        url,
        pool_pre_ping=True,  # Verify connections before use
        pool_recycle=DB_POOL_RECYCLE_SECONDS,
        echo=False,
        future=True,
        connect_args=connect_args,
    )


engine = build_engine()

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,  # Don't expire objects after commit
)


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


@event.listens_for(Base, "before_insert", propagate=True)  # type: ignore
def receive_before_insert(mapper, connection, target):  # type: ignore
    """Set created_at on insert using the clinic timezone when the caller left it empty."""
    from clinic_scheduler.utils.datetime_utils import clinic_now
    if hasattr(mapper, "columns") and "created_at" in mapper.columns:  # type: ignore
        if getattr(target, "created_at", None) is None:  # type: ignore
            setattr(target, "created_at", clinic_now())  # type: ignore


@contextmanager
def get_db_context(session_factory: sessionmaker = SessionLocal) -> Generator[Session, None, None]:
    """
    Context manager for database sessions.

    Commits on success and rolls back on any error before re-raising it.

    Example:
        ```python
        with get_db_context() as db:
            catalog = load_service_catalog(db)
        ```
    """
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception as e:
        db.rollback()
        logger.exception(f"Database transaction failed: {e}")
        raise
    finally:
        db.close()


def create_tables(bind: Optional[Engine] = None) -> None:
    """
    Create all tables defined in the ORM models.

    Safe to call multiple times - existing tables are left untouched.
    """
    # Import models so they are registered on Base.metadata
    import clinic_scheduler.models  # noqa: F401

    try:
        Base.metadata.create_all(bind=bind or engine)
        logger.info("Database tables created successfully")
    except SQLAlchemyError as e:
        logger.exception(f"Failed to create database tables: {e}")
        raise


def drop_tables(bind: Optional[Engine] = None) -> None:
    """
    Drop all tables defined in the ORM models.

    WARNING: This permanently deletes all data in the tables!
    """
    import clinic_scheduler.models  # noqa: F401

    try:
        Base.metadata.drop_all(bind=bind or engine)
        logger.info("Database tables dropped successfully")
    except SQLAlchemyError as e:
        logger.exception(f"Failed to drop database tables: {e}")
        raise
