"""
Database engine, session factory and declarative base.
"""

import logging
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()

# Lower-cased fragments of duplicate-key errors for SQLite, MySQL and PostgreSQL
UNIQUE_VIOLATION_MARKERS = (
    "unique constraint failed",
    "duplicate entry",
    "duplicate key value violates unique constraint",
)


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine, applying pool settings only where the dialect pools connections"""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )

    return create_engine(
        database_url,
        echo=echo,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_timeout=settings.DATABASE_POOL_TIMEOUT,
        pool_recycle=settings.DATABASE_POOL_RECYCLE,
        pool_pre_ping=True,
    )


def create_session_factory(bind) -> sessionmaker:
    """Build a session factory bound to an engine or connection"""
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=bind)


engine = create_db_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
SessionLocal = create_session_factory(engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a session and close it afterwards"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Optional[Engine] = None) -> None:
    """Create all tables. Schema migrations are managed outside this package."""
    # Register models on the metadata
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables created")


def is_unique_constraint_violation(error: Exception, column: Optional[str] = None) -> bool:
    """
    Check whether a write failure is a duplicate-key error.

    Args:
        error: Exception raised by the flush/insert
        column: Optional column name that must appear in the error message

    Returns:
        True if the error is a uniqueness violation (on the given column, if any)
    """
    if not isinstance(error, IntegrityError):
        return False

    message = str(error.orig if error.orig is not None else error).lower()
    if not any(marker in message for marker in UNIQUE_VIOLATION_MARKERS):
        return False

    return column is None or column.lower() in message
