# backend/carteira/database.py
"""
Database connection and session management.

The valuation service only reads from the database, so a single engine and
session factory are enough:
- SQLite (test/dev): StaticPool so the in-memory database is shared
- PostgreSQL: default QueuePool with pre-ping health checks
"""

import logging
from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from .config import settings

logger = logging.getLogger(__name__)


def _create_engine():
    """
    Create SQLAlchemy engine with environment-appropriate configuration.

    Returns:
        Engine: Configured SQLAlchemy engine
    """
    if settings.is_sqlite:
        # check_same_thread=False: FastAPI serves sync endpoints from a threadpool
        logger.info("Configuring SQLite database")
        return create_engine(
            settings.database_url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            echo=settings.debug,
        )

    logger.info("Configuring PostgreSQL database")
    return create_engine(
        settings.database_url,
        pool_pre_ping=True,
        pool_timeout=30,
        echo=settings.debug,
    )


engine = _create_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency that provides a database session.

    Yields:
        Session: A SQLAlchemy database session that auto-closes after use.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

