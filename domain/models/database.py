"""
Database configuration and session management.
"""

import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from app.config import settings

logger = logging.getLogger("freshalert.database")

# Create SQLAlchemy Base
Base = declarative_base()


def make_engine(url: str, echo: bool = False):
    """Create the single long-lived engine shared by jobs and requests."""
    connect_args = {}
    if url.startswith("sqlite"):
        # Queries run in worker threads via anyio.to_thread
        connect_args["check_same_thread"] = False
    return create_engine(url, echo=echo, future=True, connect_args=connect_args)


# Create engine
engine = make_engine(settings.database_url, echo=settings.db_echo)

# Create session factory
SessionLocal = sessionmaker(bind=engine, future=True)


def init_database():
    """Initialize database schema"""
    # Import models so they are registered on Base.metadata
    from domain.models import user, food_item  # noqa: F401

    with engine.begin() as conn:
        Base.metadata.create_all(bind=conn)
        logger.info("Database tables ensured")

