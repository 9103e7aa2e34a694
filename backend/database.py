"""
Database connection and session management
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
import logging

logger = logging.getLogger(__name__)

# Base class for models
Base = declarative_base()

DEFAULT_SQLITE_URL = "sqlite:///./migrations.db"


def build_engine(database_url: str = ""):
    """
    Create a database engine - uses SQLite fallback if no DATABASE_URL

    Args:
        database_url: SQLAlchemy URL (empty for the local SQLite file)

    Returns:
        SQLAlchemy Engine
    """
    if not database_url:
        database_url = DEFAULT_SQLITE_URL
        logger.warning("No DATABASE_URL configured, using local SQLite database")

    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10
    )


def build_session_factory(engine):
    """Create a session factory bound to ``engine``"""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine):
    """Create tables for all registered models"""
    # Import models so they register on Base.metadata
    import models  # noqa: F401
    Base.metadata.create_all(bind=engine)

