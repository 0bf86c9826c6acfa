"""
Database configuration and connection handling.

Supports SQLite (default, single process) and PostgreSQL through DATABASE_URL.
"""

import logging
from typing import Generator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from config import config
from .models import Base

logger = logging.getLogger(__name__)

# Global engine instance
engine: Engine | None = None
SessionLocal = None


def init_engine(database_url: Optional[str] = None) -> Engine | None:
    """Initialize the database engine and session factory."""
    global engine, SessionLocal

    url = database_url or config.DATABASE_URL
    try:
        is_sqlite = url.startswith("sqlite")
        engine_kwargs = {
            "echo": config.SQLALCHEMY_ECHO,
        }

        if is_sqlite:
            # SQLite: thread-safe access for FastAPI workers.
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            engine_kwargs["pool_pre_ping"] = True
        else:
            # PostgreSQL mode.
            engine_kwargs["pool_pre_ping"] = True
            engine_kwargs["pool_size"] = 5
            engine_kwargs["max_overflow"] = 10
            engine_kwargs["pool_recycle"] = 3600  # Recycle connections after 1 hour

        new_engine = create_engine(url, **engine_kwargs)

        # Test connection
        with new_engine.connect() as conn:
            conn.execute(text("SELECT 1"))

        engine = new_engine
        SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

        logger.info(f"Database connected: {url.split('@')[-1]}")
        return engine

    except Exception as e:
        logger.error(f"Failed to connect to database: {e}")
        engine = None
        SessionLocal = None
        return None


def is_database_available() -> bool:
    """Check if database is available for use."""
    if engine is None:
        return False
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for FastAPI to get database session.

    Usage: db: Session = Depends(get_db)
    """
    if SessionLocal is None and init_engine() is None:
        raise RuntimeError("Database is not available")

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables():
    """Create all tables (for initial setup)."""
    if engine is not None:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created")


def drop_tables():
    """Drop all tables (use with caution!)."""
    if engine is not None:
        Base.metadata.drop_all(bind=engine)
        logger.info("Database tables dropped")
