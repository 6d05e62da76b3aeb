"""
Database engine, session factory and lifecycle helpers
"""
import logging
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from app.config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def create_db_engine(database_url: str) -> Engine:
    """
    Build the SQLAlchemy engine for the relational store

    Server databases get a small fixed pool: when every connection is
    checked out, callers wait up to DB_POOL_TIMEOUT seconds instead of
    failing immediately. SQLite (used by the test-suite) shares a single
    connection so in-memory databases survive across sessions.
    """
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_engine(
        database_url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=0,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        # avoid stale/closed connections after database restarts
        pool_pre_ping=True,
        connect_args={"connect_timeout": settings.DB_CONNECT_TIMEOUT},
    )


engine = create_db_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """FastAPI dependency yielding a session that is always closed"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine = None) -> None:
    """Create all tables that do not exist yet"""
    # Import models so they are registered on Base.metadata
    import app.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def close_db() -> None:
    """Release every pooled connection (called on shutdown)"""
    engine.dispose()
    logger.info("Database connection pool disposed")
