"""Database configuration for the wellness calendar."""
from typing import Generator
from sqlmodel import create_engine, Session
import logging
import os
from dotenv import load_dotenv
from sqlalchemy import event
from sqlalchemy.pool import StaticPool

load_dotenv()

logger = logging.getLogger(__name__)

# Use the DATABASE_URL from environment variable, with fallback to SQLite for local dev
DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./wellness_calendar.db")


def build_engine(database_url: str = DATABASE_URL):
    """Create the engine; SQLite gets foreign keys on and a shared in-memory pool."""
    if not database_url.startswith("sqlite"):
        logger.info("[DB CONFIG] Using PostgreSQL database")
        return create_engine(database_url, echo=False, pool_pre_ping=True)

    logger.info(f"[DB CONFIG] Using SQLite database: {database_url}")
    engine_kwargs = {"connect_args": {"check_same_thread": False}}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        engine_kwargs["poolclass"] = StaticPool
    engine = create_engine(database_url, echo=False, **engine_kwargs)

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


engine = build_engine()


def get_session() -> Generator[Session, None, None]:
    """Dependency for getting database sessions."""
    with Session(engine) as session:
        yield session
