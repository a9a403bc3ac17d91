"""Engine and session setup for the cron database."""

import os
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from src.db.models import Base

DEFAULT_DATABASE_URL = "sqlite:///./shop_cron.db"


def get_database_url() -> str:
    """Database URL from DATABASE_URL, falling back to a local SQLite file."""
    return os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)


def _echo_sql() -> bool:
    return os.getenv("SQL_ECHO", "").lower() == "true"


def create_db_engine(database_url: str | None = None) -> Engine:
    """Create an engine for the given (or configured) database.

    Cron runs are short and sequential, so Postgres gets a small pool
    with pre-ping to survive idle connection drops between runs.
    """
    url = database_url or get_database_url()

    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False}, echo=_echo_sql())

    return create_engine(url, pool_size=3, max_overflow=2, pool_pre_ping=True, echo=_echo_sql())


engine = create_db_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """Session for a CLI run or server startup task."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(db_engine: Engine | None = None) -> None:
    """Create all tables without migrations (local experiments only)."""
    Base.metadata.create_all(bind=db_engine or engine)
