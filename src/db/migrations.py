"""Programmatic Alembic migrations for the cron tables."""

from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext

from src.db.database import create_db_engine, get_database_url

ALEMBIC_INI = Path(__file__).parent / "alembic.ini"


def get_alembic_config(database_url: str | None = None) -> Config:
    """Alembic config bound to the configured (or given) database."""
    config = Config(str(ALEMBIC_INI))
    config.attributes["database_url"] = database_url or get_database_url()
    return config


def run_migrations(database_url: str | None = None) -> None:
    """Upgrade the database to the latest revision."""
    command.upgrade(get_alembic_config(database_url), "head")


def downgrade_migrations(revision: str = "-1", database_url: str | None = None) -> None:
    """Downgrade migrations by the specified amount."""
    command.downgrade(get_alembic_config(database_url), revision)


def get_current_revision(database_url: str | None = None) -> str | None:
    """Revision the database is currently at, or None if unmigrated."""
    engine = create_db_engine(database_url)
    try:
        with engine.connect() as conn:
            return MigrationContext.configure(conn).get_current_revision()
    finally:
        engine.dispose()
