"""Database layer for shop credentials and cron state."""

from src.db.database import get_db_session, engine, SessionLocal, create_tables
from src.db.models import Base, ShopCredential, ShopSyncStatus, RenewalLease
from src.db.repository import (
    CredentialRecord,
    CredentialRepository,
    SyncStatusRepository,
    LeaseRepository,
)
from src.db.migrations import run_migrations, get_current_revision

__all__ = [
    # Database
    "get_db_session",
    "engine",
    "SessionLocal",
    "create_tables",
    # Models
    "Base",
    "ShopCredential",
    "ShopSyncStatus",
    "RenewalLease",
    # Repositories
    "CredentialRecord",
    "CredentialRepository",
    "SyncStatusRepository",
    "LeaseRepository",
    # Migrations
    "run_migrations",
    "get_current_revision",
]
