"""Shared fixtures for cron tests."""

import os

# Set environment BEFORE any imports from src
os.environ["SECRET_KEY"] = "test-secret-key-for-testing"
os.environ.pop("TOKEN_ENCRYPTION_KEY", None)
os.environ.pop("CRON_SECRET", None)
os.environ["MOCK_MODE"] = "0"
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.config import Settings
from src.db.models import Base
from src.db.repository import CredentialRepository, LeaseRepository, SyncStatusRepository


# Fixed "now" for deterministic windows: 2023-11-14T22:13:20Z
NOW_MS = 1_700_000_000_000
MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS


@pytest.fixture
def db_engine():
    """Create in-memory SQLite database shared across connections."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db_session(session_factory):
    """Create database session for testing."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def credential_repo(db_session):
    return CredentialRepository(db_session)


@pytest.fixture
def sync_repo(db_session):
    return SyncStatusRepository(db_session)


@pytest.fixture
def lease_repo(db_session):
    return LeaseRepository(db_session)


@pytest.fixture
def settings():
    """Settings with the production windows and no pacing."""
    return Settings(
        default_partner_id=None,
        default_partner_secret=None,
        lookahead_minutes=30,
        max_staleness_hours=24,
        refresh_batch_size=20,
        sync_batch_size=10,
        pacing_seconds=0,
        jobs_base_url="https://jobs.example.com/functions/v1",
        jobs_service_key="test-service-key",
    )


@pytest.fixture
def make_shop(credential_repo):
    """Factory creating a shop credential row expiring at NOW_MS + offset."""

    def _make_shop(shop_id: int, expires_in_ms: int, **overrides):
        data = {
            "shop_id": shop_id,
            "shop_name": f"Shop {shop_id}",
            "access_token": f"access-{shop_id}",
            "refresh_token": f"refresh-{shop_id}",
            "expires_at": NOW_MS + expires_in_ms,
            "partner_id": 1000,
            "partner_secret": "test-partner-secret",
        }
        data.update(overrides)
        return credential_repo.create(data)

    return _make_shop
