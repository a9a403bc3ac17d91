"""SQLAlchemy models for shop credentials and cron state."""

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class ShopCredential(Base):
    """Delegated platform credentials for one shop.

    Token and secret columns hold Fernet ciphertext; use the repository
    to read plaintext values.
    """

    __tablename__ = "shop_credentials"

    shop_id = Column(BigInteger, primary_key=True, autoincrement=False)
    shop_name = Column(String(255))

    access_token = Column(Text)  # Encrypted
    refresh_token = Column(Text)  # Encrypted
    expire_in = Column(Integer)  # Seconds, as last returned by the platform
    expires_at = Column(BigInteger)  # Milliseconds since epoch

    # Per-shop signing credentials (both or neither)
    partner_id = Column(BigInteger)
    partner_secret = Column(Text)  # Encrypted

    token_updated_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_shop_credentials_expires_at", "expires_at"),
    )

    def __repr__(self) -> str:
        return f"<ShopCredential {self.shop_id} expires_at={self.expires_at}>"


class ShopSyncStatus(Base):
    """Automatic data-sync eligibility for a shop."""

    __tablename__ = "shop_sync_status"

    shop_id = Column(BigInteger, primary_key=True, autoincrement=False)
    user_id = Column(String(64))  # Owning seller account
    auto_sync_enabled = Column(Boolean, default=False, nullable=False)
    last_synced_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<ShopSyncStatus {self.shop_id} auto_sync={self.auto_sync_enabled}>"


class RenewalLease(Base):
    """Short-lived lock held by a run while it renews a shop's token."""

    __tablename__ = "renewal_leases"

    shop_id = Column(BigInteger, primary_key=True, autoincrement=False)
    holder = Column(String(64), nullable=False)  # Run id
    acquired_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False)

    def __repr__(self) -> str:
        return f"<RenewalLease {self.shop_id} held by {self.holder}>"
