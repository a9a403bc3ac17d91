"""Repository classes for data access."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import and_, delete, or_, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from src.auth.crypto import decrypt_secret, encrypt_secret
from src.db.models import RenewalLease, ShopCredential, ShopSyncStatus
from src.errors import CredentialStoreError, ShopNotFoundError

logger = logging.getLogger(__name__)

# Columns stored as Fernet ciphertext
ENCRYPTED_FIELDS = ("access_token", "refresh_token", "partner_secret")

DEFAULT_REFRESH_BATCH_SIZE = 20


@dataclass
class CredentialRecord:
    """Decrypted view of a ShopCredential row."""

    shop_id: int
    shop_name: str | None
    access_token: str | None
    refresh_token: str | None
    expires_at: int | None  # ms since epoch
    partner_id: int | None
    partner_secret: str | None

    @classmethod
    def from_model(cls, row: ShopCredential) -> "CredentialRecord":
        return cls(
            shop_id=row.shop_id,
            shop_name=row.shop_name,
            access_token=decrypt_secret(row.access_token),
            refresh_token=decrypt_secret(row.refresh_token),
            expires_at=row.expires_at,
            partner_id=row.partner_id,
            partner_secret=decrypt_secret(row.partner_secret),
        )


class CredentialRepository:
    """Repository for shop credential data access."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_shop_id(self, shop_id: int) -> ShopCredential | None:
        """Get the raw credential row for a shop."""
        return self.db.query(ShopCredential).filter(ShopCredential.shop_id == shop_id).first()

    def get_record(self, shop_id: int) -> CredentialRecord | None:
        """Read a shop's credentials fresh from the database, decrypted."""
        try:
            row = self.get_by_shop_id(shop_id)
            if row is not None:
                # Drop any cached state so we see the committed values
                self.db.refresh(row)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise CredentialStoreError(f"Failed to read shop {shop_id}: {e}", e)
        return CredentialRecord.from_model(row) if row else None

    def create(self, data: dict[str, Any]) -> ShopCredential:
        """Create a credential row, encrypting secret fields.

        Rows are normally created by the shop connection flow; this is
        used for seeding and tests.
        """
        values = dict(data)
        for field in ENCRYPTED_FIELDS:
            if values.get(field):
                values[field] = encrypt_secret(values[field])
        credential = ShopCredential(**values)
        self.db.add(credential)
        self.db.commit()
        self.db.refresh(credential)
        return credential

    def list_expiring_soon(
        self,
        now_ms: int,
        lookahead_ms: int,
        max_staleness_ms: int,
        limit: int = DEFAULT_REFRESH_BATCH_SIZE,
    ) -> list[CredentialRecord]:
        """List credentials due for renewal, soonest expiry first.

        Selects rows with now - max_staleness < expires_at < now + lookahead
        that have a refresh token and both partner fields. Anything older
        than the staleness cutoff needs the shop to reconnect.

        Raises:
            CredentialStoreError: If the query fails
        """
        try:
            rows = (
                self.db.query(ShopCredential)
                .filter(
                    ShopCredential.expires_at > now_ms - max_staleness_ms,
                    ShopCredential.expires_at < now_ms + lookahead_ms,
                    ShopCredential.refresh_token.isnot(None),
                    ShopCredential.refresh_token != "",
                    ShopCredential.partner_id.isnot(None),
                    ShopCredential.partner_secret.isnot(None),
                    ShopCredential.partner_secret != "",
                )
                .order_by(ShopCredential.expires_at.asc())
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            raise CredentialStoreError(f"Failed to query expiring credentials: {e}", e)

        return [CredentialRecord.from_model(row) for row in rows]

    def apply_renewal(
        self,
        shop_id: int,
        access_token: str,
        refresh_token: str,
        expires_at: int,
        expire_in: int | None = None,
    ) -> None:
        """Store a renewed token pair in a single update.

        Raises:
            ShopNotFoundError: If the shop row no longer exists
            CredentialStoreError: If the update fails
        """
        now = datetime.utcnow()
        stmt = (
            update(ShopCredential)
            .where(ShopCredential.shop_id == shop_id)
            .values(
                access_token=encrypt_secret(access_token),
                refresh_token=encrypt_secret(refresh_token),
                expires_at=expires_at,
                expire_in=expire_in,
                token_updated_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )

        try:
            result = self.db.execute(stmt)
            if result.rowcount == 0:
                self.db.rollback()
                raise ShopNotFoundError(shop_id)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise CredentialStoreError(f"Failed to store renewed token for shop {shop_id}: {e}", e)


class SyncStatusRepository:
    """Repository for automatic sync flags."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_shop_id(self, shop_id: int) -> ShopSyncStatus | None:
        """Get sync status for a shop."""
        return self.db.query(ShopSyncStatus).filter(ShopSyncStatus.shop_id == shop_id).first()

    def set_auto_sync(self, shop_id: int, enabled: bool, user_id: str | None = None) -> ShopSyncStatus:
        """Create or update the auto-sync flag for a shop."""
        status = self.get_by_shop_id(shop_id)
        if status is None:
            status = ShopSyncStatus(shop_id=shop_id, user_id=user_id, auto_sync_enabled=enabled)
            self.db.add(status)
        else:
            status.auto_sync_enabled = enabled
            if user_id is not None:
                status.user_id = user_id
            status.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(status)
        return status

    def list_auto_sync(self, limit: int = 10) -> list[ShopSyncStatus]:
        """List shops flagged for auto-sync, least recently synced first."""
        return (
            self.db.query(ShopSyncStatus)
            .filter(ShopSyncStatus.auto_sync_enabled.is_(True))
            .order_by(ShopSyncStatus.last_synced_at.asc().nullsfirst(), ShopSyncStatus.shop_id.asc())
            .limit(limit)
            .all()
        )

    def mark_synced(self, shop_id: int, synced_at: datetime | None = None) -> None:
        """Stamp last_synced_at after a sync job completes."""
        status = self.get_by_shop_id(shop_id)
        if status:
            status.last_synced_at = synced_at or datetime.utcnow()
            status.updated_at = datetime.utcnow()
            self.db.commit()


class LeaseRepository:
    """Per-shop renewal leases shared between overlapping runs."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_shop_id(self, shop_id: int) -> RenewalLease | None:
        """Get the current lease row for a shop, live or expired."""
        return self.db.query(RenewalLease).filter(RenewalLease.shop_id == shop_id).first()

    def try_acquire(
        self,
        shop_id: int,
        holder: str,
        ttl_seconds: int,
        now: datetime | None = None,
    ) -> bool:
        """Take the lease for a shop unless another holder has a live one.

        Returns:
            True if the lease is now held by `holder`
        """
        now = now or datetime.utcnow()
        expires_at = now + timedelta(seconds=ttl_seconds)

        # Take over an expired lease, or extend our own
        stmt = (
            update(RenewalLease)
            .where(
                and_(
                    RenewalLease.shop_id == shop_id,
                    or_(RenewalLease.expires_at <= now, RenewalLease.holder == holder),
                )
            )
            .values(holder=holder, acquired_at=now, expires_at=expires_at)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        if result.rowcount == 1:
            self.db.commit()
            return True

        if self.get_by_shop_id(shop_id) is not None:
            # Live lease held by someone else
            self.db.commit()
            return False

        try:
            self.db.add(RenewalLease(
                shop_id=shop_id,
                holder=holder,
                acquired_at=now,
                expires_at=expires_at,
            ))
            self.db.commit()
            return True
        except IntegrityError:
            # Another run inserted its lease first
            self.db.rollback()
            return False

    def release(self, shop_id: int, holder: str) -> None:
        """Release a lease if still held by `holder`."""
        self.db.execute(
            delete(RenewalLease)
            .where(RenewalLease.shop_id == shop_id, RenewalLease.holder == holder)
        )
        self.db.commit()
