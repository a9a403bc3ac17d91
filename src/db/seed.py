"""Seed script for demo shop credentials (mock mode)."""

import time

from sqlalchemy.orm import Session

from src.db.database import get_db_session
from src.db.models import ShopCredential
from src.db.repository import CredentialRepository, SyncStatusRepository
from src.db.migrations import run_migrations


DEMO_PARTNER_ID = 1000
DEMO_PARTNER_SECRET = "demo-partner-secret"

MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS


# Expiry offsets relative to seeding time, chosen to cover each selection case
DEMO_SHOPS = [
    {
        "shop_id": 100001,
        "shop_name": "Demo Fashion",
        "expires_in_ms": 10 * MINUTE_MS,
        "auto_sync": True,
    },
    {
        "shop_id": 100002,
        "shop_name": "Demo Electronics",
        "expires_in_ms": 20 * MINUTE_MS,
        "auto_sync": True,
    },
    {
        "shop_id": 100003,
        "shop_name": "Demo Home",
        "expires_in_ms": 3 * HOUR_MS,  # Not due yet
        "auto_sync": False,
    },
    {
        "shop_id": 100004,
        "shop_name": "Demo Abandoned",
        "expires_in_ms": -48 * HOUR_MS,  # Past the staleness cutoff
        "auto_sync": False,
    },
]


def seed_demo_shops(db: Session, now_ms: int | None = None) -> list[ShopCredential]:
    """Create demo shop credentials and sync flags if missing."""
    credential_repo = CredentialRepository(db)
    sync_repo = SyncStatusRepository(db)
    now_ms = now_ms or int(time.time() * 1000)

    created = []
    for shop in DEMO_SHOPS:
        existing = credential_repo.get_by_shop_id(shop["shop_id"])
        if existing:
            print(f"Shop {shop['shop_id']} already exists, skipping")
            created.append(existing)
            continue

        credential = credential_repo.create({
            "shop_id": shop["shop_id"],
            "shop_name": shop["shop_name"],
            "access_token": f"demo-access-{shop['shop_id']}",
            "refresh_token": f"demo-refresh-{shop['shop_id']}",
            "expires_at": now_ms + shop["expires_in_ms"],
            "partner_id": DEMO_PARTNER_ID,
            "partner_secret": DEMO_PARTNER_SECRET,
        })
        sync_repo.set_auto_sync(shop["shop_id"], shop["auto_sync"], user_id="demo-user")

        print(f"Created shop: {credential.shop_id} - {credential.shop_name}")
        created.append(credential)

    return created


def has_demo_data(db: Session) -> bool:
    """Check if demo shops already exist."""
    credential_repo = CredentialRepository(db)
    return credential_repo.get_by_shop_id(DEMO_SHOPS[0]["shop_id"]) is not None


def main():
    """CLI entry point for seeding data."""
    print("Running migrations...")
    run_migrations()

    print("\nSeeding demo shops...")
    with get_db_session() as db:
        shops = seed_demo_shops(db)
        shop_count = len(shops)

    print(f"\nSeeding complete!")
    print(f"  Shops: {shop_count}")


if __name__ == "__main__":
    main()
