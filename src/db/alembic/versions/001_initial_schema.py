"""Initial schema: shop credentials, sync status, renewal leases.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "shop_credentials",
        sa.Column("shop_id", sa.BigInteger, primary_key=True, autoincrement=False),
        sa.Column("shop_name", sa.String(255)),
        sa.Column("access_token", sa.Text),
        sa.Column("refresh_token", sa.Text),
        sa.Column("expire_in", sa.Integer),
        sa.Column("expires_at", sa.BigInteger),
        sa.Column("partner_id", sa.BigInteger),
        sa.Column("partner_secret", sa.Text),
        sa.Column("token_updated_at", sa.DateTime),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.now()),
    )
    # Range scan for the expiring-soon query
    op.create_index("ix_shop_credentials_expires_at", "shop_credentials", ["expires_at"])

    op.create_table(
        "shop_sync_status",
        sa.Column("shop_id", sa.BigInteger, primary_key=True, autoincrement=False),
        sa.Column("user_id", sa.String(64)),
        sa.Column("auto_sync_enabled", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("last_synced_at", sa.DateTime),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.now()),
    )

    op.create_table(
        "renewal_leases",
        sa.Column("shop_id", sa.BigInteger, primary_key=True, autoincrement=False),
        sa.Column("holder", sa.String(64), nullable=False),
        sa.Column("acquired_at", sa.DateTime, nullable=False),
        sa.Column("expires_at", sa.DateTime, nullable=False),
    )


def downgrade() -> None:
    op.drop_table("renewal_leases")
    op.drop_table("shop_sync_status")
    op.drop_index("ix_shop_credentials_expires_at", "shop_credentials")
    op.drop_table("shop_credentials")
