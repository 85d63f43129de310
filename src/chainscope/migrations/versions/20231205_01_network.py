"""Create the network registry table."""

from __future__ import annotations

from typing import Sequence

from alembic import op
import sqlalchemy as sa

from chainscope.store.domains import NetworkBackend
from chainscope.store.sql import domain_type

revision: str = "20231205_01"
depends_on: Sequence[str] = ("20231211_01",)

TIMESTAMP = sa.DateTime(timezone=True)


def upgrade() -> None:
    op.create_table(
        "network",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("backend", domain_type(NetworkBackend, create_type=False), nullable=False),
        sa.Column("chain_id", sa.Text(), nullable=True),
        sa.Column("authority", sa.Text(), nullable=True),
        sa.Column("stake_token", sa.Text(), nullable=True),
        sa.Column("created_at", TIMESTAMP, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", TIMESTAMP, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )


def downgrade() -> None:
    op.drop_table("network")
