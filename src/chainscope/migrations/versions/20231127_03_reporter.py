"""Create the reporter table."""

from __future__ import annotations

from typing import Sequence

from alembic import op
import sqlalchemy as sa

from chainscope.store.domains import ReporterRole, ReporterStatus
from chainscope.store.sql import domain_type

revision: str = "20231127_03"
depends_on: Sequence[str] = ("20231205_01", "20231127_06", "20231127_07")

TIMESTAMP = sa.DateTime(timezone=True)


def upgrade() -> None:
    op.create_table(
        "reporter",
        sa.Column("id", sa.String(length=255), primary_key=True),
        sa.Column(
            "network",
            sa.String(length=64),
            sa.ForeignKey("network.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("reporter_id", sa.String(length=36), nullable=False),
        sa.Column("account", sa.Text(), nullable=False),
        sa.Column("role", domain_type(ReporterRole, create_type=False), nullable=False),
        sa.Column("status", domain_type(ReporterStatus, create_type=False), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("stake", sa.Text(), nullable=False),
        sa.Column("unlock_timestamp", sa.Text(), nullable=False),
        sa.Column("created_at", TIMESTAMP, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", TIMESTAMP, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("idx_reporter_network_reporter_id", "reporter", ["network", "reporter_id"], unique=False)


def downgrade() -> None:
    op.drop_index("idx_reporter_network_reporter_id", table_name="reporter")
    op.drop_table("reporter")
