"""Create the case table."""

from __future__ import annotations

from typing import Sequence

from alembic import op
import sqlalchemy as sa

from chainscope.store.domains import CaseStatus
from chainscope.store.sql import domain_type

revision: str = "20231127_04"
depends_on: Sequence[str] = ("20231205_01", "20231127_08")

TIMESTAMP = sa.DateTime(timezone=True)


def upgrade() -> None:
    op.create_table(
        "case",
        sa.Column("id", sa.String(length=255), primary_key=True),
        sa.Column(
            "network",
            sa.String(length=64),
            sa.ForeignKey("network.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("case_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("status", domain_type(CaseStatus, create_type=False), nullable=False),
        sa.Column("reporter_id", sa.String(length=36), nullable=False),
        sa.Column("created_at", TIMESTAMP, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", TIMESTAMP, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("idx_case_network_case_id", "case", ["network", "case_id"], unique=False)
    op.create_index("idx_case_status", "case", ["status"], unique=False)


def downgrade() -> None:
    op.drop_index("idx_case_status", table_name="case")
    op.drop_index("idx_case_network_case_id", table_name="case")
    op.drop_table("case")
