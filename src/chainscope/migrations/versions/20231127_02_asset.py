"""Create the asset table."""

from __future__ import annotations

from typing import Sequence

from alembic import op
import sqlalchemy as sa

from chainscope.store.domains import Category
from chainscope.store.sql import domain_type

revision: str = "20231127_02"
depends_on: Sequence[str] = ("20231205_01", "20231127_05")

TIMESTAMP = sa.DateTime(timezone=True)


def upgrade() -> None:
    op.create_table(
        "asset",
        sa.Column("id", sa.String(length=255), primary_key=True),
        sa.Column(
            "network",
            sa.String(length=64),
            sa.ForeignKey("network.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("asset_id", sa.Text(), nullable=False),
        sa.Column("case_id", sa.String(length=36), nullable=False),
        sa.Column("reporter_id", sa.String(length=36), nullable=False),
        sa.Column("risk", sa.SmallInteger(), nullable=False),
        sa.Column("category", domain_type(Category, create_type=False), nullable=False),
        sa.Column("confirmations", sa.Text(), nullable=False),
        sa.Column("created_at", TIMESTAMP, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", TIMESTAMP, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("idx_asset_network_case_id", "asset", ["network", "case_id"], unique=False)
    op.create_index("idx_asset_category_risk", "asset", ["category", "risk"], unique=False)


def downgrade() -> None:
    op.drop_index("idx_asset_category_risk", table_name="asset")
    op.drop_index("idx_asset_network_case_id", table_name="asset")
    op.drop_table("asset")
