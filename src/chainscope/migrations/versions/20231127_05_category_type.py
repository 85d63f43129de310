"""Create the address/asset category enumerated type."""

from __future__ import annotations

from typing import Sequence

from chainscope.migrations.enum_types import create_enum_type, drop_enum_type
from chainscope.store.domains import Category

revision: str = "20231127_05"
depends_on: Sequence[str] = ()


def upgrade() -> None:
    create_enum_type(Category)


def downgrade() -> None:
    drop_enum_type(Category)
