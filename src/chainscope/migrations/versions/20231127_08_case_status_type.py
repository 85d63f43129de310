"""Create the case status enumerated type."""

from __future__ import annotations

from typing import Sequence

from chainscope.migrations.enum_types import create_enum_type, drop_enum_type
from chainscope.store.domains import CaseStatus

revision: str = "20231127_08"
depends_on: Sequence[str] = ()


def upgrade() -> None:
    create_enum_type(CaseStatus)


def downgrade() -> None:
    drop_enum_type(CaseStatus)
