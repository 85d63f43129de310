"""Helpers for migration units that own a database enumerated type."""

from __future__ import annotations

from alembic import op
from sqlalchemy.dialects import postgresql

from chainscope.store.domains import DomainEnum


def _native_enum(domain: type[DomainEnum]) -> postgresql.ENUM:
    return postgresql.ENUM(*domain.storage_values(), name=domain.type_name())


def create_enum_type(domain: type[DomainEnum]) -> None:
    """Create the enumerated type for ``domain`` on dialects that have one.

    Other dialects store domain columns as ``VARCHAR`` so there is nothing
    to create.
    """

    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        _native_enum(domain).create(bind, checkfirst=False)


def drop_enum_type(domain: type[DomainEnum]) -> None:
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        _native_enum(domain).drop(bind, checkfirst=False)
