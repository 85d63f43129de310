"""SQLAlchemy metadata and engine helpers for the explorer tables."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import sqlalchemy as sa
from sqlalchemy import Engine
from sqlalchemy.dialects import postgresql
from sqlalchemy.engine import URL
from sqlalchemy.orm import sessionmaker

from chainscope.settings import Settings, get_settings
from chainscope.store.domains import Category, CaseStatus, DomainEnum, NetworkBackend, ReporterRole, ReporterStatus

TIMESTAMP = sa.DateTime(timezone=True)
UUID_TYPE = sa.String(length=36)
ID_TYPE = sa.String(length=255)
NETWORK_ID_TYPE = sa.String(length=64)


def domain_type(domain: type[DomainEnum], *, create_type: bool = True) -> sa.types.TypeEngine:
    """Return the column type backing ``domain``.

    PostgreSQL gets a native ``ENUM`` named after the domain; other dialects
    fall back to ``VARCHAR``. Migrations pass ``create_type=False`` because
    the type is created by its own unit before any table uses it.
    """

    values = domain.storage_values()
    name = domain.type_name()
    return sa.Enum(*values, name=name).with_variant(
        postgresql.ENUM(*values, name=name, create_type=create_type),
        "postgresql",
    )


METADATA = sa.MetaData()

network = sa.Table(
    "network",
    METADATA,
    sa.Column("id", NETWORK_ID_TYPE, primary_key=True),
    sa.Column("name", sa.Text(), nullable=False),
    sa.Column("backend", domain_type(NetworkBackend), nullable=False),
    sa.Column("chain_id", sa.Text(), nullable=True),
    sa.Column("authority", sa.Text(), nullable=True),
    sa.Column("stake_token", sa.Text(), nullable=True),
    sa.Column("created_at", TIMESTAMP, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    sa.Column("updated_at", TIMESTAMP, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
)

reporter = sa.Table(
    "reporter",
    METADATA,
    sa.Column("id", ID_TYPE, primary_key=True),
    sa.Column("network", NETWORK_ID_TYPE, sa.ForeignKey("network.id", ondelete="RESTRICT"), nullable=False),
    sa.Column("reporter_id", UUID_TYPE, nullable=False),
    sa.Column("account", sa.Text(), nullable=False),
    sa.Column("role", domain_type(ReporterRole), nullable=False),
    sa.Column("status", domain_type(ReporterStatus), nullable=False),
    sa.Column("name", sa.Text(), nullable=False),
    sa.Column("url", sa.Text(), nullable=False),
    sa.Column("stake", sa.Text(), nullable=False),
    sa.Column("unlock_timestamp", sa.Text(), nullable=False),
    sa.Column("created_at", TIMESTAMP, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    sa.Column("updated_at", TIMESTAMP, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
)
sa.Index("idx_reporter_network_reporter_id", reporter.c.network, reporter.c.reporter_id)

case = sa.Table(
    "case",
    METADATA,
    sa.Column("id", ID_TYPE, primary_key=True),
    sa.Column("network", NETWORK_ID_TYPE, sa.ForeignKey("network.id", ondelete="RESTRICT"), nullable=False),
    sa.Column("case_id", UUID_TYPE, nullable=False),
    sa.Column("name", sa.Text(), nullable=False),
    sa.Column("url", sa.Text(), nullable=False),
    sa.Column("status", domain_type(CaseStatus), nullable=False),
    sa.Column("reporter_id", UUID_TYPE, nullable=False),
    sa.Column("created_at", TIMESTAMP, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    sa.Column("updated_at", TIMESTAMP, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
)
sa.Index("idx_case_network_case_id", case.c.network, case.c.case_id)
sa.Index("idx_case_status", case.c.status)

address = sa.Table(
    "address",
    METADATA,
    sa.Column("id", ID_TYPE, primary_key=True),
    sa.Column("network", NETWORK_ID_TYPE, sa.ForeignKey("network.id", ondelete="RESTRICT"), nullable=False),
    sa.Column("address", sa.Text(), nullable=False),
    sa.Column("case_id", UUID_TYPE, nullable=False),
    sa.Column("reporter_id", UUID_TYPE, nullable=False),
    sa.Column("risk", sa.SmallInteger(), nullable=False),
    sa.Column("category", domain_type(Category), nullable=False),
    sa.Column("confirmations", sa.Text(), nullable=False),
    sa.Column("created_at", TIMESTAMP, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    sa.Column("updated_at", TIMESTAMP, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
)
sa.Index("idx_address_network_case_id", address.c.network, address.c.case_id)
sa.Index("idx_address_category_risk", address.c.category, address.c.risk)

asset = sa.Table(
    "asset",
    METADATA,
    sa.Column("id", ID_TYPE, primary_key=True),
    sa.Column("network", NETWORK_ID_TYPE, sa.ForeignKey("network.id", ondelete="RESTRICT"), nullable=False),
    sa.Column("address", sa.Text(), nullable=False),
    sa.Column("asset_id", sa.Text(), nullable=False),
    sa.Column("case_id", UUID_TYPE, nullable=False),
    sa.Column("reporter_id", UUID_TYPE, nullable=False),
    sa.Column("risk", sa.SmallInteger(), nullable=False),
    sa.Column("category", domain_type(Category), nullable=False),
    sa.Column("confirmations", sa.Text(), nullable=False),
    sa.Column("created_at", TIMESTAMP, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    sa.Column("updated_at", TIMESTAMP, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
)
sa.Index("idx_asset_network_case_id", asset.c.network, asset.c.case_id)
sa.Index("idx_asset_category_risk", asset.c.category, asset.c.risk)


def _resolve_database_url(settings: Settings | None = None) -> str:
    """Return the SQLAlchemy URL considering overrides and configured backend."""

    url_override = os.getenv("CHAINSCOPE_DATABASE_URL")
    if url_override:
        return url_override

    resolved = settings or get_settings()
    if resolved.storage.database_url:
        return resolved.storage.database_url

    backend = resolved.storage.backend
    if backend == "sqlite":
        sqlite_path = Path(resolved.storage.sqlite_path)
        sqlite_path.parent.mkdir(parents=True, exist_ok=True)
        return URL.create("sqlite", database=sqlite_path.as_posix()).render_as_string(hide_password=False)

    raise ValueError(f"Storage backend '{backend}' requires storage.database_url to be set")


def build_engine(*, echo: bool | None = None, settings: Settings | None = None) -> Engine:
    """Instantiate a SQLAlchemy engine aligned with project settings."""

    resolved = settings or get_settings()
    url = _resolve_database_url(resolved)
    connect_args: dict[str, Any] = {}
    if url.startswith("sqlite:///"):
        connect_args["check_same_thread"] = False
    if echo is None:
        echo = resolved.storage.echo
    return sa.create_engine(url, echo=echo, future=True, pool_pre_ping=True, connect_args=connect_args)


def session_factory(*, settings: Settings | None = None, engine: Engine | None = None) -> sessionmaker:
    """Return a configured sessionmaker bound to the active engine."""

    bound = engine or build_engine(settings=settings)
    return sessionmaker(bind=bound, autoflush=False, autocommit=False, future=True)


def _hand_transactions_to_sqlalchemy(dbapi_connection, connection_record) -> None:
    dbapi_connection.isolation_level = None


def _emit_begin(connection) -> None:
    connection.exec_driver_sql("BEGIN")


def transactional_sqlite_ddl(engine: Engine) -> Engine:
    """Make DDL on a pysqlite engine roll back with its enclosing transaction.

    pysqlite never opens a transaction before DDL, so a failing migration
    would otherwise keep whatever it created. The listeners follow the
    SQLAlchemy pysqlite recipe: the driver stops managing transactions and
    every SQLAlchemy ``begin`` emits ``BEGIN``. Other dialects are returned
    untouched.
    """

    if engine.dialect.name != "sqlite" or sa.event.contains(engine, "begin", _emit_begin):
        return engine
    sa.event.listen(engine, "connect", _hand_transactions_to_sqlalchemy)
    sa.event.listen(engine, "begin", _emit_begin)
    return engine


__all__ = [
    "METADATA",
    "network",
    "reporter",
    "case",
    "address",
    "asset",
    "domain_type",
    "build_engine",
    "session_factory",
    "transactional_sqlite_ddl",
]
