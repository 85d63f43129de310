"""Shared fixtures: isolated SQLite stores and the ingestion consistency check."""

from __future__ import annotations

from typing import Any, Callable, Iterator

import pytest
import sqlalchemy as sa
from sqlalchemy.orm import sessionmaker

from chainscope.store import sql as sql_schema
from chainscope.store.entity_store import EntityStore
from chainscope.store.entity_writer import EntityWriter
from chainscope.store.mapper import map_payload


def _enable_foreign_keys(dbapi_connection, _record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture()
def engine(tmp_path) -> Iterator[sa.Engine]:
    """SQLite engine with the full schema built from ``METADATA``."""

    engine = sa.create_engine(
        f"sqlite:///{tmp_path / 'chainscope.db'}",
        future=True,
        connect_args={"check_same_thread": False},
    )
    sa.event.listen(engine, "connect", _enable_foreign_keys)
    sql_schema.METADATA.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine) -> sessionmaker:
    return sessionmaker(bind=engine, future=True)


@pytest.fixture()
def writer(session_factory) -> EntityWriter:
    return EntityWriter(session_factory=session_factory)


@pytest.fixture()
def store(session_factory) -> EntityStore:
    return EntityStore(session_factory=session_factory)


@pytest.fixture()
def check_entity(session_factory) -> Callable[[Any, Any], dict]:
    """Assert that a pushed payload is stored under its composed id, field for field.

    Returns the stored row as a dict so callers can make further assertions.
    """

    def _check(network: Any, payload: Any) -> dict:
        expected = map_payload(network, payload)
        with session_factory() as session:
            row = (
                session.execute(sa.select(expected.table).where(expected.table.c.id == expected.id))
                .mappings()
                .one()
            )
        for column, value in expected.values.items():
            assert row[column] == value, f"{expected.id}: {column} is {row[column]!r}, expected {value!r}"
        return dict(row)

    return _check
