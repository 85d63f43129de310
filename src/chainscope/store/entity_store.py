"""Read-side helper exposing paginated entity queries and id lookups."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Iterator

import sqlalchemy as sa
from pydantic import BaseModel
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

from chainscope.store import identity
from chainscope.store.entity_queries import (
    ADDRESS_QUERY,
    ASSET_QUERY,
    CASE_QUERY,
    REPORTER_QUERY,
    AddressCondition,
    AddressFilter,
    AddressRecord,
    AssetCondition,
    AssetFilter,
    AssetRecord,
    CaseCondition,
    CaseFilter,
    CaseRecord,
    ReporterCondition,
    ReporterFilter,
    ReporterRecord,
)
from chainscope.store.errors import EntityNotFound, StoreUnavailable
from chainscope.store.identity import EntityKind
from chainscope.store.query import EntityInput, EntityPage, EntityQuerySpec, paginate
from chainscope.store.sql import session_factory as default_session_factory

QUERY_SPECS: Dict[EntityKind, EntityQuerySpec] = {
    EntityKind.ADDRESS: ADDRESS_QUERY,
    EntityKind.ASSET: ASSET_QUERY,
    EntityKind.CASE: CASE_QUERY,
    EntityKind.REPORTER: REPORTER_QUERY,
}


# COUNT and page SELECT must share one snapshot; READ COMMITTED gives each
# statement its own.
READ_ISOLATION: Dict[str, str] = {
    "postgresql": "REPEATABLE READ",
    "sqlite": "SERIALIZABLE",
}


class EntityStore:
    """Query helper over the entity tables.

    Each call runs in its own read transaction at the dialect's snapshot
    isolation level, so counts and pages always agree.
    """

    def __init__(self, session_factory: sessionmaker | None = None) -> None:
        self._session_factory = session_factory or default_session_factory()

    @contextmanager
    def _session_scope(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            with session.begin():
                level = READ_ISOLATION.get(session.get_bind().dialect.name)
                if level is not None:
                    session.connection(execution_options={"isolation_level": level})
                yield session
        except (OperationalError, InterfaceError) as exc:
            raise StoreUnavailable("Relational store unavailable while reading") from exc
        finally:
            session.close()

    def list_addresses(
        self, request: EntityInput[AddressFilter, AddressCondition] | None = None
    ) -> EntityPage[AddressRecord]:
        with self._session_scope() as session:
            return paginate(session, ADDRESS_QUERY, request)

    def list_assets(self, request: EntityInput[AssetFilter, AssetCondition] | None = None) -> EntityPage[AssetRecord]:
        with self._session_scope() as session:
            return paginate(session, ASSET_QUERY, request)

    def list_cases(self, request: EntityInput[CaseFilter, CaseCondition] | None = None) -> EntityPage[CaseRecord]:
        with self._session_scope() as session:
            return paginate(session, CASE_QUERY, request)

    def list_reporters(
        self, request: EntityInput[ReporterFilter, ReporterCondition] | None = None
    ) -> EntityPage[ReporterRecord]:
        with self._session_scope() as session:
            return paginate(session, REPORTER_QUERY, request)

    def get(self, kind: EntityKind, entity_id: str) -> BaseModel:
        """Return the record stored under ``entity_id``.

        Raises:
            InvalidNaturalKey: If ``entity_id`` does not have the kind's shape.
            EntityNotFound: If no row carries the identifier.
        """

        key = identity.parse(entity_id, kind)
        spec = QUERY_SPECS[kind]
        with self._session_scope() as session:
            row = session.execute(sa.select(spec.table).where(spec.table.c.id == key.as_string())).mappings().first()
        if row is None:
            raise EntityNotFound(entity_id)
        return spec.decode(row)


__all__ = ["EntityStore", "QUERY_SPECS", "READ_ISOLATION"]
