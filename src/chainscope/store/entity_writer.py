"""Persist mapped indexer payloads with single-statement upserts."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Iterator, List

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

from chainscope.observability import Observability, get_observability
from chainscope.store import sql as sql_schema
from chainscope.store.domains import NetworkBackend
from chainscope.store.errors import IdentityCollisionViolatesInvariant, StoreUnavailable
from chainscope.store.mapper import MappedRecord, map_payload
from chainscope.store.payloads import PushEvent
from chainscope.store.sql import session_factory as default_session_factory

LOGGER = logging.getLogger(__name__)

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class NetworkRecord:
    """Registry entry for a network; its id is the backend's external name."""

    backend: NetworkBackend
    name: str | None = None
    chain_id: str | None = None
    authority: str | None = None
    stake_token: str | None = None

    @property
    def id(self) -> str:
        return self.backend.to_external()


class EntityWriter:
    """Upsert entities keyed by their composed identifier.

    Every write is one ``INSERT ... ON CONFLICT (id) DO UPDATE`` statement so
    concurrent deliveries of the same event converge on the same row without
    a read-then-write window.
    """

    def __init__(
        self,
        *,
        session_factory: sessionmaker | None = None,
        observability: Observability | None = None,
    ) -> None:
        self._session_factory = session_factory or default_session_factory()
        self._observability = observability or get_observability(component="ingest")

    @contextmanager
    def _session_scope(self, label: str) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            LOGGER.error("Uniqueness conflict while writing %s", label)
            raise IdentityCollisionViolatesInvariant(label, f"Store rejected upsert for '{label}': {exc.orig}") from exc
        except (OperationalError, InterfaceError) as exc:
            session.rollback()
            raise StoreUnavailable(f"Relational store unavailable while writing {label}") from exc
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def push(self, network: NetworkBackend | str | int, payload: Any) -> str:
        """Map and upsert one payload; returns the composed identifier."""

        record = map_payload(network, payload)
        with self._observability.timed("ingest.upsert_ms", tags={"kind": record.kind.value}):
            with self._session_scope(record.id) as session:
                self._ensure_network(session, record.values["network"])
                session.execute(self._upsert_statement(session, record, _utcnow()))
        self._record_upserts([record])
        return record.id

    def push_event(self, event: PushEvent) -> str:
        return self.push(event.network, event.data)

    def push_many(self, network: NetworkBackend | str | int, payloads: Iterable[Any]) -> List[str]:
        """Map every payload first, then upsert them in one transaction.

        A payload that fails to map aborts the batch before anything is
        written.
        """

        records = [map_payload(network, payload) for payload in payloads]
        if not records:
            return []
        timestamp = _utcnow()
        label = f"batch of {len(records)}"
        with self._observability.timed("ingest.batch_ms"):
            with self._session_scope(label) as session:
                self._ensure_network(session, records[0].values["network"])
                for record in records:
                    session.execute(self._upsert_statement(session, record, timestamp))
        self._record_upserts(records)
        return [record.id for record in records]

    def upsert_network(self, record: NetworkRecord) -> str:
        """Register or refresh a network registry entry."""

        timestamp = _utcnow()
        values = {
            "id": record.id,
            "name": record.name or record.id,
            "backend": record.backend.value,
            "chain_id": record.chain_id,
            "authority": record.authority,
            "stake_token": record.stake_token,
        }
        with self._session_scope(record.id) as session:
            insert = _dialect_insert(session)
            stmt = insert(sql_schema.network).values(**values, created_at=timestamp, updated_at=timestamp)
            update_values = {key: stmt.excluded[key] for key in values if key != "id"}
            update_values["updated_at"] = stmt.excluded.updated_at
            session.execute(stmt.on_conflict_do_update(index_elements=[sql_schema.network.c.id], set_=update_values))
        self._observability.emit_event("network.upserted", network=record.id, backend=record.backend.value)
        return record.id

    def _ensure_network(self, session: Session, network_id: str) -> None:
        backend = NetworkBackend.from_external(network_id)
        insert = _dialect_insert(session)
        stmt = (
            insert(sql_schema.network)
            .values(id=network_id, name=network_id, backend=backend.value)
            .on_conflict_do_nothing(index_elements=[sql_schema.network.c.id])
        )
        session.execute(stmt)

    def _upsert_statement(self, session: Session, record: MappedRecord, timestamp: datetime) -> sa.Executable:
        insert = _dialect_insert(session)
        stmt = insert(record.table).values(**record.values, created_at=timestamp, updated_at=timestamp)
        update_values = {key: stmt.excluded[key] for key in record.values if key != "id"}
        update_values["updated_at"] = stmt.excluded.updated_at
        return stmt.on_conflict_do_update(index_elements=[record.table.c.id], set_=update_values)

    def _record_upserts(self, records: List[MappedRecord]) -> None:
        for record in records:
            self._observability.emit_event(
                "entity.upserted",
                kind=record.kind.value,
                id=record.id,
                network=record.values["network"],
            )
            self._observability.increment("ingest.upserts", tags={"kind": record.kind.value})


def _dialect_insert(session: Session):
    dialect = session.get_bind().dialect.name
    try:
        return _DIALECT_INSERTS[dialect]
    except KeyError:
        raise NotImplementedError(f"Upserts are not supported on the '{dialect}' dialect") from None


__all__ = ["EntityWriter", "NetworkRecord"]
