"""Unit tests for the upserting entity writer."""

from __future__ import annotations

import uuid
from unittest.mock import MagicMock

import pytest
import sqlalchemy as sa
from sqlalchemy.exc import OperationalError

from chainscope.store import sql as sql_schema
from chainscope.store.domains import NetworkBackend
from chainscope.store.entity_writer import EntityWriter, NetworkRecord
from chainscope.store.errors import StoreUnavailable, UnknownEnumValue
from chainscope.store.payloads import AddressPayload, AssetPayload, CasePayload, PushEvent, ReporterPayload

CASE_UUID = uuid.UUID("5d2b8e34-1c4f-4a9e-b6d7-0e1f2a3b4c5d")
REPORTER_UUID = uuid.UUID("c4b3a291-8f7e-4d6c-a5b4-3c2d1e0f9a8b")


def _address(address: str = "0xabc", *, risk: int = 3, category: str = "Scam") -> AddressPayload:
    return AddressPayload(
        address=address,
        case_id=CASE_UUID,
        reporter_id=REPORTER_UUID,
        risk=risk,
        category=category,
        confirmations=5,
    )


def _count(engine: sa.Engine, table: sa.Table) -> int:
    with engine.connect() as conn:
        return conn.execute(sa.select(sa.func.count()).select_from(table)).scalar_one()


def test_push_stores_row_under_composed_id(writer, engine, check_entity) -> None:
    entity_id = writer.push("Ethereum", _address())

    assert entity_id == "Ethereum.0xabc"
    row = check_entity("Ethereum", _address())
    assert row["category"] == "scam"
    assert _count(engine, sql_schema.address) == 1


def test_push_registers_network_row(writer, engine) -> None:
    writer.push("Bsc", _address())

    with engine.connect() as conn:
        row = conn.execute(sa.select(sql_schema.network)).mappings().one()
    assert row["id"] == "Bsc"
    assert row["backend"] == "bsc"


def test_ingesting_same_payload_twice_is_idempotent(writer, engine, check_entity) -> None:
    writer.push("Ethereum", _address())
    writer.push("Ethereum", _address())

    assert _count(engine, sql_schema.address) == 1
    assert _count(engine, sql_schema.network) == 1
    check_entity("Ethereum", _address())


def test_changed_fields_update_existing_row(writer, engine, check_entity) -> None:
    writer.push("Ethereum", _address(risk=3))
    writer.push("Ethereum", _address(risk=7, category="Mixer"))

    assert _count(engine, sql_schema.address) == 1
    row = check_entity("Ethereum", _address(risk=7, category="Mixer"))
    assert row["risk"] == 7
    assert row["category"] == "mixer"


def test_same_address_on_two_networks_yields_two_rows(writer, engine) -> None:
    first = writer.push("Ethereum", _address())
    second = writer.push("Sepolia", _address())

    assert first != second
    assert _count(engine, sql_schema.address) == 2


def test_unknown_enum_leaves_store_unchanged(writer, engine) -> None:
    writer.push("Ethereum", _address())
    bad_case = CasePayload(id=CASE_UUID, name="x", url="y", status="Escalated", reporter_id=REPORTER_UUID)

    with pytest.raises(UnknownEnumValue):
        writer.push("Ethereum", bad_case)

    assert _count(engine, sql_schema.case) == 0
    assert _count(engine, sql_schema.address) == 1


def test_push_many_is_all_or_nothing_on_mapping_errors(writer, engine) -> None:
    payloads = [_address("0x1"), _address("0x2"), _address("0x3", category="NotACategory")]

    with pytest.raises(UnknownEnumValue):
        writer.push_many("Ethereum", payloads)

    assert _count(engine, sql_schema.address) == 0


def test_push_many_writes_every_kind(writer, check_entity) -> None:
    payloads = [
        ReporterPayload(
            id=REPORTER_UUID,
            account="0xreporter",
            role="Publisher",
            status="Active",
            name="Publisher",
            url="https://example.org/r",
            stake=10**24,
            unlock_timestamp=0,
        ),
        CasePayload(id=CASE_UUID, name="Drainer", url="https://example.org/c", status="Open", reporter_id=REPORTER_UUID),
        _address(),
        AssetPayload(
            address="0xabc",
            asset_id=77,
            case_id=CASE_UUID,
            reporter_id=REPORTER_UUID,
            risk=5,
            category="Theft",
        ),
    ]

    ids = writer.push_many(NetworkBackend.ETHEREUM, payloads)

    assert ids == [
        f"Ethereum.{REPORTER_UUID}",
        f"Ethereum.{CASE_UUID}",
        "Ethereum.0xabc",
        "Ethereum.0xabc.77",
    ]
    for payload in payloads:
        check_entity("Ethereum", payload)


def test_push_many_with_no_payloads_is_a_no_op(writer) -> None:
    assert writer.push_many("Ethereum", []) == []


def test_push_event_uses_event_network(writer, check_entity) -> None:
    event = PushEvent(network="Near", data=_address("alice"))

    assert writer.push_event(event) == "Near.alice"
    check_entity("Near", _address("alice"))


def test_upsert_network_refreshes_registry_entry(writer, engine) -> None:
    writer.upsert_network(NetworkRecord(backend=NetworkBackend.ETHEREUM, name="Mainnet", chain_id="1"))
    writer.upsert_network(
        NetworkRecord(backend=NetworkBackend.ETHEREUM, name="Mainnet", chain_id="1", authority="0xauthority")
    )

    with engine.connect() as conn:
        rows = conn.execute(sa.select(sql_schema.network)).mappings().all()
    assert len(rows) == 1
    assert rows[0]["id"] == "Ethereum"
    assert rows[0]["authority"] == "0xauthority"


def test_pushes_emit_upsert_events(session_factory) -> None:
    observability = MagicMock()
    writer = EntityWriter(session_factory=session_factory, observability=observability)

    writer.push("Ethereum", _address())

    observability.emit_event.assert_called_once_with(
        "entity.upserted", kind="address", id="Ethereum.0xabc", network="Ethereum"
    )
    observability.increment.assert_called_once_with("ingest.upserts", tags={"kind": "address"})


def test_operational_errors_surface_as_store_unavailable() -> None:
    session = MagicMock()
    session.get_bind.return_value.dialect.name = "sqlite"
    session.execute.side_effect = OperationalError("INSERT", {}, Exception("database is locked"))
    writer = EntityWriter(session_factory=lambda: session, observability=MagicMock())

    with pytest.raises(StoreUnavailable):
        writer.push("Ethereum", _address())
    session.rollback.assert_called_once()
