"""Unit tests for composed entity identifiers."""

from __future__ import annotations

import uuid

import pytest

from chainscope.store import identity
from chainscope.store.domains import NetworkBackend
from chainscope.store.errors import InvalidNaturalKey, UnknownEnumValue
from chainscope.store.identity import EntityKey, EntityKind


def test_address_id_prefixes_network_external_name() -> None:
    assert identity.address_id(NetworkBackend.ETHEREUM, "0xabc") == "Ethereum.0xabc"
    assert identity.address_id("Bsc", "0xabc") == "Bsc.0xabc"


def test_asset_id_joins_address_and_asset_number() -> None:
    assert identity.asset_id(NetworkBackend.NEAR, "alice", 42) == "Near.alice.42"


def test_case_and_reporter_ids_render_uuids() -> None:
    case_uuid = uuid.UUID("6f1c1b7e-7a5b-4a6e-9d8c-1b2a3c4d5e6f")
    assert identity.case_id("Solana", case_uuid) == f"Solana.{case_uuid}"
    assert identity.reporter_id("Bitcoin", case_uuid) == f"Bitcoin.{case_uuid}"


@pytest.mark.parametrize("kind", [EntityKind.ADDRESS, EntityKind.CASE, EntityKind.REPORTER])
def test_same_natural_key_on_different_networks_never_collides(kind: EntityKind) -> None:
    key = ("3fa85f64-5717-4562-b3fc-2c963f66afa6",)
    ids = {identity.compose(network, kind, key) for network in NetworkBackend}
    assert len(ids) == len(NetworkBackend)


def test_asset_ids_are_injective_across_networks() -> None:
    ids = {identity.asset_id(network, "0xabc", 7) for network in NetworkBackend}
    assert len(ids) == len(NetworkBackend)


def test_compose_is_deterministic() -> None:
    first = identity.compose("Ethereum", EntityKind.ADDRESS, ["0xabc"])
    second = identity.compose(NetworkBackend.ETHEREUM, EntityKind.ADDRESS, ("0xabc",))
    assert first == second


def test_part_containing_separator_is_rejected() -> None:
    with pytest.raises(InvalidNaturalKey):
        identity.address_id("Near", "alice.near")


def test_empty_part_is_rejected() -> None:
    with pytest.raises(InvalidNaturalKey):
        identity.address_id("Ethereum", "")


def test_wrong_arity_is_rejected() -> None:
    with pytest.raises(InvalidNaturalKey):
        identity.compose("Ethereum", EntityKind.ASSET, ["0xabc"])
    with pytest.raises(InvalidNaturalKey):
        identity.compose("Ethereum", EntityKind.ADDRESS, ["0xabc", "1"])


def test_unknown_network_is_rejected() -> None:
    with pytest.raises(UnknownEnumValue):
        identity.address_id("Dogecoin", "0xabc")


def test_parse_inverts_compose() -> None:
    entity_id = identity.asset_id("Sepolia", "0xabc", 9)
    key = identity.parse(entity_id, EntityKind.ASSET)
    assert key == EntityKey(network=NetworkBackend.SEPOLIA, kind=EntityKind.ASSET, parts=("0xabc", "9"))
    assert key.as_string() == entity_id


@pytest.mark.parametrize("entity_id", ["Ethereum", "Ethereum.", "Ethereum.a.b", ".0xabc"])
def test_parse_rejects_malformed_address_ids(entity_id: str) -> None:
    with pytest.raises(InvalidNaturalKey):
        identity.parse(entity_id, EntityKind.ADDRESS)
