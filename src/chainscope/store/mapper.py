"""Convert indexer payloads into rows ready for upsert.

Mapping is pure: it derives the composed identifier, resolves enumerated
fields against their closed domains and renders big numbers as decimal
strings. Persistence happens in :mod:`chainscope.store.entity_writer`.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import singledispatch
from typing import Any, Dict

import sqlalchemy as sa

from chainscope.store import identity
from chainscope.store import sql as sql_schema
from chainscope.store.domains import Category, CaseStatus, NetworkBackend, ReporterRole, ReporterStatus
from chainscope.store.identity import EntityKind
from chainscope.store.payloads import AddressPayload, AssetPayload, CasePayload, ReporterPayload


@dataclass(frozen=True, slots=True)
class MappedRecord:
    """Column values for one entity row, keyed by its composed ``id``."""

    kind: EntityKind
    table: sa.Table
    values: Dict[str, Any]

    @property
    def id(self) -> str:
        return self.values["id"]


def _big_number(value: int) -> str:
    return str(int(value))


def map_payload(network: NetworkBackend | str | int, payload: Any) -> MappedRecord:
    """Map ``payload`` observed on ``network`` into a :class:`MappedRecord`.

    Args:
        network: Network backend as a member, external name or ordinal.
        payload: One of the four payload models.

    Returns:
        The row to upsert.

    Raises:
        UnknownEnumValue: If the network or any enumerated field is unknown.
        InvalidNaturalKey: If a natural key part cannot be embedded in the id.
        TypeError: If ``payload`` is not a supported payload model.
    """

    backend = NetworkBackend.from_external(network)
    return _map(payload, backend)


@singledispatch
def _map(payload: Any, network: NetworkBackend) -> MappedRecord:
    raise TypeError(f"Unsupported payload type: {type(payload).__name__}")


@_map.register
def _(payload: AddressPayload, network: NetworkBackend) -> MappedRecord:
    return MappedRecord(
        kind=EntityKind.ADDRESS,
        table=sql_schema.address,
        values={
            "id": identity.address_id(network, payload.address),
            "network": network.to_external(),
            "address": payload.address,
            "case_id": str(payload.case_id),
            "reporter_id": str(payload.reporter_id),
            "risk": payload.risk,
            "category": Category.from_external(payload.category).value,
            "confirmations": _big_number(payload.confirmations),
        },
    )


@_map.register
def _(payload: AssetPayload, network: NetworkBackend) -> MappedRecord:
    asset_number = _big_number(payload.asset_id)
    return MappedRecord(
        kind=EntityKind.ASSET,
        table=sql_schema.asset,
        values={
            "id": identity.asset_id(network, payload.address, asset_number),
            "network": network.to_external(),
            "address": payload.address,
            "asset_id": asset_number,
            "case_id": str(payload.case_id),
            "reporter_id": str(payload.reporter_id),
            "risk": payload.risk,
            "category": Category.from_external(payload.category).value,
            "confirmations": _big_number(payload.confirmations),
        },
    )


@_map.register
def _(payload: CasePayload, network: NetworkBackend) -> MappedRecord:
    return MappedRecord(
        kind=EntityKind.CASE,
        table=sql_schema.case,
        values={
            "id": identity.case_id(network, payload.id),
            "network": network.to_external(),
            "case_id": str(payload.id),
            "name": payload.name,
            "url": payload.url,
            "status": CaseStatus.from_external(payload.status).value,
            "reporter_id": str(payload.reporter_id),
        },
    )


@_map.register
def _(payload: ReporterPayload, network: NetworkBackend) -> MappedRecord:
    return MappedRecord(
        kind=EntityKind.REPORTER,
        table=sql_schema.reporter,
        values={
            "id": identity.reporter_id(network, payload.id),
            "network": network.to_external(),
            "reporter_id": str(payload.id),
            "account": payload.account,
            "role": ReporterRole.from_external(payload.role).value,
            "status": ReporterStatus.from_external(payload.status).value,
            "name": payload.name,
            "url": payload.url,
            "stake": _big_number(payload.stake),
            "unlock_timestamp": _big_number(payload.unlock_timestamp),
        },
    )


__all__ = ["MappedRecord", "map_payload"]
