"""Per-kind records, filters and sortable fields for the generic query layer."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, List
from uuid import UUID

import sqlalchemy as sa
from pydantic import BaseModel

from chainscope.store import sql as sql_schema
from chainscope.store.domains import Category, CaseStatus, DomainEnum, NetworkBackend, ReporterRole, ReporterStatus
from chainscope.store.payloads import ExternalEnum
from chainscope.store.query import EntityQuerySpec

# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


class AddressRecord(BaseModel):
    id: str
    network: str
    address: str
    case_id: UUID
    reporter_id: UUID
    risk: int
    category: str
    confirmations: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AssetRecord(BaseModel):
    id: str
    network: str
    address: str
    asset_id: str
    case_id: UUID
    reporter_id: UUID
    risk: int
    category: str
    confirmations: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CaseRecord(BaseModel):
    id: str
    network: str
    case_id: UUID
    name: str
    url: str
    status: str
    reporter_id: UUID
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ReporterRecord(BaseModel):
    id: str
    network: str
    reporter_id: UUID
    account: str
    role: str
    status: str
    name: str
    url: str
    stake: str
    unlock_timestamp: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


class AddressFilter(BaseModel):
    """Predicates for address queries; enumerated values use external names."""

    network: ExternalEnum | None = None
    address: str | None = None
    case_id: UUID | None = None
    reporter_id: UUID | None = None
    category: ExternalEnum | None = None
    risk: int | None = None
    min_risk: int | None = None
    max_risk: int | None = None


class AssetFilter(AddressFilter):
    asset_id: str | None = None


class CaseFilter(BaseModel):
    network: ExternalEnum | None = None
    case_id: UUID | None = None
    name: str | None = None
    status: ExternalEnum | None = None
    reporter_id: UUID | None = None


class ReporterFilter(BaseModel):
    network: ExternalEnum | None = None
    reporter_id: UUID | None = None
    account: str | None = None
    role: ExternalEnum | None = None
    status: ExternalEnum | None = None
    name: str | None = None


# ---------------------------------------------------------------------------
# Sortable fields (values are column names)
# ---------------------------------------------------------------------------


class AddressCondition(str, Enum):
    ID = "id"
    NETWORK = "network"
    ADDRESS = "address"
    CASE_ID = "case_id"
    REPORTER_ID = "reporter_id"
    RISK = "risk"
    CATEGORY = "category"
    CONFIRMATIONS = "confirmations"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


class AssetCondition(str, Enum):
    ID = "id"
    NETWORK = "network"
    ADDRESS = "address"
    ASSET_ID = "asset_id"
    CASE_ID = "case_id"
    REPORTER_ID = "reporter_id"
    RISK = "risk"
    CATEGORY = "category"
    CONFIRMATIONS = "confirmations"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


class CaseCondition(str, Enum):
    ID = "id"
    NETWORK = "network"
    CASE_ID = "case_id"
    NAME = "name"
    STATUS = "status"
    REPORTER_ID = "reporter_id"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


class ReporterCondition(str, Enum):
    ID = "id"
    NETWORK = "network"
    REPORTER_ID = "reporter_id"
    ACCOUNT = "account"
    ROLE = "role"
    STATUS = "status"
    NAME = "name"
    STAKE = "stake"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


# ---------------------------------------------------------------------------
# Predicate helpers
# ---------------------------------------------------------------------------


def _eq(predicates: List[sa.ColumnElement[bool]], column: sa.ColumnElement[Any], value: Any) -> None:
    if value is not None:
        predicates.append(column == (str(value) if isinstance(value, UUID) else value))


def _domain_eq(
    predicates: List[sa.ColumnElement[bool]],
    column: sa.ColumnElement[Any],
    domain: type[DomainEnum],
    value: Any,
) -> None:
    if value is not None:
        predicates.append(column == domain.from_external(value).value)


def _network_eq(predicates: List[sa.ColumnElement[bool]], table: sa.Table, value: Any) -> None:
    if value is not None:
        predicates.append(table.c.network == NetworkBackend.from_external(value).to_external())


def _risk_predicates(predicates: List[sa.ColumnElement[bool]], table: sa.Table, filtering: AddressFilter) -> None:
    _eq(predicates, table.c.risk, filtering.risk)
    if filtering.min_risk is not None:
        predicates.append(table.c.risk >= filtering.min_risk)
    if filtering.max_risk is not None:
        predicates.append(table.c.risk <= filtering.max_risk)


class _ColumnConditionSpec:
    """Resolve a condition enum whose values are column names.

    Columns named in ``decimal_columns`` hold unsigned decimal strings; they
    sort by length first so "10" comes after "9".
    """

    table: sa.Table
    decimal_columns: frozenset[str] = frozenset()

    def order_columns(self, condition: Enum) -> List[sa.ColumnElement[Any]]:
        column = self.table.c[condition.value]
        if condition.value in self.decimal_columns:
            return [sa.func.length(column), column]
        return [column]


# ---------------------------------------------------------------------------
# Specs
# ---------------------------------------------------------------------------


class AddressQuerySpec(_ColumnConditionSpec, EntityQuerySpec[AddressRecord, AddressFilter, AddressCondition]):
    table = sql_schema.address
    record_model = AddressRecord
    default_condition = AddressCondition.ADDRESS
    decimal_columns = frozenset({"confirmations"})

    def filter_predicates(self, filtering: AddressFilter) -> List[sa.ColumnElement[bool]]:
        predicates: List[sa.ColumnElement[bool]] = []
        _network_eq(predicates, self.table, filtering.network)
        _eq(predicates, self.table.c.address, filtering.address)
        _eq(predicates, self.table.c.case_id, filtering.case_id)
        _eq(predicates, self.table.c.reporter_id, filtering.reporter_id)
        _domain_eq(predicates, self.table.c.category, Category, filtering.category)
        _risk_predicates(predicates, self.table, filtering)
        return predicates

    def decode(self, row: Any) -> AddressRecord:
        return AddressRecord(
            id=row["id"],
            network=row["network"],
            address=row["address"],
            case_id=UUID(row["case_id"]),
            reporter_id=UUID(row["reporter_id"]),
            risk=row["risk"],
            category=Category.from_storage(row["category"]).to_external(),
            confirmations=row["confirmations"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


class AssetQuerySpec(_ColumnConditionSpec, EntityQuerySpec[AssetRecord, AssetFilter, AssetCondition]):
    table = sql_schema.asset
    record_model = AssetRecord
    default_condition = AssetCondition.ADDRESS
    decimal_columns = frozenset({"asset_id", "confirmations"})

    def filter_predicates(self, filtering: AssetFilter) -> List[sa.ColumnElement[bool]]:
        predicates: List[sa.ColumnElement[bool]] = []
        _network_eq(predicates, self.table, filtering.network)
        _eq(predicates, self.table.c.address, filtering.address)
        _eq(predicates, self.table.c.asset_id, filtering.asset_id)
        _eq(predicates, self.table.c.case_id, filtering.case_id)
        _eq(predicates, self.table.c.reporter_id, filtering.reporter_id)
        _domain_eq(predicates, self.table.c.category, Category, filtering.category)
        _risk_predicates(predicates, self.table, filtering)
        return predicates

    def decode(self, row: Any) -> AssetRecord:
        return AssetRecord(
            id=row["id"],
            network=row["network"],
            address=row["address"],
            asset_id=row["asset_id"],
            case_id=UUID(row["case_id"]),
            reporter_id=UUID(row["reporter_id"]),
            risk=row["risk"],
            category=Category.from_storage(row["category"]).to_external(),
            confirmations=row["confirmations"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


class CaseQuerySpec(_ColumnConditionSpec, EntityQuerySpec[CaseRecord, CaseFilter, CaseCondition]):
    table = sql_schema.case
    record_model = CaseRecord
    default_condition = CaseCondition.CASE_ID

    def filter_predicates(self, filtering: CaseFilter) -> List[sa.ColumnElement[bool]]:
        predicates: List[sa.ColumnElement[bool]] = []
        _network_eq(predicates, self.table, filtering.network)
        _eq(predicates, self.table.c.case_id, filtering.case_id)
        _eq(predicates, self.table.c.name, filtering.name)
        _domain_eq(predicates, self.table.c.status, CaseStatus, filtering.status)
        _eq(predicates, self.table.c.reporter_id, filtering.reporter_id)
        return predicates

    def decode(self, row: Any) -> CaseRecord:
        return CaseRecord(
            id=row["id"],
            network=row["network"],
            case_id=UUID(row["case_id"]),
            name=row["name"],
            url=row["url"],
            status=CaseStatus.from_storage(row["status"]).to_external(),
            reporter_id=UUID(row["reporter_id"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


class ReporterQuerySpec(_ColumnConditionSpec, EntityQuerySpec[ReporterRecord, ReporterFilter, ReporterCondition]):
    table = sql_schema.reporter
    record_model = ReporterRecord
    default_condition = ReporterCondition.REPORTER_ID
    decimal_columns = frozenset({"stake"})

    def filter_predicates(self, filtering: ReporterFilter) -> List[sa.ColumnElement[bool]]:
        predicates: List[sa.ColumnElement[bool]] = []
        _network_eq(predicates, self.table, filtering.network)
        _eq(predicates, self.table.c.reporter_id, filtering.reporter_id)
        _eq(predicates, self.table.c.account, filtering.account)
        _domain_eq(predicates, self.table.c.role, ReporterRole, filtering.role)
        _domain_eq(predicates, self.table.c.status, ReporterStatus, filtering.status)
        _eq(predicates, self.table.c.name, filtering.name)
        return predicates

    def decode(self, row: Any) -> ReporterRecord:
        return ReporterRecord(
            id=row["id"],
            network=row["network"],
            reporter_id=UUID(row["reporter_id"]),
            account=row["account"],
            role=ReporterRole.from_storage(row["role"]).to_external(),
            status=ReporterStatus.from_storage(row["status"]).to_external(),
            name=row["name"],
            url=row["url"],
            stake=row["stake"],
            unlock_timestamp=row["unlock_timestamp"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


ADDRESS_QUERY = AddressQuerySpec()
ASSET_QUERY = AssetQuerySpec()
CASE_QUERY = CaseQuerySpec()
REPORTER_QUERY = ReporterQuerySpec()


__all__ = [
    "AddressRecord",
    "AssetRecord",
    "CaseRecord",
    "ReporterRecord",
    "AddressFilter",
    "AssetFilter",
    "CaseFilter",
    "ReporterFilter",
    "AddressCondition",
    "AssetCondition",
    "CaseCondition",
    "ReporterCondition",
    "AddressQuerySpec",
    "AssetQuerySpec",
    "CaseQuerySpec",
    "ReporterQuerySpec",
    "ADDRESS_QUERY",
    "ASSET_QUERY",
    "CASE_QUERY",
    "REPORTER_QUERY",
]
