"""Closed enumerations shared by payloads, tables and queries.

Every domain has two stable representations:

* the *external* one used by indexer payloads and the HTTP API (the
  PascalCase name, e.g. ``"Scam"``, or its ordinal as a small integer);
* the *storage* one persisted in the database enumerated type (the
  snake_case member value, e.g. ``"scam"``).

The external tables below are explicit so that renaming a member never
changes what indexers send. :func:`_register` refuses to load a domain whose
table does not cover every member.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Type, TypeVar

from chainscope.store.errors import UnknownEnumValue

D = TypeVar("D", bound="DomainEnum")


@dataclass(frozen=True, slots=True)
class _DomainSpec:
    type_name: str
    to_external: Mapping[Any, str]
    from_external: Mapping[str, Any]
    ordinals: tuple[Any, ...]


_SPECS: Dict[type, _DomainSpec] = {}


class DomainEnum(str, Enum):
    """Base class for the closed domains; members carry the storage value."""

    @classmethod
    def type_name(cls) -> str:
        """Return the database enumerated type name for the domain."""

        return _SPECS[cls].type_name

    @classmethod
    def storage_values(cls) -> List[str]:
        """Return storage values in declaration order."""

        return [member.value for member in cls]

    @classmethod
    def from_external(cls: Type[D], value: Any) -> D:
        """Resolve a payload value (name, ordinal or member) into a member.

        Raises:
            UnknownEnumValue: If ``value`` is not part of the domain.
        """

        spec = _SPECS[cls]
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise UnknownEnumValue(spec.type_name, value)
        if isinstance(value, int):
            if 0 <= value < len(spec.ordinals):
                return spec.ordinals[value]
            raise UnknownEnumValue(spec.type_name, value)
        if isinstance(value, str):
            member = spec.from_external.get(value)
            if member is not None:
                return member
        raise UnknownEnumValue(spec.type_name, value)

    @classmethod
    def from_storage(cls: Type[D], value: Any) -> D:
        """Resolve a stored value back into a member.

        Raises:
            UnknownEnumValue: If the stored value is not part of the domain.
        """

        try:
            return cls(value)
        except ValueError:
            raise UnknownEnumValue(_SPECS[cls].type_name, value) from None

    def to_external(self) -> str:
        """Return the external (payload/API) name of the member."""

        return _SPECS[type(self)].to_external[self]


def _register(domain: type, type_name: str, external: Mapping[Any, str]) -> None:
    missing = [member.name for member in domain if member not in external]
    if missing:
        raise RuntimeError(f"Domain {domain.__name__} lacks external names for: {', '.join(missing)}")
    names = list(external.values())
    if len(set(names)) != len(names):
        raise RuntimeError(f"Domain {domain.__name__} maps two members to the same external name")
    _SPECS[domain] = _DomainSpec(
        type_name=type_name,
        to_external=dict(external),
        from_external={name: member for member, name in external.items()},
        ordinals=tuple(external),
    )


class Category(DomainEnum):
    """Risk category attached to addresses and assets."""

    NONE = "none"
    WALLET_SERVICE = "wallet_service"
    MERCHANT_SERVICE = "merchant_service"
    MINING_POOL = "mining_pool"
    EXCHANGE = "exchange"
    DEFI = "defi"
    OTC_BROKER = "otc_broker"
    ATM = "atm"
    GAMBLING = "gambling"
    ILLICIT_ORGANIZATION = "illicit_organization"
    MIXER = "mixer"
    DARKNET_SERVICE = "darknet_service"
    SCAM = "scam"
    RANSOMWARE = "ransomware"
    THEFT = "theft"
    COUNTERFEIT = "counterfeit"
    TERRORIST_FINANCING = "terrorist_financing"
    SANCTIONS = "sanctions"
    CHILD_ABUSE = "child_abuse"
    HACKER = "hacker"
    HIGH_RISK_JURISDICTION = "high_risk_jurisdiction"


class ReporterRole(DomainEnum):
    """Permission level of a reporter."""

    VALIDATOR = "validator"
    TRACER = "tracer"
    PUBLISHER = "publisher"
    AUTHORITY = "authority"


class ReporterStatus(DomainEnum):
    """Staking lifecycle of a reporter."""

    INACTIVE = "inactive"
    ACTIVE = "active"
    UNSTAKING = "unstaking"


class CaseStatus(DomainEnum):
    CLOSED = "closed"
    OPEN = "open"


class NetworkBackend(DomainEnum):
    """Blockchain a network is deployed on; also the identity namespace."""

    SEPOLIA = "sepolia"
    ETHEREUM = "ethereum"
    BSC = "bsc"
    SOLANA = "solana"
    BITCOIN = "bitcoin"
    NEAR = "near"


# Declaration order of each table is also the ordinal order indexers use.
_register(
    Category,
    "category",
    {
        Category.NONE: "None",
        Category.WALLET_SERVICE: "WalletService",
        Category.MERCHANT_SERVICE: "MerchantService",
        Category.MINING_POOL: "MiningPool",
        Category.EXCHANGE: "Exchange",
        Category.DEFI: "DeFi",
        Category.OTC_BROKER: "OTCBroker",
        Category.ATM: "ATM",
        Category.GAMBLING: "Gambling",
        Category.ILLICIT_ORGANIZATION: "IllicitOrganization",
        Category.MIXER: "Mixer",
        Category.DARKNET_SERVICE: "DarknetService",
        Category.SCAM: "Scam",
        Category.RANSOMWARE: "Ransomware",
        Category.THEFT: "Theft",
        Category.COUNTERFEIT: "Counterfeit",
        Category.TERRORIST_FINANCING: "TerroristFinancing",
        Category.SANCTIONS: "Sanctions",
        Category.CHILD_ABUSE: "ChildAbuse",
        Category.HACKER: "Hacker",
        Category.HIGH_RISK_JURISDICTION: "HighRiskJurisdiction",
    },
)
_register(
    ReporterRole,
    "reporter_role",
    {
        ReporterRole.VALIDATOR: "Validator",
        ReporterRole.TRACER: "Tracer",
        ReporterRole.PUBLISHER: "Publisher",
        ReporterRole.AUTHORITY: "Authority",
    },
)
_register(
    ReporterStatus,
    "reporter_status",
    {
        ReporterStatus.INACTIVE: "Inactive",
        ReporterStatus.ACTIVE: "Active",
        ReporterStatus.UNSTAKING: "Unstaking",
    },
)
_register(
    CaseStatus,
    "case_status",
    {
        CaseStatus.CLOSED: "Closed",
        CaseStatus.OPEN: "Open",
    },
)
_register(
    NetworkBackend,
    "network_backend",
    {
        NetworkBackend.SEPOLIA: "Sepolia",
        NetworkBackend.ETHEREUM: "Ethereum",
        NetworkBackend.BSC: "Bsc",
        NetworkBackend.SOLANA: "Solana",
        NetworkBackend.BITCOIN: "Bitcoin",
        NetworkBackend.NEAR: "Near",
    },
)

ALL_DOMAINS: tuple[type[DomainEnum], ...] = (NetworkBackend, Category, ReporterRole, ReporterStatus, CaseStatus)


__all__ = [
    "DomainEnum",
    "Category",
    "ReporterRole",
    "ReporterStatus",
    "CaseStatus",
    "NetworkBackend",
    "ALL_DOMAINS",
]
