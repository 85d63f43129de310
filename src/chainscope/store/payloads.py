"""Pydantic models describing the push events emitted by chain indexers."""

from __future__ import annotations

from typing import Annotated, Any, List, Literal, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator

# Enumerated fields keep the indexer's representation (external name or
# ordinal); the mapper resolves them against the closed domains. Strict
# members keep JSON booleans and floats from being coerced to ordinals.
ExternalEnum = Union[StrictStr, StrictInt]


def _reject_float(value: Any) -> Any:
    if isinstance(value, float):
        raise ValueError("big numeric fields must be integers or decimal strings, not floats")
    return value


class _PayloadBase(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class AddressPayload(_PayloadBase):
    """Risk assessment for a single chain address."""

    kind: Literal["address"] = "address"
    address: str = Field(min_length=1)
    case_id: UUID
    reporter_id: UUID
    risk: int = Field(ge=0, le=32767)
    category: ExternalEnum
    confirmations: int = Field(default=0, ge=0)

    @field_validator("confirmations", mode="before")
    @classmethod
    def _reject_float_numbers(cls, value: Any) -> Any:
        return _reject_float(value)


class AssetPayload(_PayloadBase):
    """Risk assessment for a token (asset id) held at a chain address."""

    kind: Literal["asset"] = "asset"
    address: str = Field(min_length=1)
    asset_id: int = Field(ge=0)
    case_id: UUID
    reporter_id: UUID
    risk: int = Field(ge=0, le=32767)
    category: ExternalEnum
    confirmations: int = Field(default=0, ge=0)

    @field_validator("asset_id", "confirmations", mode="before")
    @classmethod
    def _reject_float_numbers(cls, value: Any) -> Any:
        return _reject_float(value)


class CasePayload(_PayloadBase):
    """Investigation case grouping addresses and assets."""

    kind: Literal["case"] = "case"
    id: UUID
    name: str
    url: str
    status: ExternalEnum
    reporter_id: UUID


class ReporterPayload(_PayloadBase):
    """Account allowed to publish cases, addresses and assets."""

    kind: Literal["reporter"] = "reporter"
    id: UUID
    account: str = Field(min_length=1)
    role: ExternalEnum
    status: ExternalEnum
    name: str
    url: str
    stake: int = Field(default=0, ge=0)
    unlock_timestamp: int = Field(default=0, ge=0)

    @field_validator("stake", "unlock_timestamp", mode="before")
    @classmethod
    def _reject_float_numbers(cls, value: Any) -> Any:
        return _reject_float(value)


PushPayload = Annotated[
    Union[AddressPayload, AssetPayload, CasePayload, ReporterPayload],
    Field(discriminator="kind"),
]


class PushEvent(BaseModel):
    """A payload together with the network it was observed on."""

    network: ExternalEnum
    data: PushPayload


class PushBatch(BaseModel):
    """Several payloads observed on one network, written in one transaction."""

    network: ExternalEnum
    data: List[PushPayload] = Field(default_factory=list)


__all__ = [
    "AddressPayload",
    "AssetPayload",
    "CasePayload",
    "ReporterPayload",
    "PushPayload",
    "PushEvent",
    "PushBatch",
]
