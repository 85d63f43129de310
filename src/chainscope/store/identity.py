"""Network-qualified identifiers for stored entities.

A record's primary key is ``"<network>.<natural key parts joined by '.'>"``
where ``<network>`` is the external name of the network backend. The key is
re-derivable from the payload at any time and never generated.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence, Tuple

from chainscope.store.domains import NetworkBackend
from chainscope.store.errors import InvalidNaturalKey

SEPARATOR = "."


class EntityKind(str, Enum):
    """Entity kinds addressable by a composed identifier."""

    ADDRESS = "address"
    ASSET = "asset"
    CASE = "case"
    REPORTER = "reporter"

    @property
    def key_arity(self) -> int:
        """int: Number of natural key parts following the network."""

        return 2 if self is EntityKind.ASSET else 1


@dataclass(frozen=True, slots=True)
class EntityKey:
    """Structured identity; :meth:`as_string` is the stored projection."""

    network: NetworkBackend
    kind: EntityKind
    parts: Tuple[str, ...]

    def as_string(self) -> str:
        return compose(self.network, self.kind, self.parts)


def _normalize_part(part: Any) -> str:
    text = str(part)
    if not text:
        raise InvalidNaturalKey("Natural key parts must not be empty")
    if SEPARATOR in text:
        raise InvalidNaturalKey(f"Natural key part {text!r} contains the separator '{SEPARATOR}'")
    return text


def compose(network: NetworkBackend | str, kind: EntityKind, parts: Sequence[Any]) -> str:
    """Build the primary key for an entity.

    Args:
        network: Network backend (member or external name).
        kind: Entity kind, used to check the natural key arity.
        parts: Natural key parts; UUIDs and integers are rendered with ``str``.

    Returns:
        The composed identifier, e.g. ``"Ethereum.0xabc"``.

    Raises:
        InvalidNaturalKey: If a part is empty, contains the separator, or the
            number of parts does not match the kind.
        UnknownEnumValue: If ``network`` is not a known backend.
    """

    backend = NetworkBackend.from_external(network)
    if len(parts) != kind.key_arity:
        raise InvalidNaturalKey(f"{kind.value} keys take {kind.key_arity} part(s), got {len(parts)}")
    normalized = [_normalize_part(part) for part in parts]
    return SEPARATOR.join([backend.to_external(), *normalized])


def parse(entity_id: str, kind: EntityKind) -> EntityKey:
    """Split a composed identifier back into its structured form.

    Raises:
        InvalidNaturalKey: If the identifier does not have the kind's shape.
        UnknownEnumValue: If the network prefix is not a known backend.
    """

    chunks = entity_id.split(SEPARATOR)
    if len(chunks) != kind.key_arity + 1 or not all(chunks):
        raise InvalidNaturalKey(f"'{entity_id}' is not a valid {kind.value} identifier")
    network = NetworkBackend.from_external(chunks[0])
    return EntityKey(network=network, kind=kind, parts=tuple(chunks[1:]))


def address_id(network: NetworkBackend | str, address: str) -> str:
    return compose(network, EntityKind.ADDRESS, (address,))


def asset_id(network: NetworkBackend | str, address: str, asset: Any) -> str:
    return compose(network, EntityKind.ASSET, (address, asset))


def case_id(network: NetworkBackend | str, case_uuid: Any) -> str:
    return compose(network, EntityKind.CASE, (case_uuid,))


def reporter_id(network: NetworkBackend | str, reporter_uuid: Any) -> str:
    return compose(network, EntityKind.REPORTER, (reporter_uuid,))


__all__ = [
    "SEPARATOR",
    "EntityKind",
    "EntityKey",
    "compose",
    "parse",
    "address_id",
    "asset_id",
    "case_id",
    "reporter_id",
]
