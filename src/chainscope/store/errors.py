"""Error types raised by the chainscope storage core."""

from __future__ import annotations

from typing import Any


class ChainscopeError(Exception):
    """Base class for every error raised by the storage core."""


class UnknownEnumValue(ChainscopeError, ValueError):
    """A payload carried a value outside a closed domain."""

    def __init__(self, domain: str, value: Any) -> None:
        self.domain = domain
        self.value = value
        super().__init__(f"Unknown {domain} value: {value!r}")


class InvalidNaturalKey(ChainscopeError, ValueError):
    """A natural key part cannot be embedded in a composed identifier."""


class IdentityCollisionViolatesInvariant(ChainscopeError, RuntimeError):
    """The store reported a uniqueness conflict the upsert could not absorb."""

    def __init__(self, entity_id: str, message: str | None = None) -> None:
        self.entity_id = entity_id
        super().__init__(message or f"Identity collision for '{entity_id}'")


class MigrationUnitFailed(ChainscopeError, RuntimeError):
    """A migration unit failed while applying or reverting."""

    def __init__(self, version: str, direction: str, name: str | None = None) -> None:
        self.version = version
        self.direction = direction
        self.name = name
        label = f"{version} ({name})" if name else version
        super().__init__(f"Migration {label} failed during {direction}")


class UnknownMigrationVersion(ChainscopeError, ValueError):
    """A requested migration version is not part of the declared list."""

    def __init__(self, version: str) -> None:
        self.version = version
        super().__init__(f"Unknown migration version '{version}'")


class StoreUnavailable(ChainscopeError, RuntimeError):
    """The relational engine could not be reached."""


class InvalidPaginationInput(ChainscopeError, ValueError):
    """Page number or page size is not a positive integer."""


class EntityNotFound(ChainscopeError, LookupError):
    """No record exists for the requested composed identifier."""

    def __init__(self, entity_id: str) -> None:
        self.entity_id = entity_id
        super().__init__(f"Entity '{entity_id}' not found")


__all__ = [
    "ChainscopeError",
    "UnknownEnumValue",
    "InvalidNaturalKey",
    "IdentityCollisionViolatesInvariant",
    "MigrationUnitFailed",
    "UnknownMigrationVersion",
    "StoreUnavailable",
    "InvalidPaginationInput",
    "EntityNotFound",
]
