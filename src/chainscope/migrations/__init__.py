"""Ordered, reversible schema migrations.

Units live in :mod:`chainscope.migrations.versions` and are written against
``alembic.op``. The order they run in comes from :data:`MIGRATIONS` alone;
file names and revision stamps carry no ordering meaning.
"""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Sequence, Tuple

import sqlalchemy as sa
from alembic.operations import Operations
from alembic.runtime.migration import MigrationContext
from sqlalchemy import Engine

from chainscope.settings import Settings
from chainscope.store.errors import MigrationUnitFailed, UnknownMigrationVersion
from chainscope.store.sql import build_engine, transactional_sqlite_ddl

LOGGER = logging.getLogger(__name__)

VERSIONS_PACKAGE = "chainscope.migrations.versions"

MIGRATIONS: Tuple[str, ...] = (
    "20231211_01_network_backend_type",
    "20231205_01_network",
    "20231127_05_category_type",
    "20231127_06_reporter_role_type",
    "20231127_07_reporter_status_type",
    "20231127_03_reporter",
    "20231127_08_case_status_type",
    "20231127_04_case",
    "20231127_01_address",
    "20231127_02_asset",
)

VERSION_TABLE = "schema_migrations"

_VERSION_METADATA = sa.MetaData()
schema_migrations = sa.Table(
    VERSION_TABLE,
    _VERSION_METADATA,
    sa.Column("version", sa.String(length=32), primary_key=True),
    sa.Column("name", sa.Text(), nullable=False),
    sa.Column("applied_at", sa.DateTime(timezone=True), nullable=False),
)


@dataclass(frozen=True)
class MigrationUnit:
    """One reversible schema step."""

    version: str
    name: str
    upgrade: Callable[[], None]
    downgrade: Callable[[], None]
    depends_on: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_module(cls, module_name: str) -> "MigrationUnit":
        module = importlib.import_module(f"{VERSIONS_PACKAGE}.{module_name}")
        return cls(
            version=module.revision,
            name=(module.__doc__ or module_name).strip().splitlines()[0],
            upgrade=module.upgrade,
            downgrade=module.downgrade,
            depends_on=tuple(module.depends_on or ()),
        )


@dataclass(frozen=True)
class MigrationStatus:
    version: str
    name: str
    applied: bool
    applied_at: datetime | None = None


def load_units(module_names: Iterable[str] = MIGRATIONS) -> Tuple[MigrationUnit, ...]:
    """Import the declared units in order."""

    return tuple(MigrationUnit.from_module(name) for name in module_names)


def validate_order(units: Sequence[MigrationUnit]) -> None:
    """Ensure every dependency of a unit is declared before it.

    Raises:
        ValueError: On duplicate versions, unknown dependencies or a
            dependency declared after its dependent.
    """

    seen: set[str] = set()
    known = {unit.version for unit in units}
    if len(known) != len(units):
        raise ValueError("Duplicate migration versions declared")
    for unit in units:
        for dependency in unit.depends_on:
            if dependency not in known:
                raise ValueError(f"Migration {unit.version} depends on unknown version {dependency}")
            if dependency not in seen:
                raise ValueError(f"Migration {unit.version} is declared before its dependency {dependency}")
        seen.add(unit.version)


class Migrator:
    """Apply and revert migration units against one engine.

    Each unit runs in its own transaction together with its bookkeeping row
    in ``schema_migrations``, DDL included, so a failing unit leaves no
    partial schema behind. Concurrent migrators are not coordinated; run one
    at a time.
    """

    def __init__(
        self,
        engine: Engine | None = None,
        *,
        units: Sequence[MigrationUnit] | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.engine = transactional_sqlite_ddl(engine or build_engine(settings=settings))
        self.units: Tuple[MigrationUnit, ...] = tuple(units) if units is not None else load_units()
        validate_order(self.units)
        self._positions: Dict[str, int] = {unit.version: index for index, unit in enumerate(self.units)}

    def applied_versions(self) -> List[str]:
        """Return applied versions in declared order."""

        applied = self._applied_rows()
        return [unit.version for unit in self.units if unit.version in applied]

    def status(self) -> List[MigrationStatus]:
        applied = self._applied_rows()
        return [
            MigrationStatus(
                version=unit.version,
                name=unit.name,
                applied=unit.version in applied,
                applied_at=applied.get(unit.version),
            )
            for unit in self.units
        ]

    def up(self, through: str | None = None) -> List[str]:
        """Apply pending units up to and including ``through``.

        Returns:
            Versions applied by this call, in order. Empty when nothing was
            pending.

        Raises:
            UnknownMigrationVersion: If ``through`` is not declared.
            MigrationUnitFailed: If a unit fails. Units applied before it
                stay applied.
        """

        stop = self._position(through) if through is not None else len(self.units) - 1
        applied = self._applied_rows()
        performed: List[str] = []
        for unit in self.units[: stop + 1]:
            if unit.version in applied:
                continue
            self._run(unit, "up")
            performed.append(unit.version)
        return performed

    def down(self, through: str | None = None) -> List[str]:
        """Revert applied units newest first, down to and including ``through``."""

        stop = self._position(through) if through is not None else 0
        applied = self._applied_rows()
        performed: List[str] = []
        for unit in reversed(self.units[stop:]):
            if unit.version not in applied:
                continue
            self._run(unit, "down")
            performed.append(unit.version)
        return performed

    def _position(self, version: str) -> int:
        try:
            return self._positions[version]
        except KeyError:
            raise UnknownMigrationVersion(version) from None

    def _applied_rows(self) -> Dict[str, datetime]:
        with self.engine.begin() as connection:
            schema_migrations.create(connection, checkfirst=True)
            rows = connection.execute(sa.select(schema_migrations.c.version, schema_migrations.c.applied_at))
            return {row.version: row.applied_at for row in rows}

    def _run(self, unit: MigrationUnit, direction: str) -> None:
        step = unit.upgrade if direction == "up" else unit.downgrade
        try:
            with self.engine.begin() as connection:
                context = MigrationContext.configure(connection)
                with Operations.context(context):
                    step()
                if direction == "up":
                    connection.execute(
                        schema_migrations.insert().values(
                            version=unit.version,
                            name=unit.name,
                            applied_at=datetime.now(timezone.utc),
                        )
                    )
                else:
                    connection.execute(schema_migrations.delete().where(schema_migrations.c.version == unit.version))
        except Exception as exc:
            LOGGER.error("Migration %s (%s) failed during %s: %s", unit.version, unit.name, direction, exc)
            raise MigrationUnitFailed(unit.version, direction, unit.name) from exc
        LOGGER.info("Migration %s %s: %s", unit.version, "applied" if direction == "up" else "reverted", unit.name)


__all__ = [
    "MIGRATIONS",
    "VERSION_TABLE",
    "MigrationStatus",
    "MigrationUnit",
    "Migrator",
    "load_units",
    "validate_order",
]
