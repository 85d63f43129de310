"""Apply, revert or inspect chainscope schema migrations.

Usage:
    chainscope-migrate up [--through VERSION]
    chainscope-migrate down [--through VERSION]
    chainscope-migrate status
"""

from __future__ import annotations

import argparse
import logging
import sys

import sqlalchemy as sa

from chainscope.migrations import Migrator
from chainscope.settings import get_settings
from chainscope.store.errors import MigrationUnitFailed, UnknownMigrationVersion

LOGGER = logging.getLogger("chainscope.cli.migrate")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage the chainscope relational schema.")
    parser.add_argument(
        "--database-url",
        default=None,
        help="SQLAlchemy URL to migrate instead of the configured storage backend",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    up = subparsers.add_parser("up", help="Apply pending migrations in declared order")
    up.add_argument("--through", default=None, help="Stop after applying this version")

    down = subparsers.add_parser("down", help="Revert applied migrations newest first")
    down.add_argument("--through", default=None, help="Stop after reverting this version")

    subparsers.add_parser("status", help="List declared migrations and whether each is applied")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.

    Returns:
        Zero on success, non-zero when a unit fails or the version is unknown.
    """

    args = parse_args(argv)
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    engine = sa.create_engine(args.database_url) if args.database_url else None
    migrator = Migrator(engine, settings=settings)

    try:
        if args.command == "up":
            applied = migrator.up(args.through)
            print(f"Applied {len(applied)} migration(s): {', '.join(applied) or '-'}")
        elif args.command == "down":
            reverted = migrator.down(args.through)
            print(f"Reverted {len(reverted)} migration(s): {', '.join(reverted) or '-'}")
        else:
            for entry in migrator.status():
                marker = "applied" if entry.applied else "pending"
                print(f"{entry.version}  {marker:<8} {entry.name}")
    except UnknownMigrationVersion as exc:
        LOGGER.error("%s", exc)
        return 2
    except MigrationUnitFailed as exc:
        LOGGER.error("%s: %s", exc, exc.__cause__)
        return 1
    finally:
        migrator.engine.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main())
