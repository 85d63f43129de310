"""Unit tests for the chainscope-migrate command."""

from __future__ import annotations

import sqlalchemy as sa

from chainscope.cli.migrate import main
from chainscope.migrations import MIGRATIONS


def test_up_status_down_cycle(tmp_path, capsys) -> None:
    url = f"sqlite:///{tmp_path / 'cli.db'}"

    assert main(["--database-url", url, "up"]) == 0
    assert f"Applied {len(MIGRATIONS)} migration(s)" in capsys.readouterr().out

    assert main(["--database-url", url, "status"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == len(MIGRATIONS)
    assert all(" applied " in line for line in lines)

    assert main(["--database-url", url, "down"]) == 0
    engine = sa.create_engine(url)
    try:
        assert set(sa.inspect(engine).get_table_names()) == {"schema_migrations"}
    finally:
        engine.dispose()


def test_unknown_through_version_exits_non_zero(tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'cli.db'}"

    assert main(["--database-url", url, "up", "--through", "19700101_01"]) == 2
