"""Unit tests covering environment variable overrides for settings."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from chainscope.settings.config import PROJECT_ROOT, reload_settings
from chainscope.store.sql import _resolve_database_url


def _clear_env(monkeypatch: pytest.MonkeyPatch, *names: str) -> None:
    """Remove env vars for every alias and prefixed variant."""

    for name in names:
        monkeypatch.delenv(name, raising=False)
        if name.startswith("CHAINSCOPE_"):
            monkeypatch.delenv(name.removeprefix("CHAINSCOPE_"), raising=False)
        else:
            monkeypatch.delenv(f"CHAINSCOPE_{name}", raising=False)


@pytest.fixture(autouse=True)
def _restore_settings():
    yield
    reload_settings()


def test_api_key_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch, "CHAINSCOPE_API__KEY", "API_KEY", "API__KEY")

    default_settings = reload_settings(env="dev")
    assert default_settings.api.key == "dev-indexer-token"
    assert default_settings.api.header_name == "X-API-KEY"

    monkeypatch.setenv("CHAINSCOPE_API__KEY", "rotated-token")
    overridden = reload_settings(env="dev")
    assert overridden.api.key == "rotated-token"


def test_storage_backend_and_page_size_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(
        monkeypatch,
        "CHAINSCOPE_STORAGE__BACKEND",
        "STORAGE_BACKEND",
        "CHAINSCOPE_API__DEFAULT_PAGE_SIZE",
        "API_DEFAULT_PAGE_SIZE",
    )
    monkeypatch.setenv("CHAINSCOPE_STORAGE__BACKEND", "postgresql")
    monkeypatch.setenv("CHAINSCOPE_API__DEFAULT_PAGE_SIZE", "50")

    settings = reload_settings(env="dev")

    assert settings.storage.backend == "postgresql"
    assert settings.api.default_page_size == 50


def test_relative_sqlite_path_resolves_under_project_root(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch, "CHAINSCOPE_STORAGE__SQLITE_PATH")
    monkeypatch.setenv("CHAINSCOPE_STORAGE__SQLITE_PATH", "data/custom.db")

    settings = reload_settings(env="dev")

    assert settings.storage.sqlite_path == (PROJECT_ROOT / "data" / "custom.db").resolve()


def test_local_env_disables_structured_logging_and_statsd(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CHAINSCOPE_OBSERVABILITY__STATSD_HOST", "statsd.internal")
    monkeypatch.setenv("CHAINSCOPE_OBSERVABILITY__STRUCTURED_LOGGING", "true")

    local = reload_settings(env="local")
    assert local.is_local
    assert local.observability.structured_logging is False
    assert local.observability.statsd_host is None

    dev = reload_settings(env="dev")
    assert dev.observability.statsd_host == "statsd.internal"
    assert dev.observability.structured_logging is True


def test_settings_file_override(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _clear_env(monkeypatch, "CHAINSCOPE_RUNTIME__LOG_LEVEL", "LOG_LEVEL", "RUNTIME__LOG_LEVEL")
    config_path = tmp_path / "settings.toml"
    config_path.write_text(
        textwrap.dedent(
            """
            [runtime]
            log_level = "DEBUG"

            [storage]
            database_url = "postgresql+psycopg://explorer@db/chainscope"
            """
        ).strip()
    )
    monkeypatch.setenv("CHAINSCOPE_SETTINGS_FILE", str(config_path))

    settings = reload_settings(env="dev")

    assert settings.log_level == "DEBUG"
    assert settings.storage.database_url == "postgresql+psycopg://explorer@db/chainscope"


def test_database_url_env_var_wins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CHAINSCOPE_DATABASE_URL", "sqlite:///:memory:")

    assert _resolve_database_url(reload_settings(env="dev")) == "sqlite:///:memory:"
