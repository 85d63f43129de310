"""Layered configuration for chainscope.

Precedence, highest first: explicit keyword arguments, ``CHAINSCOPE_*``
environment variables (``__`` separates nested sections), ``.env`` files,
then TOML layers (``CHAINSCOPE_SETTINGS_FILE``, ``config/settings.local.toml``,
``config/settings.default.toml``).
"""

from __future__ import annotations

import os
import tomllib
from functools import cached_property, lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

ENV_VAR_NAME = "CHAINSCOPE_ENV"
SETTINGS_FILE_ENV_VAR = "CHAINSCOPE_SETTINGS_FILE"
DEFAULT_ENV = "local"
PROJECT_ROOT = Path(__file__).resolve().parents[3]
CONFIG_DIR = PROJECT_ROOT / "config"
DEFAULT_CONFIG_FILE = CONFIG_DIR / "settings.default.toml"
LOCAL_CONFIG_FILE = CONFIG_DIR / "settings.local.toml"


def _active_env(explicit: str | None = None) -> str:
    return (explicit or os.getenv(ENV_VAR_NAME) or DEFAULT_ENV).strip()


def _dotenv_files(env: str) -> tuple[Path, ...]:
    """Existing ``.env`` files for ``env``, later files overriding earlier ones."""

    names = (".env", f".env.{env}", ".env.local")
    return tuple(path for path in (PROJECT_ROOT / name for name in names) if path.exists())


def _toml_layers() -> tuple[Path, ...]:
    """Existing TOML layers, highest precedence first."""

    layers: list[Path] = []
    override = os.getenv(SETTINGS_FILE_ENV_VAR)
    if override:
        path = Path(override).expanduser()
        layers.append(path if path.is_absolute() else (PROJECT_ROOT / path).resolve())
    layers.extend((LOCAL_CONFIG_FILE, DEFAULT_CONFIG_FILE))
    return tuple(path for path in layers if path.exists())


class TomlLayerSource(PydanticBaseSettingsSource):
    """Settings source backed by one TOML file, parsed on first use."""

    def __init__(self, settings_cls: type[BaseSettings], path: Path) -> None:
        super().__init__(settings_cls)
        self.path = path

    @cached_property
    def data(self) -> dict[str, Any]:
        try:
            with self.path.open("rb") as handle:
                return tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ValueError(f"Invalid TOML syntax in {self.path}") from exc

    def get_field_value(self, field, field_name: str) -> tuple[Any, str, bool]:
        return self.data.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return dict(self.data)


class _Section(BaseModel):
    """Nested settings block, populated through ``CHAINSCOPE_<SECTION>__<FIELD>``."""

    model_config = ConfigDict(extra="ignore")


class RuntimeSettings(_Section):
    log_level: str = "INFO"


class APISettings(_Section):
    """Push authentication and paging defaults for the HTTP API."""

    key: str = "dev-indexer-token"
    header_name: str = "X-API-KEY"
    default_page_size: int = Field(default=25, ge=1)


class StorageSettings(_Section):
    """Relational store location; ``database_url`` wins over ``backend``/``sqlite_path``."""

    backend: Literal["sqlite", "postgresql"] = "sqlite"
    sqlite_path: Path = Path("data") / "chainscope.db"
    database_url: str | None = None
    echo: bool = False


class ObservabilitySettings(_Section):
    structured_logging: bool = True
    statsd_host: str | None = None
    statsd_port: int = 8125
    statsd_prefix: str = "chainscope"
    service_name: str = "chainscope-explorer"


class Settings(BaseSettings):
    """Top-level configuration with one nested section per subsystem."""

    model_config = SettingsConfigDict(
        env_prefix="CHAINSCOPE_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    env: str = Field(default_factory=_active_env)
    project_root: Path = PROJECT_ROOT
    runtime: RuntimeSettings = Field(default_factory=RuntimeSettings)
    api: APISettings = Field(default_factory=APISettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)
    env_files: tuple[Path, ...] = Field(default_factory=tuple, exclude=True)
    config_files: tuple[Path, ...] = Field(default_factory=tuple, exclude=True)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        toml_sources = tuple(TomlLayerSource(settings_cls, path) for path in _toml_layers())
        return (init_settings, env_settings, dotenv_settings, *toml_sources, file_secret_settings)

    @model_validator(mode="after")
    def _finalize(self) -> "Settings":
        """Anchor the SQLite path at the project root and apply local-env defaults."""

        if not self.storage.sqlite_path.is_absolute():
            resolved = (self.project_root / self.storage.sqlite_path).resolve()
            object.__setattr__(self, "storage", self.storage.model_copy(update={"sqlite_path": resolved}))
        if self.is_local:
            quiet = {"structured_logging": False, "statsd_host": None}
            object.__setattr__(self, "observability", self.observability.model_copy(update=quiet))
        return self

    @property
    def log_level(self) -> str:
        return self.runtime.log_level

    @property
    def is_local(self) -> bool:
        return self.env.lower() == "local"


@lru_cache(maxsize=1)
def get_settings(env: str | None = None) -> Settings:
    """Return the cached settings for ``env`` (``CHAINSCOPE_ENV`` or ``local`` when omitted)."""

    active = _active_env(env)
    dotenv = _dotenv_files(active)
    return Settings(
        _env_file=[str(path) for path in dotenv] or None,
        _env_file_encoding="utf-8",
        env=active,
        env_files=dotenv,
        config_files=_toml_layers(),
    )


def reload_settings(env: str | None = None) -> Settings:
    """Drop the cached settings and load them again."""

    get_settings.cache_clear()
    return get_settings(env)


__all__ = [
    "ENV_VAR_NAME",
    "PROJECT_ROOT",
    "APISettings",
    "ObservabilitySettings",
    "RuntimeSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "reload_settings",
]
