"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (HTTP, writers, logging) lean defaults de forma consistente.

`AppSettings` guarda los defaults del proceso; `BuildConfig` (ver
`core.domain.models`) es el valor inmutable de cada ejecución.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no extra dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "blocklist-builder"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "blocklist-builder"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "blocklist-builder"
    return Path.home() / ".config" / "blocklist-builder"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def validate_timezone_name(value: str) -> str:
    """Return `value` unchanged if it names a known IANA zone."""

    name = (value or "").strip()
    if not name:
        raise ValueError("timezone must not be empty")
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"unknown timezone: {name}") from exc
    return name


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars, `.env`) sin ensuciar el pipeline.
    - Un único contrato de configuración para CLI/pipeline/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="BLOCKLIST_",
        extra="ignore",
        case_sensitive=False,
        # Project `.env` first (dev), then the per-user config.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout per remote fetch attempt (seconds).",
    )
    fetch_max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Retries after the first failed fetch attempt.",
    )
    retry_backoff_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Base delay for exponential backoff between fetch retries.",
    )
    user_agent: str = Field(
        default="blocklist-builder/0.1 (+https://local)",
        min_length=1,
        description="User-Agent sent when fetching remote lists.",
    )

    timezone: str = Field(
        default="Asia/Karachi",
        description="IANA time zone used for header and log timestamps.",
    )
    output_dir: Path = Field(
        default=Path("blocklists"),
        description="Directory where rendered lists are written.",
    )
    log_file: Path | None = Field(
        default=Path(".logs") / "blocklist_generation.log",
        description="Run log (appended). Empty disables the file log.",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level.",
    )

    chunk_size: int = Field(
        default=1000,
        ge=1,
        description="Records per extraction chunk for large inputs.",
    )
    max_concurrency: int = Field(
        default=8,
        ge=1,
        le=100,
        description="Maximum number of sources fetched at the same time.",
    )

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        return validate_timezone_name(value)

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"invalid log level: {value}")
        return level

    @field_validator("log_file", mode="before")
    @classmethod
    def _empty_log_file(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value
