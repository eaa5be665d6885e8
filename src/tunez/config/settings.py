"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from ``TUNEZ_``-prefixed environment variables with
support for .env files, type validation, and sensible defaults. All nested
settings are frozen and immutable after initialization.
"""

from __future__ import annotations

import os
import sys
import tempfile
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.constants import LogLevels, PlayerConstants, QueueConstants
from ..domain.shared.messages import ErrorMessages
from ..domain.shared.types import (
    BusyTimeoutMs,
    ConnectionTimeoutS,
    EventBufferSize,
    MaxQueueSize,
    NonNegativeFloat,
    PositiveFloat,
    PositiveInt,
    RetryAttempts,
    UnitInterval,
    VolumePercent,
)

APP_NAME = "tunez"


def user_config_dir() -> Path:
    """Per-user configuration directory, following platform conventions."""
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata)
    elif sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".config"


def default_ipc_path() -> str:
    if sys.platform == "win32":
        return PlayerConstants.IPC_PIPE_NAME
    return str(Path(tempfile.gettempdir()) / PlayerConstants.IPC_SOCKET_NAME)


def default_database_url() -> str:
    return f"sqlite:///{user_config_dir() / APP_NAME / 'state' / 'queue.db'}"


class DatabaseSettings(BaseModel):
    """Database configuration."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    url: str = Field(
        default_factory=default_database_url,
        validation_alias=AliasChoices("url", "database_url", "db_url"),
    )
    busy_timeout_ms: BusyTimeoutMs = Field(
        default=5000,
        validation_alias=AliasChoices("busy_timeout_ms", "busy_timeout"),
    )
    connection_timeout_s: ConnectionTimeoutS = Field(
        default=10,
        validation_alias=AliasChoices("connection_timeout_s", "connection_timeout"),
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate database URL format."""
        if not v.startswith("sqlite://"):
            raise ValueError(ErrorMessages.INVALID_DATABASE_URL)
        return v


class PlayerSettings(BaseModel):
    """External player (mpv) configuration."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    mpv_path: str = Field(
        default="mpv", min_length=1, validation_alias=AliasChoices("mpv_path", "path")
    )
    ipc_path: str = Field(default_factory=default_ipc_path, min_length=1)
    extra_args: tuple[str, ...] = Field(default_factory=tuple)

    # Connect to an mpv that is already running instead of spawning one.
    disable_process: bool = False

    initial_volume: VolumePercent = 70
    event_buffer_size: EventBufferSize = 32
    dial_timeout_s: PositiveFloat = 5.0
    read_limit_bytes: PositiveInt = 1024 * 1024
    stop_timeout_s: PositiveFloat = 2.0

    @field_validator("extra_args", mode="before")
    @classmethod
    def split_extra_args(cls, v: object) -> object:
        """Accept a whitespace-separated string as well as a list."""
        if isinstance(v, str):
            return tuple(v.split())
        if isinstance(v, list):
            return tuple(v)
        return v


class ReconnectSettings(BaseModel):
    """Backoff schedule used while connecting to the player's IPC socket."""

    model_config = ConfigDict(frozen=True)

    base_delay_s: NonNegativeFloat = 0.05
    max_delay_s: NonNegativeFloat = 0.5
    max_attempts: RetryAttempts = 10
    jitter_ratio: UnitInterval = 0.2


class QueueSettings(BaseModel):
    """Play queue configuration."""

    model_config = ConfigDict(frozen=True)

    persist: bool = True
    max_size: MaxQueueSize = QueueConstants.DEFAULT_MAX_SIZE


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - TUNEZ_ENVIRONMENT, TUNEZ_LOG_LEVEL, TUNEZ_ACTIVE_PROFILE (top-level)
    - TUNEZ_PLAYER__MPV_PATH, TUNEZ_PLAYER__EXTRA_ARGS, etc. (nested with ``__``)
    - TUNEZ_DATABASE__URL (``sqlite:///`` URL)
    """

    model_config = SettingsConfigDict(
        env_prefix="TUNEZ_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    log_level: str = LogLevels.INFO
    log_file: Path | None = None

    active_profile: str = Field(default="default", min_length=1)

    player: PlayerSettings = Field(default_factory=PlayerSettings)
    reconnect: ReconnectSettings = Field(default_factory=ReconnectSettings)
    queue: QueueSettings = Field(default_factory=QueueSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        v_upper = v.upper()
        if v_upper not in LogLevels.ALL:
            raise ValueError(
                ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=sorted(LogLevels.ALL))
            )
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
