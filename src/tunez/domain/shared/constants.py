"""Centralized constants for the database schema, the mpv protocol and other shared values.

This module provides reusable constants that reduce magic strings and improve maintainability.
"""

from __future__ import annotations

from typing import Final


class DatabaseTables:
    """Database table names."""

    QUEUE_ITEMS = "queue_items"
    QUEUE_STATE = "queue_state"


class DatabaseColumns:
    """Columns added to the schema after its first release."""

    ORIGINAL_POSITION = "original_position"


class SQLPragmas:
    """SQLite PRAGMA statements for database configuration.

    These pragmas are applied to each connection to ensure consistent behavior.
    """

    JOURNAL_MODE_WAL = "PRAGMA journal_mode=WAL"
    BUSY_TIMEOUT = "PRAGMA busy_timeout={timeout}"
    TABLE_INFO = "PRAGMA table_info({table})"


class MpvCommands:
    """Command verbs of the mpv JSON IPC protocol."""

    OBSERVE_PROPERTY = "observe_property"
    SET_PROPERTY = "set_property"
    SEEK = "seek"
    LOADFILE = "loadfile"
    QUIT = "quit"

    LOADFILE_REPLACE = "replace"
    SEEK_RELATIVE = "relative"


class MpvEvents:
    """Inbound event names."""

    PROPERTY_CHANGE = "property-change"
    END_FILE = "end-file"


class MpvProperties:
    """Player properties the controller observes or sets."""

    TIME_POS = "time-pos"
    DURATION = "duration"
    PAUSE = "pause"
    VOLUME = "volume"
    MUTE = "mute"
    HTTP_HEADER_FIELDS = "http-header-fields"

    OBSERVED: Final[tuple[str, ...]] = (TIME_POS, DURATION, PAUSE, VOLUME, MUTE)


class PlayerConstants:
    """Process and protocol limits for the external player."""

    # Always passed before user-supplied extra args.
    BASE_ARGS: Final[tuple[str, ...]] = (
        "--idle=yes",
        "--force-window=no",
        "--no-terminal",
        "--no-video",
    )
    IPC_ARG_PREFIX = "--input-ipc-server="

    IPC_SOCKET_NAME = "tunez-mpv.sock"
    IPC_PIPE_NAME = r"\\.\pipe\tunez-mpv"

    MIN_VOLUME: Final[float] = 0.0
    MAX_VOLUME: Final[float] = 100.0


class QueueConstants:
    """Defaults for the play queue."""

    DEFAULT_MAX_SIZE: Final[int] = 10_000
    NO_CURRENT: Final[int] = -1


class LogLevels:
    """Valid logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    ALL: Final[frozenset[str]] = frozenset({DEBUG, INFO, WARNING, ERROR, CRITICAL})
