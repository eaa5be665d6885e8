"""Centralized message constants for error messages and log output."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Track Validation Errors
    EMPTY_TRACK_ID = "Track ID cannot be empty"

    # Event Validation Errors
    ENDED_REQUIRES_EOF = "ended=True is only valid for end_reason=eof"

    # Player Errors
    PLAYER_SPAWN_FAILED = "Failed to start player process {path!r}: {error}"
    PLAYER_STOPPED_DURING_START = "Player was stopped while starting"
    PLAYER_OBSERVE_FAILED = "Failed to register property observers: {error}"
    PLAYER_COMMAND_FAILED = "Failed to send {verb!r} to player: {error}"
    PLAYER_CONNECTION_CLOSED = "Player connection is closed"
    PLAYER_UNIX_SOCKETS_UNSUPPORTED = "Unix domain sockets are not available on this platform"

    # Protocol Errors
    IPC_NOT_JSON = "invalid JSON"
    IPC_NOT_OBJECT = "message is not a JSON object"
    IPC_LINE_TOO_LONG = "line exceeds read limit"

    # Persistence Errors
    SNAPSHOT_SAVE_FAILED = "Could not save queue snapshot: {error}"
    SNAPSHOT_LOAD_FAILED = "Could not load queue snapshot: {error}"
    SNAPSHOT_CLEAR_FAILED = "Could not clear queue snapshot: {error}"

    # Settings Errors
    INVALID_DATABASE_URL = "Database URL must start with sqlite://"
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Database Lifecycle
    DATABASE_INITIALIZED = "Database initialized at %s"
    DATABASE_CLOSED = "Database manager closed"
    TABLE_MIGRATED = "Migrated table %s: added column %s"

    # Player Lifecycle
    PLAYER_STARTING = "Starting player controller (ipc=%s, spawn=%s)"
    PLAYER_SPAWNING = "Spawning player process %s %s"
    PLAYER_SPAWNED = "Player process started (pid=%s)"
    PLAYER_SPAWN_FAILED = "Failed to spawn player process: %s"
    PLAYER_CONNECT_FAILED = "Failed to connect to player ipc: %s"
    PLAYER_STARTED = "Player controller started"
    PLAYER_ALREADY_STOPPED = "Player controller already stopped"
    PLAYER_STOPPING = "Stopping player controller (state=%s)"
    PLAYER_STOPPED = "Player controller stopped"
    PLAYER_PROCESS_REAPED = "Player process %s exited with %s"
    PLAYER_READER_TIMEOUT = "Reader task did not finish within %.1fs, cancelling"

    # IPC
    IPC_CONNECTED = "Connected to player ipc on attempt %s"
    IPC_RETRYING = "Player ipc connection failed (attempt %s/%s): %r, retrying in %.3fs"
    IPC_EXHAUSTED = "Giving up on player ipc after %s attempts: %r"
    IPC_SEND = "ipc -> %s"
    IPC_DECODE_FAILED = "Could not decode player message: %s"
    IPC_READ_FAILED = "Player connection read failed: %r"
    IPC_STREAM_CLOSED = "Player event stream closed"
    IPC_UNKNOWN_END_REASON = "Unknown end-file reason %r"

    # Player Commands
    PLAYER_PLAY = "Playing %s (%s extra headers)"
    PLAYER_PAUSE = "Setting pause=%s"
    PLAYER_SEEK = "Seeking %+.1fs"
    PLAYER_VOLUME = "Setting volume=%s"
    PLAYER_MUTE = "Setting mute=%s"
    PLAYER_COMMAND_FAILED = "Failed to send %s command: %s"

    # Queue Operations
    QUEUE_ADDED = "Added %s track(s) to queue (length=%s, cursor=%s)"
    QUEUE_ADDED_NEXT = "Queued '%s' to play next"
    QUEUE_REMOVED = "Removed queue index %s (length=%s, cursor=%s)"
    QUEUE_MOVED = "Moved queue index %s to %s (cursor=%s)"
    QUEUE_CLEARED = "Cleared queue"
    QUEUE_SHUFFLE_CHANGED = "Shuffle %s"
    QUEUE_REPEAT_CHANGED = "Repeat mode changed to %s"
    QUEUE_RESTORED = "Restored %s queued tracks (cursor=%s, shuffle=%s, repeat=%s)"
    QUEUE_PROFILE_MISMATCH = "Saved queue belongs to profile %r, not %r; not restoring"
    QUEUE_SAVED = "Saved queue snapshot (%s tracks, profile=%s)"
    QUEUE_SNAPSHOT_CLEARED = "Cleared persisted queue snapshot"
    QUEUE_ROW_SKIPPED = "Skipping corrupted queue row at position %s: %s"
    QUEUE_UNKNOWN_REPEAT = "Unknown persisted repeat mode %r, using off"
    QUEUE_BAD_RANK = "Ignoring invalid original position %r at queue position %s"
    QUEUE_BAD_CURSOR = "Ignoring invalid persisted cursor %r"
    QUEUE_PERSIST_FAILED = "Queue persistence failed, continuing: %s"

    # Playback
    PLAYBACK_TRACK = "Now playing '%s' (queue index %s)"
    PLAYBACK_END_FILE = "end-file event (reason=%s, ended=%s)"
    PLAYBACK_ADVANCING = "Track ended naturally, advancing to '%s'"
    PLAYBACK_QUEUE_EXHAUSTED = "No more tracks to play: %s"
    PLAYBACK_EVENT_ERROR = "Player reported an error: %s"
    PLAYBACK_PROVIDER_FAILED = "Could not resolve stream for '%s': %s"
    PLAYBACK_PROFILE_SWITCHED = "Switched to profile %r (provider=%s)"

    # Application Lifecycle
    APP_STARTING = "Starting tunez in {environment} mode"
    APP_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down..."
    APP_FATAL_ERROR = "Fatal error: %s"
    APP_STOPPED = "tunez stopped"
    APP_NOTHING_TO_PLAY = "Queue is empty, nothing to play"
    APP_PATH_MISSING = "Skipping %s: not a file"
    CONTAINER_SHUTDOWN = "Container shutdown complete"
