"""Base exception classes for domain-level and engine errors."""

from __future__ import annotations

from collections.abc import Sequence


class DomainError(Exception):
    """Base exception for all tunez errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class EntityNotFoundError(DomainError):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, identifier: str | int, message: str | None = None) -> None:
        msg = message or f"{entity_type} with id '{identifier}' not found"
        super().__init__(msg, code="ENTITY_NOT_FOUND")
        self.entity_type = entity_type
        self.identifier = identifier


class TrackNotFoundError(EntityNotFoundError):
    """Raised by a provider asked for a stream it does not know."""

    def __init__(self, track_id: str) -> None:
        super().__init__("Track", track_id)


class BusinessRuleViolationError(DomainError):
    """Raised when a business rule is violated."""

    def __init__(self, rule: str, message: str | None = None) -> None:
        msg = message or f"Business rule violated: {rule}"
        super().__init__(msg, code="BUSINESS_RULE_VIOLATION")
        self.rule = rule


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state


# ── Queue boundary errors ───────────────────────────────────────────


class QueueError(DomainError):
    """Base class for play-queue boundary conditions."""


class QueueEmptyError(QueueError):
    """Raised when an operation needs at least one track."""

    def __init__(self, message: str = "Queue is empty") -> None:
        super().__init__(message, code="QUEUE_EMPTY")


class EndOfQueueError(QueueError):
    """Raised when advancing past either end of the queue with repeat off."""

    def __init__(self, direction: str) -> None:
        super().__init__(f"No {direction} track in queue", code="END_OF_QUEUE")
        self.direction = direction


class QueueIndexError(QueueError):
    """Raised for an index outside the queue."""

    def __init__(self, index: int, length: int) -> None:
        super().__init__(
            f"Queue index {index} out of range (length {length})", code="QUEUE_INDEX_OUT_OF_RANGE"
        )
        self.index = index
        self.length = length


class QueueFullError(BusinessRuleViolationError):
    """Raised when adding tracks would exceed the configured queue bound."""

    def __init__(self, max_size: int) -> None:
        super().__init__(rule="MAX_QUEUE_SIZE", message=f"Queue is full (max {max_size} tracks)")
        self.max_size = max_size


# ── Player / IPC errors ─────────────────────────────────────────────


class PlayerError(DomainError):
    """Base class for errors talking to the external player."""


class PlayerStartError(PlayerError):
    """Startup-fatal: the player could not be spawned or reached."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="PLAYER_START_FAILED")


class ReconnectExhaustedError(PlayerStartError):
    """Raised when every dial attempt of the backoff schedule failed."""

    def __init__(self, attempts: int, errors: Sequence[BaseException]) -> None:
        last = errors[-1] if errors else None
        super().__init__(f"Could not connect to player after {attempts} attempts: {last!r}")
        self.code = "RECONNECT_EXHAUSTED"
        self.attempts = attempts
        self.errors = list(errors)


class PlayerNotConnectedError(PlayerError):
    """Command-rejected: the IPC session is not established."""

    def __init__(self, message: str = "Player is not connected") -> None:
        super().__init__(message, code="PLAYER_NOT_CONNECTED")


class IpcDecodeError(PlayerError):
    """A protocol line could not be decoded."""

    def __init__(self, line: bytes, reason: str) -> None:
        preview = line[:120].decode("utf-8", errors="replace")
        super().__init__(f"decode: {reason} (line: {preview!r})", code="IPC_DECODE_ERROR")
        self.line = line


# ── Persistence errors ──────────────────────────────────────────────


class PersistenceError(DomainError):
    """Raised when the durable queue snapshot cannot be read or written."""

    def __init__(self, operation: str, message: str | None = None) -> None:
        msg = message or f"Queue persistence failed during {operation}"
        super().__init__(msg, code="PERSISTENCE_ERROR")
        self.operation = operation
