"""Immutable value objects for the music bounded context."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import Annotated

from pydantic import PlainSerializer, PlainValidator

from tunez.domain.shared.messages import ErrorMessages


@dataclass(frozen=True)
class TrackId:
    """Provider-scoped track identifier, or a hash of a local path."""

    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError(ErrorMessages.EMPTY_TRACK_ID)

    def __str__(self) -> str:
        return self.value

    def __hash__(self) -> int:
        return hash(self.value)

    @classmethod
    def from_path(cls, path: str) -> TrackId:
        """Derive a stable id from a file path or URL."""
        path_hash = hashlib.md5(path.encode()).hexdigest()[:16]
        return cls(path_hash)


# Serializes as plain string in JSON, stores as TrackId in the model.
TrackIdField = Annotated[
    TrackId,
    PlainValidator(lambda v: TrackId(v) if isinstance(v, str) else v),
    PlainSerializer(lambda v: v.value, return_type=str),
]


class RepeatMode(Enum):
    """What ``next()`` does at the end of the queue.

    The integer values are the persisted representation.
    """

    OFF = 0
    ALL = 1  # wrap to the first track
    ONE = 2  # repeat the current track

    def next_mode(self) -> RepeatMode:
        """Cycle OFF -> ALL -> ONE -> OFF."""
        modes = list(RepeatMode)
        current_index = modes.index(self)
        next_index = (current_index + 1) % len(modes)
        return modes[next_index]

    @classmethod
    def from_persisted(cls, value: object) -> RepeatMode | None:
        """Map a stored value back to a mode, ``None`` if it is not a known one."""
        try:
            return cls(int(value))  # type: ignore[call-overload]
        except (TypeError, ValueError):
            return None


class EndReason(str, Enum):
    """Reason reported by the player's ``end-file`` event."""

    EOF = "eof"
    STOP = "stop"
    QUIT = "quit"
    ERROR = "error"
    REDIRECT = "redirect"

    @property
    def is_natural(self) -> bool:
        """Only a natural end of media may advance the queue."""
        return self is EndReason.EOF


class ControllerState(Enum):
    """Lifecycle of one transport controller session.

    State transitions:
    - IDLE -> CONNECTING (start)
    - CONNECTING -> CONNECTED (connected and observing)
    - CONNECTING -> CLOSED (start failed)
    - Any -> CLOSING -> CLOSED (stop)
    - CLOSED -> CONNECTING (restart)
    """

    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    CLOSING = "closing"
    CLOSED = "closed"

    @property
    def can_start(self) -> bool:
        return self in {ControllerState.IDLE, ControllerState.CLOSED}
