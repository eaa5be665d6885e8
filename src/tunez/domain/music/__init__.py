"""
Music Bounded Context

Domain logic for tracks, the play queue and player events.
"""

from tunez.domain.music.entities import PlaybackStatus, Track
from tunez.domain.music.events import PlayerEvent
from tunez.domain.music.queue import PlaybackQueue
from tunez.domain.music.repository import QueueRepository, QueueSnapshot
from tunez.domain.music.value_objects import ControllerState, EndReason, RepeatMode, TrackId

__all__ = [
    # Entities
    "Track",
    "PlaybackStatus",
    "PlaybackQueue",
    # Value Objects
    "TrackId",
    "RepeatMode",
    "EndReason",
    "ControllerState",
    # Events
    "PlayerEvent",
    # Repository
    "QueueRepository",
    "QueueSnapshot",
]
