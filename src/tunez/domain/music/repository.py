"""
Music Domain Repository Interfaces

Abstract base classes defining the contracts for data persistence.
Implementations live in the infrastructure layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from tunez.domain.music.entities import Track
from tunez.domain.music.value_objects import RepeatMode
from tunez.domain.shared.types import NonNegativeInt, QueueIndexInt

if TYPE_CHECKING:
    from tunez.domain.music.queue import PlaybackQueue


class QueueSnapshot(BaseModel):
    """Durable copy of a play queue, as returned by ``QueueRepository.load``."""

    model_config = ConfigDict(frozen=True)

    tracks: list[Track] = Field(default_factory=list)
    current_index: QueueIndexInt = -1
    shuffled: bool = False
    repeat_mode: RepeatMode = RepeatMode.OFF
    profile_id: str = ""
    provider_id: str = ""

    # Sequential position of each track while shuffled, aligned with ``tracks``.
    original_ranks: list[NonNegativeInt] | None = None

    @property
    def is_empty(self) -> bool:
        return not self.tracks

    def belongs_to(self, profile_id: str) -> bool:
        """Whether this snapshot may be restored for ``profile_id``."""
        return self.profile_id == profile_id


class QueueRepository(ABC):
    """Abstract repository for the persisted play queue.

    There is exactly one persisted queue. Implementations must make ``save``
    all-or-nothing.
    """

    @abstractmethod
    async def save(self, queue: PlaybackQueue, provider_id: str, profile_id: str) -> None:
        """Replace the persisted queue with ``queue``.

        Args:
            queue: The in-memory queue to snapshot.
            provider_id: Provider that resolved the queued tracks.
            profile_id: Profile that owns the queue.

        Raises:
            PersistenceError: If the snapshot could not be written; the
                previous snapshot is left intact.
        """
        ...

    @abstractmethod
    async def load(self) -> QueueSnapshot:
        """Read the persisted queue.

        Returns:
            The snapshot, with unreadable rows skipped and the cursor
            clamped into range.

        Raises:
            PersistenceError: If the store could not be read.
        """
        ...

    @abstractmethod
    async def clear(self) -> None:
        """Drop all persisted tracks and reset the queue state to defaults.

        Raises:
            PersistenceError: If the store could not be written.
        """
        ...
