"""Port interface for resolving playable streams from a music library."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from tunez.domain.shared.types import NonEmptyStr

if TYPE_CHECKING:
    from ...domain.music.entities import Track
    from ...domain.music.value_objects import TrackId


class StreamInfo(BaseModel):
    """Where the player should fetch a track from."""

    model_config = ConfigDict(frozen=True)

    url: NonEmptyStr
    headers: dict[str, str] = Field(default_factory=dict)


class StreamProvider(ABC):
    """Interface for a library backend that can hand out stream URLs."""

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Stable identifier persisted alongside queued tracks."""
        ...

    @abstractmethod
    async def get_stream(self, track_id: TrackId) -> StreamInfo:
        """Resolve a track to a stream.

        Raises:
            TrackNotFoundError: If the provider does not know the track.
        """
        ...

    def register_tracks(self, tracks: Iterable[Track]) -> None:
        """Called with tracks restored from persistence before any lookup."""
