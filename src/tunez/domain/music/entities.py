"""Core domain entities for the music bounded context."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from tunez.domain.music.value_objects import TrackIdField
from tunez.domain.shared.types import (
    DurationMs,
    NonEmptyStr,
    NonNegativeFloat,
    NonNegativeInt,
    PositiveInt,
    TrackTitleStr,
    YearInt,
)

if TYPE_CHECKING:
    from tunez.domain.music.events import PlayerEvent


class Track(BaseModel):
    """Immutable value object representing a playable track."""

    model_config = ConfigDict(frozen=True, strict=True)

    id: TrackIdField
    title: TrackTitleStr

    # Library metadata (provider-supplied)
    artist: NonEmptyStr | None = None
    artist_id: NonEmptyStr | None = None
    album: NonEmptyStr | None = None
    album_id: NonEmptyStr | None = None
    year: YearInt | None = None
    duration_ms: DurationMs | None = None
    track_no: PositiveInt | None = None
    disc_no: PositiveInt | None = None

    # Stream hints
    codec: NonEmptyStr | None = None
    bitrate_kbps: NonNegativeInt | None = None
    artwork_ref: NonEmptyStr | None = None
    stream_url: NonEmptyStr | None = None

    @property
    def display_title(self) -> str:
        """Get display title with artist if available."""
        if self.artist:
            return f"{self.artist} - {self.title}"
        return self.title


class PlaybackStatus(BaseModel):
    """Running view of the player's reported properties.

    Fields only change when an event reports them; an absent field in an
    event leaves the previous value alone.
    """

    model_config = ConfigDict(validate_assignment=True)

    time_pos: float | None = None
    duration: NonNegativeFloat | None = None
    paused: bool = False
    volume: NonNegativeFloat | None = None
    muted: bool = False

    def apply(self, event: PlayerEvent) -> list[str]:
        """Copy every reported field of ``event`` onto this status.

        Returns:
            Names of the fields that were updated.
        """
        updated = []
        for name in event.changed_fields:
            if name in PlaybackStatus.model_fields:
                setattr(self, name, getattr(event, name))
                updated.append(name)
        return updated

    def reset(self) -> None:
        """Forget the per-track properties after a track ends."""
        self.time_pos = None
        self.duration = None
