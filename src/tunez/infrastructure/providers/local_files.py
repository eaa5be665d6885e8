"""Stream provider for files on the local filesystem."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from tunez.application.interfaces.stream_provider import StreamInfo, StreamProvider
from tunez.domain.music.entities import Track
from tunez.domain.music.value_objects import TrackId
from tunez.domain.shared.exceptions import TrackNotFoundError

logger = logging.getLogger(__name__)


class LocalFileProvider(StreamProvider):
    """Plays files by path; mpv reads them directly, so no headers are needed."""

    def __init__(self, provider_id: str = "filesystem") -> None:
        self._provider_id = provider_id
        self._paths: dict[TrackId, Path] = {}

    @property
    def provider_id(self) -> str:
        return self._provider_id

    def track_for(self, path: str | Path) -> Track:
        """Build a ``Track`` for ``path`` and remember where it lives."""
        resolved = Path(path).expanduser().resolve()
        track_id = TrackId.from_path(str(resolved))
        self._paths[track_id] = resolved
        return Track(
            id=track_id,
            title=resolved.stem or resolved.name,
            codec=resolved.suffix.lstrip(".").lower() or None,
            stream_url=str(resolved),
        )

    def tracks_for(self, paths: Iterable[str | Path]) -> list[Track]:
        return [self.track_for(path) for path in paths]

    def register_tracks(self, tracks: Iterable[Track]) -> None:
        for track in tracks:
            if track.stream_url:
                self._paths[track.id] = Path(track.stream_url)

    async def get_stream(self, track_id: TrackId) -> StreamInfo:
        path = self._paths.get(track_id)
        if path is None:
            raise TrackNotFoundError(str(track_id))
        return StreamInfo(url=str(path))
