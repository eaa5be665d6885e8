"""Playback Application Service - orchestrates the queue, the player and persistence."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...domain.music.entities import PlaybackStatus, Track
from ...domain.shared.exceptions import (
    PersistenceError,
    PlayerNotConnectedError,
    QueueEmptyError,
    QueueError,
    TrackNotFoundError,
)
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...domain.music.events import PlayerEvent
    from ...domain.music.queue import PlaybackQueue
    from ...domain.music.repository import QueueRepository
    from ...domain.music.value_objects import RepeatMode
    from ..interfaces.player_transport import PlayerTransport
    from ..interfaces.stream_provider import StreamProvider

logger = logging.getLogger(__name__)


class PlaybackApplicationService:
    """Single-writer orchestrator for one playback session.

    Every queue mutation is followed by a best-effort snapshot save; a save
    failure is logged and never reverts the in-memory queue. A natural end
    of track advances the queue and plays the next track; any other end
    reason is diagnostics only.
    """

    def __init__(
        self,
        *,
        transport: PlayerTransport,
        queue: PlaybackQueue,
        provider: StreamProvider,
        profile_id: str,
        repository: QueueRepository | None = None,
        initial_volume: float | None = None,
    ) -> None:
        self._transport = transport
        self._queue = queue
        self._provider = provider
        self._profile_id = profile_id
        self._repository = repository
        self._initial_volume = initial_volume

        self.status = PlaybackStatus()
        self._exhausted = False

    @property
    def queue(self) -> PlaybackQueue:
        return self._queue

    @property
    def provider(self) -> StreamProvider:
        return self._provider

    @property
    def profile_id(self) -> str:
        return self._profile_id

    @property
    def exhausted(self) -> bool:
        """True once a natural end found nothing left to play."""
        return self._exhausted

    # ── Session lifecycle ────────────────────────────────────────────

    async def start(self) -> None:
        """Start the player; ``PlayerStartError`` is fatal for the session."""
        await self._transport.start()
        if self._initial_volume is not None:
            await self._transport.set_volume(self._initial_volume)

    async def shutdown(self) -> None:
        await self._transport.stop()

    async def restore_queue(self) -> bool:
        """Seed the queue from the persisted snapshot.

        A snapshot owned by another profile is discarded: its tracks belong
        to a different library and would not resolve.

        Returns:
            True if the queue was restored.
        """
        if self._repository is None:
            return False

        try:
            snapshot = await self._repository.load()
        except PersistenceError as e:
            logger.warning(LogTemplates.QUEUE_PERSIST_FAILED, e)
            return False

        if not snapshot.belongs_to(self._profile_id):
            logger.info(LogTemplates.QUEUE_PROFILE_MISMATCH, snapshot.profile_id, self._profile_id)
            return False
        if snapshot.is_empty:
            return False

        self._queue.restore(snapshot)
        self._provider.register_tracks(snapshot.tracks)
        logger.info(
            LogTemplates.QUEUE_RESTORED,
            len(self._queue),
            self._queue.current_index,
            self._queue.is_shuffled,
            self._queue.repeat_mode.name,
        )
        return True

    async def switch_profile(self, profile_id: str, provider: StreamProvider) -> None:
        """Discard the queue and its snapshot and start over with another library."""
        self._queue.clear()
        if self._repository is not None:
            try:
                await self._repository.clear()
            except PersistenceError as e:
                logger.warning(LogTemplates.QUEUE_PERSIST_FAILED, e)

        self._profile_id = profile_id
        self._provider = provider
        logger.info(LogTemplates.PLAYBACK_PROFILE_SWITCHED, profile_id, provider.provider_id)

    # ── Queue operations ─────────────────────────────────────────────

    async def add(self, *tracks: Track) -> int:
        length = self._queue.add(*tracks)
        await self._persist()
        return length

    async def add_next(self, track: Track) -> int:
        index = self._queue.add_next(track)
        await self._persist()
        return index

    async def remove(self, index: int) -> Track:
        track = self._queue.remove(index)
        await self._persist()
        return track

    async def move(self, from_index: int, to_index: int) -> None:
        self._queue.move(from_index, to_index)
        await self._persist()

    async def select(self, index: int) -> Track:
        """Jump to a row and play it."""
        track = self._queue.set_current(index)
        await self._persist()
        await self._play(track)
        return track

    async def clear(self) -> None:
        self._queue.clear()
        await self._persist()

    async def toggle_shuffle(self) -> bool:
        shuffled = self._queue.toggle_shuffle()
        await self._persist()
        return shuffled

    async def cycle_repeat(self) -> RepeatMode:
        mode = self._queue.cycle_repeat()
        await self._persist()
        return mode

    # ── Playback ─────────────────────────────────────────────────────

    async def play_current(self) -> Track | None:
        """Play the track under the cursor, if any."""
        try:
            track = self._queue.current()
        except QueueEmptyError:
            logger.info(LogTemplates.APP_NOTHING_TO_PLAY)
            return None

        await self._play(track)
        return track

    async def skip_next(self) -> Track:
        """Advance under the repeat policy and play; queue errors propagate."""
        track = self._queue.next()
        await self._persist()
        await self._play(track)
        return track

    async def skip_previous(self) -> Track:
        track = self._queue.prev()
        await self._persist()
        await self._play(track)
        return track

    async def handle_event(self, event: PlayerEvent) -> bool:
        """Apply one player event.

        Returns:
            True if the event ended a track naturally and the next one started.
        """
        self.status.apply(event)

        if event.is_error:
            logger.warning(LogTemplates.PLAYBACK_EVENT_ERROR, event.error)
        if event.end_reason is not None:
            logger.debug(LogTemplates.PLAYBACK_END_FILE, event.end_reason.value, event.ended)

        if not event.ended:
            return False

        try:
            track = self._queue.next()
        except QueueError as e:
            logger.info(LogTemplates.PLAYBACK_QUEUE_EXHAUSTED, e)
            self.status.reset()
            self._exhausted = True
            return False

        logger.info(LogTemplates.PLAYBACK_ADVANCING, track.display_title)
        await self._persist()
        try:
            await self._play(track)
        except TrackNotFoundError:
            return False
        return True

    async def watch_events(self, *, until_exhausted: bool = False) -> None:
        """Consume events one at a time until the player's stream closes.

        With ``until_exhausted`` the loop also ends once the queue has run out.
        """
        while (event := await self._transport.next_event()) is not None:
            try:
                await self.handle_event(event)
            except PlayerNotConnectedError as e:
                logger.error(LogTemplates.PLAYER_COMMAND_FAILED, "loadfile", e)
            if until_exhausted and self._exhausted:
                return

    # ── Internals ────────────────────────────────────────────────────

    async def _play(self, track: Track) -> None:
        try:
            stream = await self._provider.get_stream(track.id)
        except TrackNotFoundError as e:
            logger.error(LogTemplates.PLAYBACK_PROVIDER_FAILED, track.display_title, e)
            raise

        self._exhausted = False
        self.status.reset()
        await self._transport.play(stream.url, stream.headers or None)
        logger.info(LogTemplates.PLAYBACK_TRACK, track.display_title, self._queue.current_index)

    async def _persist(self) -> None:
        if self._repository is None:
            return
        try:
            await self._repository.save(self._queue, self._provider.provider_id, self._profile_id)
        except PersistenceError as e:
            logger.warning(LogTemplates.QUEUE_PERSIST_FAILED, e)
