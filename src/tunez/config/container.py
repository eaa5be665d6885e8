"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for the player, the queue, persistence and the
playback service. Components are created on-demand and cached for reuse.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ..application.interfaces.player_transport import PlayerTransport
    from ..application.services.playback_service import PlaybackApplicationService
    from ..domain.music.queue import PlaybackQueue
    from ..domain.music.repository import QueueRepository
    from ..infrastructure.persistence.database import Database
    from ..infrastructure.providers.local_files import LocalFileProvider
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    Components are lazily initialized when first accessed.
    """

    settings: Settings

    # Persistence layer
    _database: Database | None = None
    _queue_repository: QueueRepository | None = None

    # Infrastructure adapters
    _player: PlayerTransport | None = None
    _provider: LocalFileProvider | None = None

    # Domain
    _queue: PlaybackQueue | None = None

    # Application services
    _playback_service: PlaybackApplicationService | None = None

    # === Database ===

    @property
    def database(self) -> Database:
        """Get the database connection manager."""
        if self._database is None:
            from ..infrastructure.persistence.database import Database

            self._database = Database(self.settings.database.url, settings=self.settings.database)
        return self._database

    # === Repositories ===

    @property
    def queue_repository(self) -> QueueRepository | None:
        """The persisted-queue repository, or None when persistence is disabled."""
        if not self.settings.queue.persist:
            return None
        if self._queue_repository is None:
            from ..infrastructure.persistence.repositories.queue_repository import (
                SQLiteQueueRepository,
            )

            self._queue_repository = SQLiteQueueRepository(self.database)
        return self._queue_repository

    # === Infrastructure ===

    @property
    def player(self) -> PlayerTransport:
        if self._player is None:
            from ..infrastructure.mpv.controller import MpvController

            self._player = MpvController(self.settings.player, self.settings.reconnect)
        return self._player

    @property
    def provider(self) -> LocalFileProvider:
        if self._provider is None:
            from ..infrastructure.providers.local_files import LocalFileProvider

            self._provider = LocalFileProvider()
        return self._provider

    # === Domain ===

    @property
    def queue(self) -> PlaybackQueue:
        if self._queue is None:
            from ..domain.music.queue import PlaybackQueue

            self._queue = PlaybackQueue(max_size=self.settings.queue.max_size)
        return self._queue

    # === Application Services ===

    @property
    def playback_service(self) -> PlaybackApplicationService:
        if self._playback_service is None:
            from ..application.services.playback_service import PlaybackApplicationService

            self._playback_service = PlaybackApplicationService(
                transport=self.player,
                queue=self.queue,
                provider=self.provider,
                profile_id=self.settings.active_profile,
                repository=self.queue_repository,
                initial_volume=self.settings.player.initial_volume,
            )
        return self._playback_service

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Initialize all async resources."""
        if self.settings.queue.persist:
            await self.database.initialize()

    async def shutdown(self) -> None:
        """Shutdown and cleanup all resources."""
        if self._player is not None:
            await self._player.stop()

        if self._database is not None:
            await self._database.close()

        logger.info(LogTemplates.CONTAINER_SHUTDOWN)


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
