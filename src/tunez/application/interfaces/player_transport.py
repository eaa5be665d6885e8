"""Port interface for the external player transport."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Mapping
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.events import PlayerEvent
    from ...domain.music.value_objects import ControllerState


class PlayerTransport(ABC):
    """Interface for controlling one external player session.

    Commands raise ``PlayerNotConnectedError`` while the session is down.
    """

    @abstractmethod
    async def start(self) -> None:
        """Spawn and connect to the player; raises ``PlayerStartError`` on failure."""
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Idempotent teardown of the connection and the process."""
        ...

    @abstractmethod
    async def play(self, url: str, headers: Mapping[str, str] | None = None) -> None:
        """Replace the current media with ``url``."""
        ...

    @abstractmethod
    async def toggle_pause(self, paused: bool) -> None:
        ...

    @abstractmethod
    async def seek(self, delta_seconds: float) -> None:
        """Seek relative to the current position."""
        ...

    @abstractmethod
    async def set_volume(self, volume: float) -> float:
        """Set the volume clamped to [0, 100] and return the value sent."""
        ...

    @abstractmethod
    async def set_mute(self, muted: bool) -> None:
        ...

    @abstractmethod
    async def next_event(self) -> PlayerEvent | None:
        """Wait for the next event; ``None`` once the stream has closed."""
        ...

    @abstractmethod
    def events(self) -> AsyncIterator[PlayerEvent]:
        """Iterate events until the stream closes."""
        ...

    @property
    @abstractmethod
    def state(self) -> ControllerState:
        ...
