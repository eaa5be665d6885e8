"""Transport controller for one mpv session.

Owns the mpv subprocess and the IPC session, exposes playback commands and
a bounded stream of normalized ``PlayerEvent``s fed by a single reader task.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
from typing import TYPE_CHECKING

from tunez.application.interfaces.player_transport import PlayerTransport
from tunez.domain.music.events import PlayerEvent
from tunez.domain.music.value_objects import ControllerState
from tunez.domain.shared.constants import MpvCommands, MpvProperties, PlayerConstants
from tunez.domain.shared.exceptions import (
    InvalidOperationError,
    IpcDecodeError,
    PlayerNotConnectedError,
    PlayerStartError,
)
from tunez.domain.shared.messages import ErrorMessages, LogTemplates
from tunez.infrastructure.mpv.ipc_session import IpcSession, open_unix_session
from tunez.infrastructure.mpv.models import to_player_event
from tunez.infrastructure.mpv.reconnector import BackoffPolicy, Reconnector

if TYPE_CHECKING:
    from ...config.settings import PlayerSettings, ReconnectSettings

logger = logging.getLogger(__name__)


class MpvController(PlayerTransport):
    """Controls one mpv process over its JSON IPC socket.

    ``start()`` and ``stop()`` may be called repeatedly; every completed
    session gets a fresh event stream and completion signal on the next
    ``start()``.
    """

    def __init__(
        self,
        settings: PlayerSettings | None = None,
        reconnect: ReconnectSettings | None = None,
        *,
        dial: Callable[[], Awaitable[IpcSession]] | None = None,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            settings: Player settings from application config.
            reconnect: Backoff schedule for connecting to the IPC socket.
            dial: Opens one IPC session; defaults to the configured unix socket.
            sleep: Backoff sleep, replaceable in tests.
            rng: Jitter source, replaceable in tests.
        """
        if settings is None or reconnect is None:
            from ...config.settings import PlayerSettings, ReconnectSettings

            settings = settings or PlayerSettings()
            reconnect = reconnect or ReconnectSettings()

        self._settings = settings
        self._policy = BackoffPolicy(
            base_delay=reconnect.base_delay_s,
            max_delay=reconnect.max_delay_s,
            max_attempts=reconnect.max_attempts,
            jitter_ratio=reconnect.jitter_ratio,
        )
        self._dial = dial or self._dial_unix
        self._sleep = sleep
        self._rng = rng or random.Random()

        self._lock = asyncio.Lock()
        self._state = ControllerState.IDLE
        self._session: IpcSession | None = None
        self._process: asyncio.subprocess.Process | None = None
        self._reader_task: asyncio.Task[None] | None = None

        self._events: asyncio.Queue[PlayerEvent | None] = asyncio.Queue(
            maxsize=settings.event_buffer_size
        )
        self._stream_closed = False
        self._done = asyncio.Event()

    # ── State ────────────────────────────────────────────────────────

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return (
            self._state is ControllerState.CONNECTED
            and self._session is not None
            and not self._session.is_closed
        )

    @property
    def ipc_path(self) -> str:
        return self._settings.ipc_path

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process is not None else None

    # ── Lifecycle ────────────────────────────────────────────────────

    async def start(self) -> None:
        """Spawn mpv, connect, register observers and start the reader task.

        Raises:
            InvalidOperationError: If the controller is already running.
            PlayerStartError: If spawning or connecting failed, or ``stop()``
                ran while starting. Anything acquired so far is released.
        """
        async with self._lock:
            if not self._state.can_start:
                raise InvalidOperationError("start", self._state.value)
            if self._done.is_set():
                self._reset_stream()
            self._state = ControllerState.CONNECTING

        logger.info(LogTemplates.PLAYER_STARTING, self.ipc_path, not self._settings.disable_process)

        try:
            if not self._settings.disable_process:
                await self._spawn()
                self._ensure_still_starting()

            reconnector = Reconnector(
                self._dial_while_starting, self._policy, sleep=self._sleep, rng=self._rng
            )
            session = await reconnector.connect()

            async with self._lock:
                if self._state is not ControllerState.CONNECTING:
                    await session.close()
                    raise PlayerStartError(ErrorMessages.PLAYER_STOPPED_DURING_START)
                self._session = session

            await self._observe_properties(session)

            async with self._lock:
                self._ensure_still_starting()
                self._reader_task = asyncio.create_task(
                    self._read_loop(session), name="mpv-ipc-reader"
                )
                self._state = ControllerState.CONNECTED
        except BaseException as e:
            if isinstance(e, PlayerStartError):
                logger.error(LogTemplates.PLAYER_CONNECT_FAILED, e)
            async with self._lock:
                await self._teardown(send_quit=False)
                self._state = ControllerState.CLOSED
            raise

        logger.info(LogTemplates.PLAYER_STARTED)

    async def stop(self) -> None:
        """Tear the session down; safe to call repeatedly and concurrently.

        Sends a best-effort ``quit``, closes the connection, kills and reaps
        the mpv process, waits for the reader task and closes the event stream.
        """
        async with self._lock:
            if self._state is ControllerState.CLOSED and self._done.is_set():
                logger.debug(LogTemplates.PLAYER_ALREADY_STOPPED)
                return

            logger.info(LogTemplates.PLAYER_STOPPING, self._state.value)
            self._state = ControllerState.CLOSING
            await self._teardown(send_quit=True)
            self._state = ControllerState.CLOSED

        logger.info(LogTemplates.PLAYER_STOPPED)

    async def wait_closed(self) -> None:
        """Wait until the current session has been torn down."""
        await self._done.wait()

    # ── Commands ─────────────────────────────────────────────────────

    async def play(self, url: str, headers: Mapping[str, str] | None = None) -> None:
        """Replace the current media with ``url``, interrupting playback."""
        logger.debug(LogTemplates.PLAYER_PLAY, url, len(headers or {}))
        if headers:
            fields = [f"{key}: {value}" for key, value in headers.items()]
            await self._send(MpvCommands.SET_PROPERTY, MpvProperties.HTTP_HEADER_FIELDS, fields)
        await self._send(MpvCommands.LOADFILE, url, MpvCommands.LOADFILE_REPLACE)

    async def toggle_pause(self, paused: bool) -> None:
        logger.debug(LogTemplates.PLAYER_PAUSE, paused)
        await self._send(MpvCommands.SET_PROPERTY, MpvProperties.PAUSE, paused)

    async def seek(self, delta_seconds: float) -> None:
        logger.debug(LogTemplates.PLAYER_SEEK, delta_seconds)
        await self._send(MpvCommands.SEEK, delta_seconds, MpvCommands.SEEK_RELATIVE)

    async def set_volume(self, volume: float) -> float:
        clamped = min(max(float(volume), PlayerConstants.MIN_VOLUME), PlayerConstants.MAX_VOLUME)
        logger.debug(LogTemplates.PLAYER_VOLUME, clamped)
        await self._send(MpvCommands.SET_PROPERTY, MpvProperties.VOLUME, clamped)
        return clamped

    async def set_mute(self, muted: bool) -> None:
        logger.debug(LogTemplates.PLAYER_MUTE, muted)
        await self._send(MpvCommands.SET_PROPERTY, MpvProperties.MUTE, muted)

    # ── Events ───────────────────────────────────────────────────────

    async def next_event(self) -> PlayerEvent | None:
        """Wait for the next event; ``None`` once the stream has closed."""
        events = self._events
        if self._stream_closed and events.empty():
            return None
        return await events.get()

    async def events(self) -> AsyncIterator[PlayerEvent]:
        while (event := await self.next_event()) is not None:
            yield event

    # ── Internals ────────────────────────────────────────────────────

    async def _dial_while_starting(self) -> IpcSession:
        # A concurrent stop() aborts the backoff schedule instead of exhausting it.
        self._ensure_still_starting()
        return await self._dial()

    async def _dial_unix(self) -> IpcSession:
        return await open_unix_session(
            self.ipc_path,
            limit=self._settings.read_limit_bytes,
            timeout=self._settings.dial_timeout_s,
        )

    async def _spawn(self) -> None:
        mpv_path = self._settings.mpv_path
        args = [
            *PlayerConstants.BASE_ARGS,
            f"{PlayerConstants.IPC_ARG_PREFIX}{self.ipc_path}",
            *self._settings.extra_args,
        ]
        logger.debug(LogTemplates.PLAYER_SPAWNING, mpv_path, " ".join(args))

        try:
            self._process = await asyncio.create_subprocess_exec(
                mpv_path,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            logger.error(LogTemplates.PLAYER_SPAWN_FAILED, e)
            raise PlayerStartError(
                ErrorMessages.PLAYER_SPAWN_FAILED.format(path=mpv_path, error=e)
            ) from e

        logger.debug(LogTemplates.PLAYER_SPAWNED, self._process.pid)

    async def _observe_properties(self, session: IpcSession) -> None:
        try:
            for observe_id, name in enumerate(MpvProperties.OBSERVED, start=1):
                await session.send(MpvCommands.OBSERVE_PROPERTY, observe_id, name)
        except PlayerNotConnectedError as e:
            raise PlayerStartError(ErrorMessages.PLAYER_OBSERVE_FAILED.format(error=e)) from e

    def _ensure_still_starting(self) -> None:
        if self._state is not ControllerState.CONNECTING:
            raise PlayerStartError(ErrorMessages.PLAYER_STOPPED_DURING_START)

    async def _send(self, *args: object) -> None:
        session = self._session
        if self._state is not ControllerState.CONNECTED or session is None:
            raise PlayerNotConnectedError()
        try:
            await session.send(*args)
        except PlayerNotConnectedError as e:
            logger.error(LogTemplates.PLAYER_COMMAND_FAILED, args[0], e)
            raise

    async def _read_loop(self, session: IpcSession) -> None:
        try:
            while True:
                try:
                    message = await session.read_message()
                except IpcDecodeError as e:
                    logger.warning(LogTemplates.IPC_DECODE_FAILED, e)
                    await self._events.put(PlayerEvent.failure(e.message))
                    continue
                except OSError as e:
                    logger.error(LogTemplates.IPC_READ_FAILED, e)
                    await self._events.put(PlayerEvent.failure(f"read: {e}"))
                    break

                if message is None:
                    break
                event = to_player_event(message)
                if event is not None:
                    await self._events.put(event)
        finally:
            self._close_stream()

    def _close_stream(self) -> None:
        if self._stream_closed:
            return
        self._stream_closed = True
        try:
            self._events.put_nowait(None)
        except asyncio.QueueFull:
            # Consumers see the closed flag once the backlog is drained.
            pass
        logger.debug(LogTemplates.IPC_STREAM_CLOSED)

    def _reset_stream(self) -> None:
        self._events = asyncio.Queue(maxsize=self._settings.event_buffer_size)
        self._stream_closed = False
        self._done = asyncio.Event()

    async def _teardown(self, *, send_quit: bool) -> None:
        """Release the session, the process and the reader task. Idempotent."""
        session, self._session = self._session, None
        if session is not None:
            if send_quit:
                try:
                    await session.send(MpvCommands.QUIT)
                except PlayerNotConnectedError:
                    pass
            await session.close()

        await self._reap_process()
        await self._finish_reader()
        self._close_stream()
        self._done.set()

    async def _reap_process(self) -> None:
        process, self._process = self._process, None
        if process is None:
            return
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass
        returncode = await process.wait()
        logger.debug(LogTemplates.PLAYER_PROCESS_REAPED, process.pid, returncode)

    async def _finish_reader(self) -> None:
        task, self._reader_task = self._reader_task, None
        if task is None:
            return

        timeout = self._settings.stop_timeout_s
        done, _ = await asyncio.wait({task}, timeout=timeout)
        if not done:
            logger.warning(LogTemplates.PLAYER_READER_TIMEOUT, timeout)
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        elif not task.cancelled() and task.exception() is not None:
            logger.error(LogTemplates.IPC_READ_FAILED, task.exception())
