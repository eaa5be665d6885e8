"""One duplex connection to the player's IPC socket."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any

from tunez.domain.shared.exceptions import IpcDecodeError, PlayerNotConnectedError, PlayerStartError
from tunez.domain.shared.messages import ErrorMessages, LogTemplates
from tunez.infrastructure.mpv.models import IpcMessage, decode_line, encode_command

logger = logging.getLogger(__name__)


class IpcSession:
    """Line-oriented JSON session over an asyncio stream pair.

    Writes are serialized so concurrent commands never interleave on the
    wire. Reads are expected from a single reader task.
    """

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._reader = reader
        self._writer = writer
        self._write_lock = asyncio.Lock()
        self._closed = False

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def send(self, *args: Any) -> None:
        """Send one command.

        Raises:
            PlayerNotConnectedError: If the session is closed or the write fails.
        """
        if self._closed:
            raise PlayerNotConnectedError(ErrorMessages.PLAYER_CONNECTION_CLOSED)

        line = encode_command(*args)
        logger.debug(LogTemplates.IPC_SEND, line.rstrip(b"\n").decode("utf-8", errors="replace"))

        async with self._write_lock:
            try:
                self._writer.write(line)
                await self._writer.drain()
            except (ConnectionError, OSError) as e:
                verb = args[0] if args else ""
                raise PlayerNotConnectedError(
                    ErrorMessages.PLAYER_COMMAND_FAILED.format(verb=verb, error=e)
                ) from e

    async def read_message(self) -> IpcMessage | None:
        """Read and decode the next non-blank line.

        Returns:
            The decoded message, or ``None`` once the peer closed the connection.

        Raises:
            IpcDecodeError: For a malformed or oversized line; the session
                stays usable.
            OSError: If the transport itself failed.
        """
        while True:
            try:
                line = await self._reader.readline()
            except ValueError as e:
                # readline() drops the oversized data before raising.
                raise IpcDecodeError(b"", ErrorMessages.IPC_LINE_TOO_LONG) from e

            if not line:
                return None
            if line.strip():
                return decode_line(line)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._writer.close()
        try:
            await self._writer.wait_closed()
        except (ConnectionError, OSError):
            pass


async def open_unix_session(path: str, *, limit: int, timeout: float) -> IpcSession:
    """Dial the player's unix socket once.

    Raises:
        OSError: If the socket is not accepting connections yet (including a
            dial timeout).
        PlayerStartError: If unix sockets are not available on this platform.
    """
    if sys.platform == "win32":
        raise PlayerStartError(ErrorMessages.PLAYER_UNIX_SOCKETS_UNSUPPORTED)

    # TimeoutError is an OSError, so a slow listener is retried like a refused one.
    reader, writer = await asyncio.wait_for(
        asyncio.open_unix_connection(path, limit=limit), timeout=timeout
    )
    return IpcSession(reader, writer)
