import asyncio
import json
import shutil
import tempfile
from pathlib import Path

import pytest
import pytest_asyncio

# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def in_memory_database():
    """Create an in-memory SQLite database for testing."""
    from tunez.infrastructure.persistence.database import Database

    db = Database(":memory:")
    await db.initialize()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def queue_repository(in_memory_database):
    """Create a queue repository with in-memory database."""
    from tunez.infrastructure.persistence.repositories.queue_repository import (
        SQLiteQueueRepository,
    )

    return SQLiteQueueRepository(in_memory_database)


# ============================================================================
# Domain Entity Fixtures
# ============================================================================


def make_track(n: int, **overrides):
    """Build a distinct track numbered ``n``."""
    from tunez.domain.music.entities import Track
    from tunez.domain.music.value_objects import TrackId

    fields = {
        "id": TrackId(f"track-{n}"),
        "title": f"Track {n}",
        "stream_url": f"https://media.example/{n}.flac",
    }
    fields.update(overrides)
    return Track(**fields)


@pytest.fixture
def sample_track():
    """Create a sample track for testing."""
    return make_track(
        1,
        artist="Test Artist",
        album="Test Album",
        year=2021,
        duration_ms=185_000,
        track_no=3,
        codec="flac",
    )


@pytest.fixture
def tracks():
    """Five distinct tracks."""
    return [make_track(n) for n in range(5)]


# ============================================================================
# IPC Fixtures
# ============================================================================


@pytest.fixture
def socket_dir():
    """Short temporary directory for unix sockets (path length is limited)."""
    path = Path(tempfile.mkdtemp(prefix="tz", dir="/tmp"))
    yield path
    shutil.rmtree(path, ignore_errors=True)


class FakeMpv:
    """Minimal stand-in for mpv's JSON IPC server."""

    def __init__(self, path: str):
        self.path = path
        self.commands: asyncio.Queue[list] = asyncio.Queue()
        self.writers: list[asyncio.StreamWriter] = []
        self._server: asyncio.AbstractServer | None = None

    async def start(self) -> None:
        self._server = await asyncio.start_unix_server(self._handle, path=self.path)

    async def _handle(self, reader, writer) -> None:
        self.writers.append(writer)
        try:
            while line := await reader.readline():
                await self.commands.put(json.loads(line)["command"])
        except ConnectionError:
            pass

    async def command(self) -> list:
        return await asyncio.wait_for(self.commands.get(), timeout=2)

    async def emit(self, *payloads) -> None:
        writer = self.writers[-1]
        for payload in payloads:
            data = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
            writer.write(data + b"\n")
        await writer.drain()

    async def hang_up(self) -> None:
        writer = self.writers[-1]
        writer.close()
        await writer.wait_closed()

    async def close(self) -> None:
        for writer in self.writers:
            writer.close()
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()


@pytest_asyncio.fixture
async def fake_mpv(socket_dir):
    """A fake player listening on a unix socket."""
    server = FakeMpv(str(socket_dir / "mpv.sock"))
    await server.start()
    yield server
    await server.close()
