"""
Unit Tests for the mpv Transport Controller

Tests for:
- Start: observer registration, state transitions, restart
- Commands: the exact protocol lines sent for each operation
- Event stream: ordering, malformed input, closing on disconnect
- Stop: idempotency, concurrent calls, process reaping
- Startup failures: spawn errors, exhausted retries, stop during start

A fake player listens on a unix socket in a temporary directory, so no real
mpv binary is needed.
"""

from __future__ import annotations

import asyncio
import random

import pytest
import pytest_asyncio

from tunez.config.settings import PlayerSettings, ReconnectSettings
from tunez.domain.music.value_objects import ControllerState, EndReason
from tunez.domain.shared.exceptions import (
    InvalidOperationError,
    PlayerNotConnectedError,
    PlayerStartError,
    ReconnectExhaustedError,
)
from tunez.infrastructure.mpv.controller import MpvController

FAST_RECONNECT = ReconnectSettings(base_delay_s=0.01, max_delay_s=0.02, max_attempts=5)


def _settings(ipc_path: str, **overrides) -> PlayerSettings:
    fields = {"ipc_path": ipc_path, "disable_process": True, "stop_timeout_s": 0.5}
    fields.update(overrides)
    return PlayerSettings(**fields)


async def _next_event(controller: MpvController):
    return await asyncio.wait_for(controller.next_event(), timeout=2)


@pytest_asyncio.fixture
async def controller(fake_mpv):
    player = MpvController(_settings(fake_mpv.path), FAST_RECONNECT)
    yield player
    await player.stop()


@pytest_asyncio.fixture
async def connected(controller, fake_mpv):
    """A started controller whose observer registrations were already consumed."""
    await controller.start()
    for _ in range(5):
        await fake_mpv.command()
    return controller


# =============================================================================
# Start
# =============================================================================


class TestStart:
    """Tests for bringing a session up."""

    @pytest.mark.asyncio
    async def test_start_registers_observers(self, controller, fake_mpv):
        """Start should observe each playback property with ids 1..5."""
        await controller.start()

        commands = [await fake_mpv.command() for _ in range(5)]

        assert commands == [
            ["observe_property", 1, "time-pos"],
            ["observe_property", 2, "duration"],
            ["observe_property", 3, "pause"],
            ["observe_property", 4, "volume"],
            ["observe_property", 5, "mute"],
        ]
        assert controller.state is ControllerState.CONNECTED
        assert controller.is_connected
        assert controller.pid is None

    @pytest.mark.asyncio
    async def test_start_twice_is_rejected(self, connected):
        with pytest.raises(InvalidOperationError):
            await connected.start()

        assert connected.state is ControllerState.CONNECTED

    @pytest.mark.asyncio
    async def test_restart_after_stop(self, connected, fake_mpv):
        """A stopped controller should start again with a fresh event stream."""
        await connected.stop()
        assert await fake_mpv.command() == ["quit"]
        assert await connected.next_event() is None

        await connected.start()
        commands = [await fake_mpv.command() for _ in range(5)]
        await fake_mpv.emit({"event": "property-change", "name": "pause", "data": True})

        assert all(command[0] == "observe_property" for command in commands)
        assert (await _next_event(connected)).paused is True


# =============================================================================
# Commands
# =============================================================================


class TestCommands:
    """Tests for the protocol lines sent by each command."""

    @pytest.mark.asyncio
    async def test_play_without_headers(self, connected, fake_mpv):
        await connected.play("/music/song.flac")

        assert await fake_mpv.command() == ["loadfile", "/music/song.flac", "replace"]

    @pytest.mark.asyncio
    async def test_play_with_headers(self, connected, fake_mpv):
        """Headers should be set before the file is loaded."""
        await connected.play(
            "https://media.example/a.mp3",
            {"Authorization": "Bearer t0k", "X-Client": "tunez"},
        )

        assert await fake_mpv.command() == [
            "set_property",
            "http-header-fields",
            ["Authorization: Bearer t0k", "X-Client: tunez"],
        ]
        assert await fake_mpv.command() == ["loadfile", "https://media.example/a.mp3", "replace"]

    @pytest.mark.asyncio
    async def test_pause_seek_mute(self, connected, fake_mpv):
        await connected.toggle_pause(True)
        await connected.seek(-5)
        await connected.set_mute(False)

        assert await fake_mpv.command() == ["set_property", "pause", True]
        assert await fake_mpv.command() == ["seek", -5, "relative"]
        assert await fake_mpv.command() == ["set_property", "mute", False]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("requested", "expected"), [(150, 100.0), (-10, 0.0), (42.5, 42.5)])
    async def test_volume_is_clamped(self, connected, fake_mpv, requested, expected):
        sent = await connected.set_volume(requested)

        assert sent == expected
        assert await fake_mpv.command() == ["set_property", "volume", expected]

    @pytest.mark.asyncio
    async def test_commands_require_connection(self, controller):
        """Commands before start should be rejected."""
        with pytest.raises(PlayerNotConnectedError):
            await controller.play("/music/song.flac")
        with pytest.raises(PlayerNotConnectedError):
            await controller.set_volume(50)

    @pytest.mark.asyncio
    async def test_commands_after_stop_are_rejected(self, connected):
        await connected.stop()

        with pytest.raises(PlayerNotConnectedError):
            await connected.toggle_pause(False)


# =============================================================================
# Event Stream
# =============================================================================


class TestEvents:
    """Tests for the normalized event stream."""

    @pytest.mark.asyncio
    async def test_events_arrive_in_order(self, connected, fake_mpv):
        await fake_mpv.emit(
            {"event": "property-change", "id": 2, "name": "duration", "data": 200.0},
            {"event": "property-change", "id": 1, "name": "time-pos", "data": 1.5},
            {"request_id": 0, "error": "success"},
            {"event": "end-file", "reason": "eof"},
        )

        first = await _next_event(connected)
        second = await _next_event(connected)
        third = await _next_event(connected)

        assert first.duration == 200.0
        assert second.time_pos == 1.5
        assert third.ended is True
        assert third.end_reason is EndReason.EOF

    @pytest.mark.asyncio
    async def test_malformed_line_becomes_error_event(self, connected, fake_mpv):
        """A bad line should surface as an error event without stopping the reader."""
        await fake_mpv.emit(b"{oops", {"event": "end-file", "reason": "stop"})

        error = await _next_event(connected)
        stopped = await _next_event(connected)

        assert error.is_error
        assert error.error.startswith("decode:")
        assert stopped.ended is False
        assert stopped.end_reason is EndReason.STOP
        assert connected.is_connected

    @pytest.mark.asyncio
    async def test_disconnect_closes_stream(self, connected, fake_mpv):
        """When the player hangs up, buffered events drain and then the stream ends."""
        await fake_mpv.emit({"event": "property-change", "name": "mute", "data": True})
        await fake_mpv.hang_up()

        event = await _next_event(connected)
        end = await _next_event(connected)

        assert event.muted is True
        assert end is None
        assert await connected.next_event() is None

    @pytest.mark.asyncio
    async def test_events_iterator(self, connected, fake_mpv):
        await fake_mpv.emit(
            {"event": "property-change", "name": "volume", "data": 80},
            {"event": "property-change", "name": "pause", "data": False},
        )
        await fake_mpv.hang_up()

        collected = [event async for event in connected.events()]

        assert [e.changed_fields for e in collected] == [["volume"], ["paused"]]

    @pytest.mark.asyncio
    async def test_stop_with_full_buffer(self, fake_mpv):
        """Stop should finish even when nobody drains a full event buffer."""
        player = MpvController(
            _settings(fake_mpv.path, event_buffer_size=1, stop_timeout_s=0.2), FAST_RECONNECT
        )
        await player.start()
        for _ in range(5):
            await fake_mpv.command()
        await fake_mpv.emit(
            *({"event": "property-change", "name": "time-pos", "data": float(n)} for n in range(5))
        )
        await asyncio.sleep(0.1)

        await asyncio.wait_for(player.stop(), timeout=2)

        assert (await _next_event(player)).time_pos == 0.0
        assert await player.next_event() is None


# =============================================================================
# Stop
# =============================================================================


class TestStop:
    """Tests for tearing a session down."""

    @pytest.mark.asyncio
    async def test_stop_sends_quit(self, connected, fake_mpv):
        await connected.stop()

        assert await fake_mpv.command() == ["quit"]
        assert connected.state is ControllerState.CLOSED
        assert not connected.is_connected

    @pytest.mark.asyncio
    async def test_concurrent_stops(self, connected, fake_mpv):
        """Concurrent stops should tear down once and all return."""
        await asyncio.gather(connected.stop(), connected.stop(), connected.stop())
        await connected.stop()

        assert connected.state is ControllerState.CLOSED
        assert await fake_mpv.command() == ["quit"]
        assert fake_mpv.commands.empty()
        await asyncio.wait_for(connected.wait_closed(), timeout=1)

    @pytest.mark.asyncio
    async def test_stop_before_start(self, controller):
        await controller.stop()

        assert controller.state is ControllerState.CLOSED
        assert await controller.next_event() is None

    @pytest.mark.asyncio
    async def test_stop_reaps_process(self, fake_mpv, tmp_path):
        """The spawned process should be killed and reaped on stop."""
        script = tmp_path / "fake-mpv"
        script.write_text("#!/bin/sh\nexec sleep 30\n")
        script.chmod(0o755)
        player = MpvController(
            _settings(fake_mpv.path, mpv_path=str(script), disable_process=False), FAST_RECONNECT
        )

        await player.start()
        process = player._process
        assert player.pid is not None

        await player.stop()

        assert process.returncode is not None
        assert player.pid is None


# =============================================================================
# Startup Failures
# =============================================================================


class TestStartFailures:
    """Tests for startup-fatal errors."""

    @pytest.mark.asyncio
    async def test_spawn_failure(self, socket_dir):
        player = MpvController(
            _settings(
                str(socket_dir / "none.sock"),
                mpv_path=str(socket_dir / "no-such-mpv"),
                disable_process=False,
            ),
            FAST_RECONNECT,
        )

        with pytest.raises(PlayerStartError) as exc_info:
            await player.start()

        assert "no-such-mpv" in exc_info.value.message
        assert player.state is ControllerState.CLOSED
        assert await player.next_event() is None

    @pytest.mark.asyncio
    async def test_exhausted_retries(self, socket_dir):
        """An unreachable socket should fail after the configured attempts."""
        delays: list[float] = []

        async def fake_sleep(delay):
            delays.append(delay)

        async def refuse():
            raise ConnectionRefusedError("nobody home")

        player = MpvController(
            _settings(str(socket_dir / "none.sock")),
            ReconnectSettings(max_attempts=3),
            dial=refuse,
            sleep=fake_sleep,
            rng=random.Random(0),
        )

        with pytest.raises(ReconnectExhaustedError) as exc_info:
            await player.start()

        assert exc_info.value.attempts == 3
        assert len(delays) == 2
        assert player.state is ControllerState.CLOSED

    @pytest.mark.asyncio
    async def test_missing_socket_with_default_dial(self, socket_dir):
        player = MpvController(_settings(str(socket_dir / "none.sock")), FAST_RECONNECT)

        with pytest.raises(ReconnectExhaustedError):
            await player.start()

    @pytest.mark.asyncio
    async def test_stop_during_start_aborts_retries(self, socket_dir):
        """A stop while connecting should end start without exhausting the schedule."""
        calls = {"count": 0}
        player: MpvController

        async def dial_then_stop():
            calls["count"] += 1
            await player.stop()
            raise ConnectionRefusedError("not yet")

        async def no_sleep(delay):
            return None

        player = MpvController(
            _settings(str(socket_dir / "none.sock")),
            FAST_RECONNECT,
            dial=dial_then_stop,
            sleep=no_sleep,
        )

        with pytest.raises(PlayerStartError) as exc_info:
            await player.start()

        assert not isinstance(exc_info.value, ReconnectExhaustedError)
        assert calls["count"] == 1
        assert player.state is ControllerState.CLOSED

    @pytest.mark.asyncio
    async def test_start_after_failure(self, fake_mpv):
        """A failed start should leave the controller restartable."""
        attempts = {"count": 0}
        player: MpvController

        async def flaky_dial():
            attempts["count"] += 1
            if attempts["count"] <= FAST_RECONNECT.max_attempts:
                raise ConnectionRefusedError("warming up")
            return await player._dial_unix()

        player = MpvController(_settings(fake_mpv.path), FAST_RECONNECT, dial=flaky_dial)

        with pytest.raises(ReconnectExhaustedError):
            await player.start()
        await player.start()

        assert player.state is ControllerState.CONNECTED
        await player.stop()
