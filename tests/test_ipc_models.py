"""Unit tests for the mpv IPC wire models."""

from __future__ import annotations

import json

import pytest

from tunez.domain.music.events import PlayerEvent
from tunez.domain.music.value_objects import EndReason
from tunez.domain.shared.exceptions import IpcDecodeError
from tunez.infrastructure.mpv.models import IpcMessage, decode_line, encode_command, to_player_event


def _event(payload: dict) -> PlayerEvent | None:
    return to_player_event(decode_line(json.dumps(payload).encode()))


# =============================================================================
# Encoding
# =============================================================================


class TestEncodeCommand:
    """Tests for outbound command lines."""

    def test_single_line_json(self):
        line = encode_command("loadfile", "/music/a.flac", "replace")

        assert line.endswith(b"\n")
        assert line.count(b"\n") == 1
        assert json.loads(line) == {"command": ["loadfile", "/music/a.flac", "replace"]}

    def test_compact_separators(self):
        assert encode_command("quit") == b'{"command":["quit"]}\n'

    def test_preserves_argument_types(self):
        line = encode_command("set_property", "http-header-fields", ["A: 1", "B: 2"])

        assert json.loads(line)["command"][2] == ["A: 1", "B: 2"]

    def test_newlines_in_arguments_are_escaped(self):
        """Embedded newlines must not split the command across lines."""
        line = encode_command("loadfile", "weird\nname.mp3")

        assert line.count(b"\n") == 1


# =============================================================================
# Decoding
# =============================================================================


class TestDecodeLine:
    """Tests for inbound line parsing."""

    def test_decodes_event(self):
        message = decode_line(b'{"event":"end-file","reason":"eof","playlist_entry_id":1}\n')

        assert isinstance(message, IpcMessage)
        assert message.is_event
        assert message.reason == "eof"

    def test_decodes_reply(self):
        message = decode_line(b'{"request_id":0,"error":"success","data":null}')

        assert not message.is_event
        assert message.error == "success"

    @pytest.mark.parametrize(
        ("line", "reason"),
        [
            (b"not json", "invalid JSON"),
            (b"\xff\xfe", "invalid JSON"),
            (b"[1, 2]", "not a JSON object"),
            (b'"text"', "not a JSON object"),
        ],
    )
    def test_rejects_malformed_lines(self, line, reason):
        with pytest.raises(IpcDecodeError) as exc_info:
            decode_line(line)

        assert reason in exc_info.value.message
        assert exc_info.value.line == line

    def test_rejects_wrongly_typed_fields(self):
        with pytest.raises(IpcDecodeError):
            decode_line(b'{"event": 5}')


# =============================================================================
# Normalization
# =============================================================================


class TestToPlayerEvent:
    """Tests for mapping protocol messages onto player events."""

    @pytest.mark.parametrize(
        ("name", "data", "field", "expected"),
        [
            ("time-pos", 12.5, "time_pos", 12.5),
            ("time-pos", 3, "time_pos", 3.0),
            ("duration", 240.0, "duration", 240.0),
            ("pause", True, "paused", True),
            ("volume", 55, "volume", 55.0),
            ("mute", False, "muted", False),
        ],
    )
    def test_property_change(self, name, data, field, expected):
        event = _event({"event": "property-change", "id": 1, "name": name, "data": data})

        assert getattr(event, field) == expected
        assert event.changed_fields == [field]
        assert event.ended is False

    @pytest.mark.parametrize(
        ("name", "data"),
        [
            ("time-pos", None),  # unavailable, e.g. while idle
            ("time-pos", True),  # bool is not a number
            ("duration", "long"),
            ("duration", -1.0),
            ("pause", 1),  # numbers are not flags
            ("mute", "yes"),
            ("filename", "a.mp3"),  # not observed
        ],
    )
    def test_unusable_property_values_are_dropped(self, name, data):
        """Missing, wrongly typed or unobserved values should produce no event."""
        assert _event({"event": "property-change", "name": name, "data": data}) is None

    def test_negative_time_pos_is_kept(self):
        event = _event({"event": "property-change", "name": "time-pos", "data": -0.02})

        assert event.time_pos == pytest.approx(-0.02)

    def test_end_file_eof_is_natural_end(self):
        event = _event({"event": "end-file", "reason": "eof"})

        assert event.ended is True
        assert event.end_reason is EndReason.EOF

    @pytest.mark.parametrize("reason", ["stop", "quit", "error", "redirect"])
    def test_other_end_reasons_do_not_end(self, reason):
        """Only eof marks a natural end."""
        event = _event({"event": "end-file", "reason": reason})

        assert event.ended is False
        assert event.end_reason is EndReason(reason)

    def test_end_file_error_is_reported(self):
        event = _event({"event": "end-file", "reason": "error", "file_error": "loading failed"})

        assert event.is_error
        assert event.error == "loading failed"

    def test_unknown_end_reason_is_dropped(self, caplog):
        with caplog.at_level("WARNING"):
            event = _event({"event": "end-file", "reason": "exploded"})

        assert event is None
        assert "exploded" in caplog.text

    @pytest.mark.parametrize(
        "payload",
        [
            {"request_id": 1, "error": "success"},
            {"event": "start-file"},
            {"event": "idle"},
        ],
    )
    def test_replies_and_untracked_events_are_ignored(self, payload):
        assert _event(payload) is None


class TestPlayerEvent:
    """Tests for the normalized event model."""

    def test_ended_requires_eof(self):
        with pytest.raises(ValueError):
            PlayerEvent(ended=True, end_reason=EndReason.STOP)

    def test_failure(self):
        event = PlayerEvent.failure("decode: invalid JSON")

        assert event.is_error
        assert event.changed_fields == ["error"]
        assert event.ended is False
