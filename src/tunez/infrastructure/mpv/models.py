"""Wire models for the mpv JSON IPC protocol.

Outbound: one ``{"command": [verb, arg, ...]}`` object per line.
Inbound: one JSON object per line, either an event (``"event"`` key) or a
reply to a command (``"request_id"``/``"error"``), which the controller ignores.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from tunez.domain.music.events import PlayerEvent
from tunez.domain.music.value_objects import EndReason
from tunez.domain.shared.constants import MpvEvents, MpvProperties
from tunez.domain.shared.exceptions import IpcDecodeError
from tunez.domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)


class IpcMessage(BaseModel):
    """One decoded inbound line; unknown keys are ignored."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    event: str | None = None

    # property-change
    id: int | None = None
    name: str | None = None
    data: Any = None

    # end-file
    reason: str | None = None
    file_error: str | None = None

    # command reply
    request_id: int | None = None
    error: str | None = None

    @property
    def is_event(self) -> bool:
        return self.event is not None


def encode_command(*args: Any) -> bytes:
    """Serialize one command as a newline-terminated JSON line."""
    payload = json.dumps({"command": list(args)}, separators=(",", ":"))
    return payload.encode("utf-8") + b"\n"


def decode_line(line: bytes) -> IpcMessage:
    """Parse one inbound line.

    Raises:
        IpcDecodeError: If the line is not a JSON object of the expected shape.
    """
    try:
        payload = json.loads(line)
    except (UnicodeDecodeError, ValueError) as e:
        raise IpcDecodeError(line, ErrorMessages.IPC_NOT_JSON) from e

    if not isinstance(payload, dict):
        raise IpcDecodeError(line, ErrorMessages.IPC_NOT_OBJECT)

    try:
        return IpcMessage.model_validate(payload)
    except ValidationError as e:
        raise IpcDecodeError(line, str(e.errors()[0]["msg"])) from e


def _as_number(value: Any) -> float | None:
    # bool is an int subclass but never a valid numeric property value.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _as_bool(value: Any) -> bool | None:
    return value if isinstance(value, bool) else None


_PROPERTY_FIELDS = {
    MpvProperties.TIME_POS: ("time_pos", _as_number),
    MpvProperties.DURATION: ("duration", _as_number),
    MpvProperties.PAUSE: ("paused", _as_bool),
    MpvProperties.VOLUME: ("volume", _as_number),
    MpvProperties.MUTE: ("muted", _as_bool),
}


def to_player_event(message: IpcMessage) -> PlayerEvent | None:
    """Normalize an inbound message into a ``PlayerEvent``.

    Returns ``None`` for replies, untracked events and property values that
    are missing or of the wrong type.
    """
    if message.event == MpvEvents.PROPERTY_CHANGE:
        mapping = _PROPERTY_FIELDS.get(message.name or "")
        if mapping is None:
            return None
        field, convert = mapping
        value = convert(message.data)
        if value is None:
            return None
        if field == "duration" and value < 0:
            return None
        return PlayerEvent(**{field: value})

    if message.event == MpvEvents.END_FILE:
        try:
            reason = EndReason(message.reason)
        except ValueError:
            logger.warning(LogTemplates.IPC_UNKNOWN_END_REASON, message.reason)
            return None
        return PlayerEvent.end_file(reason, error=message.file_error)

    return None
