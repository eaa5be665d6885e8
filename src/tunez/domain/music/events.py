"""Normalized player events for the music bounded context."""

from __future__ import annotations

from pydantic import BaseModel, model_validator

from tunez.domain.shared.messages import ErrorMessages
from tunez.domain.shared.types import NonNegativeFloat

from .value_objects import EndReason

_REPORTABLE_FIELDS = ("time_pos", "duration", "paused", "volume", "muted", "end_reason", "error")


class PlayerEvent(BaseModel):
    """One notification from the player.

    Every optional field is ``None`` unless the notification reported it;
    ``None`` means "unchanged", never zero. ``ended`` is only ever true for
    a natural end of media.
    """

    model_config = {"frozen": True}

    time_pos: float | None = None
    duration: NonNegativeFloat | None = None
    paused: bool | None = None
    volume: float | None = None
    muted: bool | None = None

    ended: bool = False
    end_reason: EndReason | None = None
    error: str | None = None

    @model_validator(mode="after")
    def _ended_only_on_eof(self) -> PlayerEvent:
        if self.ended and self.end_reason is not EndReason.EOF:
            raise ValueError(ErrorMessages.ENDED_REQUIRES_EOF)
        return self

    @classmethod
    def end_file(cls, reason: EndReason, error: str | None = None) -> PlayerEvent:
        """Build an end-of-file event; only ``eof`` is marked as ended."""
        return cls(ended=reason.is_natural, end_reason=reason, error=error)

    @classmethod
    def failure(cls, error: str) -> PlayerEvent:
        return cls(error=error)

    @property
    def changed_fields(self) -> list[str]:
        """Names of the optional fields this event reported."""
        return [name for name in _REPORTABLE_FIELDS if getattr(self, name) is not None]

    @property
    def is_error(self) -> bool:
        return self.error is not None
