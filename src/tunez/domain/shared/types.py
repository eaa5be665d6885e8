"""Reusable Pydantic Annotated types for domain-wide validation.

Every constrained type used across bounded contexts is defined here once,
so models can simply annotate their fields::

    from tunez.domain.shared.types import NonEmptyStr, VolumePercent

    class MyModel(BaseModel):
        name: NonEmptyStr
        volume: VolumePercent
"""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

# ── Numeric constraints ─────────────────────────────────────────────

NonNegativeInt = Annotated[int, Field(ge=0)]
"""Integer >= 0."""

PositiveInt = Annotated[int, Field(gt=0)]
"""Integer > 0."""

NonNegativeFloat = Annotated[float, Field(ge=0.0)]
"""Float >= 0.0."""

PositiveFloat = Annotated[float, Field(gt=0.0)]
"""Float > 0.0."""

UnitInterval = Annotated[float, Field(ge=0.0, le=1.0)]
"""Float in [0.0, 1.0], used for jitter ratios."""

VolumePercent = Annotated[int, Field(ge=0, le=100)]
"""Player volume in percent: 0 … 100."""


# ── String constraints ──────────────────────────────────────────────

NonEmptyStr = Annotated[str, Field(min_length=1)]
"""String with at least one character."""

TrackTitleStr = Annotated[str, Field(min_length=1, max_length=500)]
"""Track title: 1-500 characters."""


# ── Domain-specific numeric constraints ─────────────────────────────

DurationMs = Annotated[int, Field(ge=0, le=86_400_000)]
"""Track duration in milliseconds: 0 … 24 hours."""

QueueIndexInt = Annotated[int, Field(ge=-1)]
"""Cursor position; -1 means "no current track"."""

YearInt = Annotated[int, Field(ge=0, le=9999)]
"""Release year."""


# ── Settings-specific constraints ──────────────────────────────────

BusyTimeoutMs = Annotated[int, Field(ge=1000, le=30000)]
"""Database busy timeout in milliseconds: 1 000 … 30 000."""

ConnectionTimeoutS = Annotated[int, Field(ge=1, le=60)]
"""Database connection timeout in seconds: 1 … 60."""

MaxQueueSize = Annotated[int, Field(gt=0, le=1_000_000)]
"""Maximum queue size: 1 … 1 000 000."""

EventBufferSize = Annotated[int, Field(ge=1, le=4096)]
"""Bounded player event queue capacity."""

RetryAttempts = Annotated[int, Field(ge=1, le=100)]
"""Dial attempts in the reconnect schedule."""
