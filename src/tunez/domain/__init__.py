# ruff: noqa: N999
"""
Domain Layer

Pure playback logic organized by bounded contexts:
- shared/: Cross-cutting types, messages and exceptions
- music/: Tracks, the play queue, player events and the persistence port
"""

from tunez.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
