"""mpv process control over its JSON IPC socket."""

from tunez.infrastructure.mpv.controller import MpvController
from tunez.infrastructure.mpv.reconnector import BackoffPolicy, Reconnector

__all__ = [
    "MpvController",
    "BackoffPolicy",
    "Reconnector",
]
