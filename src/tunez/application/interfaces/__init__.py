"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from tunez.application.interfaces.player_transport import PlayerTransport
from tunez.application.interfaces.stream_provider import StreamInfo, StreamProvider

__all__ = [
    "PlayerTransport",
    "StreamInfo",
    "StreamProvider",
]
