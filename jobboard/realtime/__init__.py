"""Real-time channel: room registry, broadcaster and per-connection protocol."""

from . import events
from .broadcaster import Broadcaster, RoomRegistry, encode_frame, room_for
from .session import RealtimeSession

__all__ = [
    "events",
    "Broadcaster",
    "RoomRegistry",
    "RealtimeSession",
    "encode_frame",
    "room_for",
]
