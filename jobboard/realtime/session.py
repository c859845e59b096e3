"""Protocol handler for one authenticated live-channel connection.

Frames are JSON objects ``{"event": ..., "data": ...}`` in both directions.
Clients may send ``register`` (re-join their own room) and ``ping``.
"""

import json
from typing import Any, Dict, Optional

from jobboard.auth import Actor
from jobboard.logging import get_logger, log_context
from jobboard.utils.timestamps import format_timestamp, utc_now

from . import events
from .broadcaster import Broadcaster, Connection, encode_frame, room_for

logger = get_logger(__name__, component="realtime")


class RealtimeSession:
    """Handles the messages of one connection for its lifetime."""

    def __init__(self, connection: Connection, actor: Actor, broadcaster: Broadcaster):
        self.connection = connection
        self.actor = actor
        self.broadcaster = broadcaster
        self.room = room_for(actor.user_id, actor.role)

    def open(self) -> None:
        """Admit the connection into its identity's room."""
        self.broadcaster.registry.join(self.room, self.connection)
        logger.info(
            "Client connected",
            extra={
                "event": "realtime.connection.opened",
                "user_id": self.actor.user_id,
                "role": self.actor.role.value,
                "room": self.room,
            },
        )

    def close(self) -> None:
        rooms = self.broadcaster.registry.leave_all(self.connection)
        logger.info(
            "Client disconnected",
            extra={
                "event": "realtime.connection.closed",
                "user_id": self.actor.user_id,
                "rooms": ",".join(rooms),
            },
        )

    async def send(self, event: str, data: Any) -> None:
        await self.connection.send_text(encode_frame(event, data))

    async def handle_text(self, raw: str) -> None:
        """Dispatch one client frame. Malformed or unknown frames are ignored."""
        try:
            message = json.loads(raw)
        except ValueError:
            logger.warning(
                "Ignoring non-JSON frame",
                extra={"event": "realtime.frame.invalid", "user_id": self.actor.user_id},
            )
            return

        if not isinstance(message, dict) or not isinstance(message.get("event"), str):
            logger.warning(
                "Ignoring frame without an event name",
                extra={"event": "realtime.frame.invalid", "user_id": self.actor.user_id},
            )
            return

        event = message["event"]
        data = message.get("data")
        with log_context(realtime_event=event, user_id=self.actor.user_id):
            if event == events.REGISTER:
                await self._handle_register(data if isinstance(data, dict) else {})
            elif event == events.PING:
                await self.send(events.PONG, {"time": format_timestamp(utc_now())})
            else:
                logger.debug("Ignoring unknown event", extra={"event": "realtime.frame.unknown"})

    async def _handle_register(self, data: Dict[str, Any]) -> None:
        requested = _as_int(data.get("userId"))
        if requested != self.actor.user_id:
            logger.warning(
                "Refused registration for another user's room",
                extra={"event": "realtime.register.refused", "requested_user_id": data.get("userId")},
            )
            await self.send(
                events.REGISTERED,
                {"ok": False, "error": "Cannot register for another user's room"},
            )
            return

        self.broadcaster.registry.join(self.room, self.connection)
        logger.debug("Client registered", extra={"event": "realtime.register.accepted", "room": self.room})
        await self.send(events.REGISTERED, {"ok": True, "room": self.room})


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
