"""Room registry and broadcaster for the live channel.

Pushes are best effort and at most once: a failed send drops the connection,
and nothing is queued for clients that are offline (they catch up from the
notification ledger).

The room table lives in this process only. Running several server instances
would need a pub/sub backend behind the same interface.
"""

import asyncio
import json
from typing import Any, Dict, List, Optional, Protocol, Set

from jobboard.domain.models import UserRole
from jobboard.logging import get_logger

logger = get_logger(__name__, component="realtime")


class Connection(Protocol):
    """The part of a WebSocket the broadcaster needs."""

    async def send_text(self, data: str) -> None: ...


def room_for(user_id: int, role: UserRole) -> str:
    """
    Room of an identity: ``recruiter_<id>`` for recruiters, ``user_<id>`` otherwise.

    Example:
        >>> room_for(7, UserRole.RECRUITER)
        'recruiter_7'
    """
    if UserRole(role) == UserRole.RECRUITER:
        return f"recruiter_{user_id}"
    return f"user_{user_id}"


def encode_frame(event: str, data: Any) -> str:
    """Serialize one ``{"event", "data"}`` frame."""
    return json.dumps({"event": event, "data": data}, ensure_ascii=False)


class RoomRegistry:
    """In-memory room -> connections table, owned by one Broadcaster."""

    def __init__(self):
        self._rooms: Dict[str, Set[Connection]] = {}

    def join(self, room: str, connection: Connection) -> None:
        self._rooms.setdefault(room, set()).add(connection)

    def leave(self, room: str, connection: Connection) -> None:
        members = self._rooms.get(room)
        if members is None:
            return
        members.discard(connection)
        if not members:
            del self._rooms[room]

    def leave_all(self, connection: Connection) -> List[str]:
        """Remove a connection from every room. Returns the rooms it left."""
        left = [room for room, members in self._rooms.items() if connection in members]
        for room in left:
            self.leave(room, connection)
        return left

    def members(self, room: str) -> List[Connection]:
        return list(self._rooms.get(room, ()))

    def rooms_of(self, connection: Connection) -> List[str]:
        return sorted(room for room, members in self._rooms.items() if connection in members)

    def all_connections(self) -> List[Connection]:
        connections: Set[Connection] = set()
        for members in self._rooms.values():
            connections.update(members)
        return list(connections)

    @property
    def room_count(self) -> int:
        return len(self._rooms)


class Broadcaster:
    """Pushes events to rooms of connected clients.

    Nothing is sent until ``bind_loop`` is called by the running server; before
    that (CLI commands, tests without a server) every emit is a no-op. Emit
    methods never raise.
    """

    def __init__(self, registry: Optional[RoomRegistry] = None):
        self.registry = registry or RoomRegistry()
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def bind_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        logger.info("Broadcaster bound to event loop", extra={"event": "broadcaster.bound"})

    def unbind_loop(self) -> None:
        self._loop = None

    @property
    def is_running(self) -> bool:
        return self._loop is not None and not self._loop.is_closed()

    async def emit_to_room(self, room: str, event: str, data: Any) -> int:
        """Send an event to every connection in a room. Returns how many received it."""
        if not self.is_running:
            logger.debug(
                "No server running, broadcast skipped",
                extra={"event": "broadcast.skipped", "room": room, "broadcast_event": event},
            )
            return 0
        return await self._deliver(self.registry.members(room), event, data, room=room)

    async def emit_to_user(self, user_id: int, role: UserRole, event: str, data: Any) -> int:
        """Send an event to the room of one identity."""
        return await self.emit_to_room(room_for(user_id, role), event, data)

    async def emit_all(self, event: str, data: Any) -> int:
        """Send an event to every connected client."""
        if not self.is_running:
            logger.debug(
                "No server running, broadcast skipped",
                extra={"event": "broadcast.skipped", "broadcast_event": event},
            )
            return 0
        return await self._deliver(self.registry.all_connections(), event, data, room="*")

    def emit_from_thread(self, event: str, data: Any, room: Optional[str] = None) -> None:
        """Schedule a broadcast from a thread that isn't running the event loop.

        Fire and forget: the caller does not wait for delivery.
        """
        if not self.is_running:
            logger.debug(
                "No server running, broadcast skipped",
                extra={"event": "broadcast.skipped", "room": room, "broadcast_event": event},
            )
            return

        if room is None:
            coroutine = self.emit_all(event, data)
        else:
            coroutine = self.emit_to_room(room, event, data)
        try:
            asyncio.run_coroutine_threadsafe(coroutine, self._loop)
        except RuntimeError as e:
            coroutine.close()
            logger.warning(
                f"Could not schedule broadcast: {e}",
                extra={"event": "broadcast.schedule_failed", "broadcast_event": event},
            )

    async def _deliver(self, connections: List[Connection], event: str, data: Any, room: str) -> int:
        if not connections:
            return 0

        try:
            frame = encode_frame(event, data)
        except (TypeError, ValueError) as e:
            logger.error(
                f"Broadcast payload is not serializable: {e}",
                extra={"event": "broadcast.encode_failed", "room": room, "broadcast_event": event},
            )
            return 0

        delivered = 0
        for connection in connections:
            try:
                await connection.send_text(frame)
                delivered += 1
            except Exception as e:
                self.registry.leave_all(connection)
                logger.warning(
                    f"Dropping dead connection: {e}",
                    extra={
                        "event": "broadcast.connection_dropped",
                        "room": room,
                        "broadcast_event": event,
                        "error_type": type(e).__name__,
                    },
                )

        logger.debug(
            "Broadcast delivered",
            extra={
                "event": "broadcast.delivered",
                "room": room,
                "broadcast_event": event,
                "delivered": delivered,
            },
        )
        return delivered
