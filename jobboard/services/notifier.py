"""Notifier: ledger write followed by a live push, for one recipient.

The ledger write and the broadcast are independent effects. Neither failure
propagates to the business operation that triggered the notification.
"""

from typing import Any, Dict, Optional

from fastapi.concurrency import run_in_threadpool

from jobboard.domain.models import Notification, NotificationType, UserRole
from jobboard.logging import get_logger
from jobboard.notifications import MessageRenderer, NotificationLedger, build_payload
from jobboard.realtime import Broadcaster

logger = get_logger(__name__, component="notifier")


class Notifier:
    """Couples the notification ledger with the broadcaster."""

    def __init__(
        self,
        ledger: NotificationLedger,
        broadcaster: Broadcaster,
        renderer: Optional[MessageRenderer] = None,
    ):
        self.ledger = ledger
        self.broadcaster = broadcaster
        self.renderer = renderer or MessageRenderer()

    def render(self, notification_type: NotificationType, **context: Any) -> str:
        return self.renderer.render(notification_type, **context)

    async def notify(
        self,
        recipient_id: int,
        recipient_role: UserRole,
        notification_type: NotificationType,
        payload: Dict[str, Any],
        event: str,
        event_data: Any,
        message: Optional[str] = None,
        **message_context: Any,
    ) -> Optional[Notification]:
        """Record a notification for one recipient, then push the live event.

        Args:
            recipient_id: User to notify
            recipient_role: Selects the recipient's room
            notification_type: Ledger type tag
            payload: Fields of the typed payload (snake_case)
            event: Live event name
            event_data: Live event body
            message: Pre-rendered message; rendered from payload and
                message_context when omitted
            **message_context: Extra template variables (job_title, company, ...)

        Returns:
            The persisted notification, or None if the ledger write failed
        """
        notification = None
        try:
            typed_payload = build_payload(notification_type, **payload)
            if message is None:
                message = self.render(notification_type, **{**payload, **message_context})
            notification = await run_in_threadpool(
                self.ledger.create,
                recipient_id,
                notification_type,
                message,
                typed_payload.to_wire(),
            )
        except Exception as e:
            logger.error(
                f"Failed to record notification: {e}",
                exc_info=True,
                extra={
                    "event": "notification.create_failed",
                    "user_id": recipient_id,
                    "notification_type": NotificationType(notification_type).value,
                },
            )

        await self.push(recipient_id, recipient_role, event, event_data)
        return notification

    async def push(self, recipient_id: int, recipient_role: UserRole, event: str, data: Any) -> None:
        """Live push only, with no ledger entry."""
        try:
            await self.broadcaster.emit_to_user(recipient_id, recipient_role, event, data)
        except Exception as e:
            logger.warning(
                f"Broadcast failed: {e}",
                exc_info=True,
                extra={"event": "broadcast.failed", "user_id": recipient_id, "broadcast_event": event},
            )

    async def announce(self, event: str, data: Any) -> None:
        """Live push to every connected client."""
        try:
            await self.broadcaster.emit_all(event, data)
        except Exception as e:
            logger.warning(
                f"Broadcast failed: {e}",
                exc_info=True,
                extra={"event": "broadcast.failed", "broadcast_event": event},
            )
